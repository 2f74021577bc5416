"""
MCP tools for external AI agents.

Each tool class groups the passthrough calls for one tracker resource.
"""

from app.mcp.tools.problems import ProblemsTool
from app.mcp.tools.research import ResearchTool
from app.mcp.tools.experiments import ExperimentsTool

__all__ = [
    "ProblemsTool",
    "ResearchTool",
    "ExperimentsTool",
]
