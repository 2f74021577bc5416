"""
MCP (Model Context Protocol) server for external AI agents.

Exposes a fixed catalog of tools over stdio. Each tool is a passthrough to one
call of the tracker REST API; business rules (approval defaults, status
transitions, not-found handling) are enforced there. Tool argument names are
part of the agent-facing contract and therefore use the API's camelCase.
"""

import json
import sys
from typing import Optional

from loguru import logger
from mcp.server.fastmcp import FastMCP

from app.core.config import setup_logging
from app.mcp.client import get_api_client
from app.mcp.config import mcp_settings
from app.mcp.tools import ExperimentsTool, ProblemsTool, ResearchTool

# Create the MCP server instance
mcp = FastMCP("discovery-tracker")

problems_tool = ProblemsTool()
research_tool = ResearchTool()
experiments_tool = ExperimentsTool()


# =============================================================================
# Problems
# =============================================================================

@mcp.tool(
    name="listProblemsToInvestigate",
    description="List the problems a human has flagged for active research.",
)
async def list_problems_to_investigate() -> str:
    return await problems_tool.list_problems_to_investigate()


@mcp.tool(
    name="getProblem",
    description="Get a problem with a summary of its research and experiments.",
)
async def get_problem(id: int) -> str:  # noqa: A002
    return await problems_tool.get_problem(id)


# =============================================================================
# Research
# =============================================================================

@mcp.tool(
    name="addResearch",
    description="Add a research finding to a problem. Findings start unapproved.",
)
async def add_research(problemId: int, content: str) -> str:  # noqa: N803
    return await research_tool.add_research(problemId, content)


@mcp.tool(
    name="listResearch",
    description="List all research findings for a problem, approved or not.",
)
async def list_research(problemId: int) -> str:  # noqa: N803
    return await research_tool.list_research(problemId)


@mcp.tool(
    name="getApprovedResearch",
    description="List the research findings a human has approved for a problem.",
)
async def get_approved_research(problemId: int) -> str:  # noqa: N803
    return await research_tool.get_approved_research(problemId)


# =============================================================================
# Experiments
# =============================================================================

@mcp.tool(
    name="addExperiment",
    description="Propose an experiment for a problem. It starts unapproved and NOT STARTED.",
)
async def add_experiment(problemId: int, proposal: str) -> str:  # noqa: N803
    return await experiments_tool.add_experiment(problemId, proposal)


@mcp.tool(
    name="getApprovedExperiments",
    description="List the experiments a human has approved for a problem.",
)
async def get_approved_experiments(problemId: int) -> str:  # noqa: N803
    return await experiments_tool.get_approved_experiments(problemId)


@mcp.tool(
    name="startExperiment",
    description="Mark an approved experiment as IN PROGRESS. Call this before completeExperiment.",
)
async def start_experiment(problemId: int, experimentId: int) -> str:  # noqa: N803
    return await experiments_tool.start_experiment(problemId, experimentId)


@mcp.tool(
    name="completeExperiment",
    description=(
        "Mark an experiment as FINISHED, optionally recording a link to the results. "
        "The experiment must already be IN PROGRESS; use startExperiment first."
    ),
)
async def complete_experiment(problemId: int, experimentId: int, url: Optional[str] = None) -> str:  # noqa: N803
    return await experiments_tool.complete_experiment(problemId, experimentId, url=url)


# =============================================================================
# Resources
# =============================================================================

@mcp.resource(
    "problems://investigate",
    name="problems-to-investigate",
    description="JSON list of problems flagged for investigation",
    mime_type="application/json",
)
async def problems_to_investigate_resource() -> str:
    async with get_api_client() as client:
        return json.dumps(await client.list_problems_to_investigate())


@mcp.resource(
    "problems://{problem_id}",
    name="problem",
    description="JSON document of a problem with its research and experiments",
    mime_type="application/json",
)
async def problem_resource(problem_id: str) -> str:
    async with get_api_client() as client:
        return json.dumps(await client.get_problem(int(problem_id)))


def main():
    """Run the MCP server on stdio."""
    # stdout carries JSON-RPC; logs go to stderr
    setup_logging(level=mcp_settings.LOG_LEVEL, log_file=None, stream=sys.stderr)
    logger.info(f"Discovery Tracker MCP server starting (API: {mcp_settings.API_URL})")
    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Discovery Tracker MCP server stopped")


if __name__ == "__main__":
    main()
