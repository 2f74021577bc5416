"""
MCP Research tool: submit findings and read the approved ones.
"""

from typing import Any, Callable, Dict, List

from loguru import logger

from app.mcp.client import TrackerAPIClient, get_api_client
from app.utils.formatters import truncate_text


def _research_lines(items: List[Dict[str, Any]]) -> List[str]:
    return [
        f"- #{item['id']} [{'approved' if item.get('isApproved') else 'pending'}] "
        f"{truncate_text(item['content'], 200)}"
        for item in items
    ]


class ResearchTool:
    """
    Research tool for MCP.

    New findings are created unapproved; only a human can approve them, so
    agents should build on the output of ``get_approved_research``.
    """

    name = "research"
    description = "Add research findings and read approved ones"

    def __init__(self, client_factory: Callable[[], TrackerAPIClient] = get_api_client):
        self.client_factory = client_factory

    async def add_research(self, problem_id: int, content: str) -> str:
        async with self.client_factory() as client:
            research = await client.add_research(problem_id, content)

        logger.info(f"MCP addResearch: problem={problem_id} research={research['id']}")
        return (
            f"Added research #{research['id']} to problem #{problem_id}. "
            "It is awaiting human approval."
        )

    async def list_research(self, problem_id: int) -> str:
        async with self.client_factory() as client:
            items = await client.list_research(problem_id)

        if not items:
            return f"Problem #{problem_id} has no research yet."
        return "\n".join([f"Research for problem #{problem_id}:"] + _research_lines(items))

    async def get_approved_research(self, problem_id: int) -> str:
        async with self.client_factory() as client:
            items = await client.get_approved_research(problem_id)

        if not items:
            return f"Problem #{problem_id} has no approved research."
        return "\n".join([f"Approved research for problem #{problem_id}:"] + _research_lines(items))
