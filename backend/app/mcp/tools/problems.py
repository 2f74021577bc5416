"""
MCP Problems tool: read access to problems an agent should work on.
"""

from typing import Any, Callable, Dict

from loguru import logger

from app.mcp.client import TrackerAPIClient, get_api_client
from app.utils.formatters import truncate_text


def describe_problem(problem: Dict[str, Any]) -> str:
    research = problem.get("research") or []
    experiments = problem.get("experiments") or []
    approved_research = sum(1 for r in research if r.get("isApproved"))
    approved_experiments = sum(1 for e in experiments if e.get("isApproved"))
    return (
        f"Problem #{problem['id']}: {problem['brief']}\n"
        f"  investigate: {'yes' if problem.get('isInvestigate') else 'no'}\n"
        f"  research: {len(research)} ({approved_research} approved)\n"
        f"  experiments: {len(experiments)} ({approved_experiments} approved)"
    )


class ProblemsTool:
    """
    Problems tool for MCP.

    Lists the problems flagged for investigation and fetches single problems
    with their research and experiments.
    """

    name = "problems"
    description = "Read problems flagged for investigation"

    def __init__(self, client_factory: Callable[[], TrackerAPIClient] = get_api_client):
        self.client_factory = client_factory

    async def list_problems_to_investigate(self) -> str:
        async with self.client_factory() as client:
            problems = await client.list_problems_to_investigate()

        logger.info(f"MCP listProblemsToInvestigate: {len(problems)} problems")
        if not problems:
            return "No problems are currently flagged for investigation."

        lines = [f"{len(problems)} problem(s) to investigate:"]
        for problem in problems:
            lines.append(f"- #{problem['id']}: {truncate_text(problem['brief'], 120)}")
        return "\n".join(lines)

    async def get_problem(self, problem_id: int) -> str:
        async with self.client_factory() as client:
            problem = await client.get_problem(problem_id)

        logger.info(f"MCP getProblem: problem={problem_id}")
        return describe_problem(problem)
