"""
MCP Experiments tool: propose experiments and report their progress.
"""

from typing import Callable, Optional

from loguru import logger

from app.mcp.client import TrackerAPIClient, get_api_client
from app.utils.formatters import truncate_text


class ExperimentsTool:
    """
    Experiments tool for MCP.

    Agents propose experiments, wait for human approval, then mark them
    IN PROGRESS and FINISHED (with a link to the results).
    """

    name = "experiments"
    description = "Propose experiments and track their execution"

    def __init__(self, client_factory: Callable[[], TrackerAPIClient] = get_api_client):
        self.client_factory = client_factory

    async def add_experiment(self, problem_id: int, proposal: str) -> str:
        async with self.client_factory() as client:
            experiment = await client.add_experiment(problem_id, proposal)

        logger.info(f"MCP addExperiment: problem={problem_id} experiment={experiment['id']}")
        return (
            f"Proposed experiment #{experiment['id']} for problem #{problem_id} "
            f"(status {experiment['status']}). It is awaiting human approval."
        )

    async def get_approved_experiments(self, problem_id: int) -> str:
        async with self.client_factory() as client:
            items = await client.get_approved_experiments(problem_id)

        if not items:
            return f"Problem #{problem_id} has no approved experiments."

        lines = [f"Approved experiments for problem #{problem_id}:"]
        for item in items:
            line = f"- #{item['id']} [{item['status']}] {truncate_text(item['proposal'], 200)}"
            if item.get("url"):
                line += f" ({item['url']})"
            lines.append(line)
        return "\n".join(lines)

    async def start_experiment(self, problem_id: int, experiment_id: int) -> str:
        async with self.client_factory() as client:
            experiment = await client.start_experiment(problem_id, experiment_id)

        logger.info(f"MCP startExperiment: problem={problem_id} experiment={experiment_id}")
        return f"Experiment #{experiment['id']} is now {experiment['status']}."

    async def complete_experiment(
        self, problem_id: int, experiment_id: int, url: Optional[str] = None
    ) -> str:
        async with self.client_factory() as client:
            experiment = await client.complete_experiment(problem_id, experiment_id, url=url)

        logger.info(f"MCP completeExperiment: problem={problem_id} experiment={experiment_id}")
        message = f"Experiment #{experiment['id']} is now {experiment['status']}."
        if experiment.get("url"):
            message += f" Results: {experiment['url']}"
        return message
