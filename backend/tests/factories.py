"""
Test factories for creating test data.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.problem import Problem
from app.models.research import Research
from app.models.experiment import Experiment, ExperimentStatus


async def create_test_problem(
    db: AsyncSession,
    brief: str = "Users abandon checkout",
    is_investigate: bool = False,
) -> Problem:
    """Create a test problem."""
    problem = Problem(brief=brief, is_investigate=is_investigate)
    db.add(problem)
    await db.commit()
    await db.refresh(problem)
    return problem


async def create_test_research(
    db: AsyncSession,
    problem: Problem,
    content: str = "Users report confusing pricing",
    is_approved: bool = False,
) -> Research:
    """Create a test research item."""
    research = Research(problem_id=problem.id, content=content, is_approved=is_approved)
    db.add(research)
    await db.commit()
    await db.refresh(research)
    return research


async def create_test_experiment(
    db: AsyncSession,
    problem: Problem,
    proposal: str = "A/B test simplified pricing page",
    is_approved: bool = False,
    status: ExperimentStatus = ExperimentStatus.NOT_STARTED,
) -> Experiment:
    """Create a test experiment."""
    experiment = Experiment(
        problem_id=problem.id,
        proposal=proposal,
        is_approved=is_approved,
        status=status.value,
    )
    db.add(experiment)
    await db.commit()
    await db.refresh(experiment)
    return experiment
