"""
Tests for core services.
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.experiment import Experiment, ExperimentStatus
from app.models.problem import Problem
from app.models.research import Research
from app.schemas.experiment import ExperimentUpdate
from app.schemas.problem import ProblemUpdate
from app.schemas.research import ResearchUpdate
from app.services.experiment_service import ExperimentService
from app.services.problem_service import ProblemService
from app.services.research_service import ResearchService
from app.utils.exceptions import (
    ExperimentNotFoundError,
    InvalidTransitionError,
    ProblemNotFoundError,
    ResearchNotFoundError,
    ValidationError,
)
from tests.factories import create_test_experiment, create_test_problem, create_test_research


async def _count(db: AsyncSession, model) -> int:
    return int((await db.execute(select(func.count()).select_from(model))).scalar() or 0)


@pytest.mark.asyncio
async def test_problem_service_create_defaults(db_session: AsyncSession):
    """A new problem is not flagged and has no children."""
    service = ProblemService()

    problem = await service.create("Users abandon checkout", db_session)

    assert problem.id is not None
    assert problem.brief == "Users abandon checkout"
    assert problem.is_investigate is False
    assert problem.research == []
    assert problem.experiments == []


@pytest.mark.asyncio
async def test_problem_service_create_rejects_blank_brief(db_session: AsyncSession):
    service = ProblemService()

    with pytest.raises(ValidationError):
        await service.create("   ", db_session)

    assert await _count(db_session, Problem) == 0


@pytest.mark.asyncio
async def test_problem_service_find_investigate(db_session: AsyncSession):
    service = ProblemService()
    await create_test_problem(db_session, brief="Not flagged")
    flagged = await create_test_problem(db_session, brief="Flagged", is_investigate=True)

    problems = await service.find_investigate(db_session)

    assert [p.id for p in problems] == [flagged.id]


@pytest.mark.asyncio
async def test_problem_service_partial_update_keeps_other_fields(db_session: AsyncSession):
    service = ProblemService()
    problem = await create_test_problem(db_session, brief="Original brief")

    updated = await service.update(problem.id, ProblemUpdate(is_investigate=True), db_session)

    assert updated.is_investigate is True
    assert updated.brief == "Original brief"


@pytest.mark.asyncio
async def test_problem_service_update_missing_creates_nothing(db_session: AsyncSession):
    """Scenario C: updating an unknown id is NotFound and writes nothing."""
    service = ProblemService()

    with pytest.raises(ProblemNotFoundError):
        await service.update(999, ProblemUpdate(brief="x"), db_session)

    assert await _count(db_session, Problem) == 0


@pytest.mark.asyncio
async def test_problem_service_remove_cascades(db_session: AsyncSession):
    service = ProblemService()
    problem = await create_test_problem(db_session)
    await create_test_research(db_session, problem)
    await create_test_experiment(db_session, problem)

    await service.remove(problem.id, db_session)

    assert await _count(db_session, Problem) == 0
    assert await _count(db_session, Research) == 0
    assert await _count(db_session, Experiment) == 0


@pytest.mark.asyncio
async def test_problem_service_remove_missing(db_session: AsyncSession):
    with pytest.raises(ProblemNotFoundError):
        await ProblemService().remove(42, db_session)


@pytest.mark.asyncio
async def test_research_service_create_requires_problem(db_session: AsyncSession):
    service = ResearchService()

    with pytest.raises(ProblemNotFoundError):
        await service.create(999, "Orphan finding", db_session)

    assert await _count(db_session, Research) == 0


@pytest.mark.asyncio
async def test_research_service_approved_subset(db_session: AsyncSession):
    """Approved listing is exactly the approved part of the full listing."""
    service = ResearchService()
    problem = await create_test_problem(db_session)
    other = await create_test_problem(db_session, brief="Other problem")
    for i, approved in enumerate([True, False, True, False]):
        await create_test_research(db_session, problem, content=f"finding {i}", is_approved=approved)
    await create_test_research(db_session, other, content="elsewhere", is_approved=True)

    everything = await service.find_by_problem_id(problem.id, db_session)
    approved = await service.find_approved_by_problem_id(problem.id, db_session)

    assert len(everything) == 4
    assert [r.id for r in approved] == [r.id for r in everything if r.is_approved]


@pytest.mark.asyncio
async def test_research_service_update_is_approved_idempotent(db_session: AsyncSession):
    service = ResearchService()
    problem = await create_test_problem(db_session)
    research = await create_test_research(db_session, problem)

    first = await service.update_is_approved(research.id, True, db_session)
    second = await service.update_is_approved(research.id, True, db_session)

    assert first.is_approved is True
    assert second.is_approved is True
    assert second.content == research.content


@pytest.mark.asyncio
async def test_research_service_scoped_to_problem(db_session: AsyncSession):
    service = ResearchService()
    problem = await create_test_problem(db_session)
    other = await create_test_problem(db_session, brief="Other problem")
    research = await create_test_research(db_session, problem)

    with pytest.raises(ResearchNotFoundError):
        await service.update(research.id, ResearchUpdate(is_approved=True), db_session, problem_id=other.id)

    unchanged = await service.get(research.id, db_session)
    assert unchanged.is_approved is False


@pytest.mark.asyncio
async def test_research_service_remove(db_session: AsyncSession):
    service = ResearchService()
    problem = await create_test_problem(db_session)
    research = await create_test_research(db_session, problem)

    await service.remove(research.id, db_session)

    assert await service.find_by_problem_id(problem.id, db_session) == []
    with pytest.raises(ResearchNotFoundError):
        await service.remove(research.id, db_session)


@pytest.mark.asyncio
async def test_experiment_service_create_defaults(db_session: AsyncSession):
    service = ExperimentService()
    problem = await create_test_problem(db_session)

    experiment = await service.create(problem.id, "A/B test simplified pricing page", db_session)

    assert experiment.is_approved is False
    assert experiment.status == ExperimentStatus.NOT_STARTED.value
    assert experiment.url is None


@pytest.mark.asyncio
async def test_experiment_service_update_merges_fields(db_session: AsyncSession):
    service = ExperimentService()
    problem = await create_test_problem(db_session)
    experiment = await create_test_experiment(db_session, problem)

    updated = await service.update(experiment.id, ExperimentUpdate(is_approved=True), db_session)

    assert updated.is_approved is True
    assert updated.proposal == "A/B test simplified pricing page"
    assert updated.status == ExperimentStatus.NOT_STARTED.value


@pytest.mark.asyncio
async def test_experiment_service_update_missing(db_session: AsyncSession):
    with pytest.raises(ExperimentNotFoundError):
        await ExperimentService().update(999, ExperimentUpdate(is_approved=True), db_session)
    assert await _count(db_session, Experiment) == 0


@pytest.mark.asyncio
async def test_experiment_service_strict_transitions(db_session: AsyncSession):
    service = ExperimentService(strict_transitions=True)
    problem = await create_test_problem(db_session)
    experiment = await create_test_experiment(db_session, problem)

    with pytest.raises(InvalidTransitionError):
        await service.update(experiment.id, ExperimentUpdate(status=ExperimentStatus.FINISHED), db_session)

    started = await service.update(experiment.id, ExperimentUpdate(status=ExperimentStatus.IN_PROGRESS), db_session)
    assert started.status == "IN PROGRESS"

    # Re-sending the current status is accepted
    again = await service.update(experiment.id, ExperimentUpdate(status=ExperimentStatus.IN_PROGRESS), db_session)
    assert again.status == "IN PROGRESS"

    finished = await service.update(
        experiment.id,
        ExperimentUpdate(status=ExperimentStatus.FINISHED, url="http://x/report"),
        db_session,
    )
    assert finished.status == "FINISHED"
    assert finished.url == "http://x/report"

    with pytest.raises(InvalidTransitionError):
        await service.update(experiment.id, ExperimentUpdate(status=ExperimentStatus.NOT_STARTED), db_session)


@pytest.mark.asyncio
async def test_experiment_service_lax_transitions(db_session: AsyncSession):
    service = ExperimentService(strict_transitions=False)
    problem = await create_test_problem(db_session)
    experiment = await create_test_experiment(db_session, problem, status=ExperimentStatus.FINISHED)

    reopened = await service.update(experiment.id, ExperimentUpdate(status=ExperimentStatus.NOT_STARTED), db_session)

    assert reopened.status == "NOT STARTED"


@pytest.mark.asyncio
async def test_database_cascade_removes_children(db_session: AsyncSession):
    """ON DELETE CASCADE holds even when the ORM relationship is bypassed."""
    problem = await create_test_problem(db_session)
    await create_test_research(db_session, problem)
    await create_test_experiment(db_session, problem)

    await db_session.execute(delete(Problem).where(Problem.id == problem.id))
    await db_session.commit()

    assert await _count(db_session, Research) == 0
    assert await _count(db_session, Experiment) == 0


@pytest.mark.asyncio
async def test_orphan_research_rejected_by_database(db_session: AsyncSession):
    db_session.add(Research(problem_id=999, content="Orphan finding", is_approved=False))

    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_research_create_when_problem_vanishes(db_session: AsyncSession):
    """A problem deleted after the existence check still yields NotFound."""
    service = ResearchService()
    service.problem_service.exists = AsyncMock(return_value=True)

    with pytest.raises(ProblemNotFoundError):
        await service.create(999, "Users report confusing pricing", db_session)

    assert await _count(db_session, Research) == 0


@pytest.mark.asyncio
async def test_experiment_create_when_problem_vanishes(db_session: AsyncSession):
    service = ExperimentService()
    service.problem_service.exists = AsyncMock(return_value=True)

    with pytest.raises(ProblemNotFoundError):
        await service.create(999, "A/B test simplified pricing page", db_session)

    assert await _count(db_session, Experiment) == 0
