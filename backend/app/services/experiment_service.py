"""
Experiment service.

Experiments are proposed against a problem, approved by a human and then
driven through their status lifecycle by whoever runs them (usually an agent).
With strict transitions enabled the status may only move forward one step at a
time; re-sending the current status is accepted as a no-op so retries are safe.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.experiment import ALLOWED_TRANSITIONS, Experiment, ExperimentStatus
from app.schemas.experiment import ExperimentUpdate
from app.services.problem_service import ProblemService
from app.utils.exceptions import (
    ExperimentNotFoundError,
    InvalidTransitionError,
    ProblemNotFoundError,
    ValidationError,
)


class ExperimentService:
    def __init__(
        self,
        problem_service: Optional[ProblemService] = None,
        strict_transitions: Optional[bool] = None,
    ):
        self.problem_service = problem_service or ProblemService()
        self._strict_transitions = strict_transitions

    @property
    def strict_transitions(self) -> bool:
        if self._strict_transitions is None:
            return settings.EXPERIMENT_STRICT_TRANSITIONS
        return self._strict_transitions

    async def create(self, problem_id: int, proposal: str, db: AsyncSession) -> Experiment:
        """
        Propose an experiment. It starts unapproved and NOT STARTED.

        Raises:
            ProblemNotFoundError: If the owning problem does not exist
            ValidationError: If proposal is empty
        """
        proposal = (proposal or "").strip()
        if not proposal:
            raise ValidationError("must not be empty", field="proposal")
        if not await self.problem_service.exists(problem_id, db):
            raise ProblemNotFoundError(problem_id)

        experiment = Experiment(
            problem_id=problem_id,
            proposal=proposal,
            is_approved=False,
            status=ExperimentStatus.NOT_STARTED.value,
        )
        db.add(experiment)
        try:
            await db.commit()
        except IntegrityError as e:
            # Problem deleted between the existence check and the insert
            await db.rollback()
            raise ProblemNotFoundError(problem_id) from e
        await db.refresh(experiment)

        logger.info(f"Created experiment {experiment.id} for problem {problem_id}")
        return experiment

    async def find_by_problem_id(self, problem_id: int, db: AsyncSession) -> List[Experiment]:
        result = await db.execute(
            select(Experiment).where(Experiment.problem_id == problem_id).order_by(Experiment.id.asc())
        )
        return list(result.scalars().all())

    async def find_approved_by_problem_id(self, problem_id: int, db: AsyncSession) -> List[Experiment]:
        result = await db.execute(
            select(Experiment)
            .where(Experiment.problem_id == problem_id, Experiment.is_approved.is_(True))
            .order_by(Experiment.id.asc())
        )
        return list(result.scalars().all())

    async def get(self, experiment_id: int, db: AsyncSession, problem_id: Optional[int] = None) -> Experiment:
        experiment = await db.get(Experiment, experiment_id)
        if experiment is None or (problem_id is not None and experiment.problem_id != problem_id):
            raise ExperimentNotFoundError(experiment_id)
        return experiment

    def check_transition(self, current: str, requested: ExperimentStatus) -> None:
        """
        Raises:
            InvalidTransitionError: If strict mode forbids current -> requested
        """
        if not self.strict_transitions:
            return
        current_status = ExperimentStatus(current)
        if requested == current_status:
            return
        if requested not in ALLOWED_TRANSITIONS[current_status]:
            raise InvalidTransitionError(current_status.value, requested.value)

    async def update(
        self,
        experiment_id: int,
        patch: ExperimentUpdate,
        db: AsyncSession,
        problem_id: Optional[int] = None,
    ) -> Experiment:
        """
        Merge the fields present in ``patch`` into the experiment.

        Raises:
            ExperimentNotFoundError: If absent, or owned by a different problem
            InvalidTransitionError: If the status change is not allowed
        """
        experiment = await self.get(experiment_id, db, problem_id=problem_id)

        changes = patch.model_dump(exclude_unset=True)
        if "status" in changes:
            requested = ExperimentStatus(changes["status"])
            self.check_transition(experiment.status, requested)
            changes["status"] = requested.value

        for field_name, value in changes.items():
            setattr(experiment, field_name, value)

        if changes:
            await db.commit()
            await db.refresh(experiment)
            logger.info(f"Updated experiment {experiment_id}: {sorted(changes)}")
        return experiment

    async def remove(self, experiment_id: int, db: AsyncSession, problem_id: Optional[int] = None) -> None:
        experiment = await self.get(experiment_id, db, problem_id=problem_id)
        await db.delete(experiment)
        await db.commit()
        logger.info(f"Deleted experiment {experiment_id}")
