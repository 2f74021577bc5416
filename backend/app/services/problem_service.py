"""
Problem service: CRUD for the root aggregate.
"""

from typing import List

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.problem import Problem
from app.schemas.problem import ProblemUpdate
from app.utils.exceptions import ProblemNotFoundError, ValidationError


def _with_children(stmt):
    return stmt.options(
        selectinload(Problem.research),
        selectinload(Problem.experiments),
    ).execution_options(populate_existing=True)


class ProblemService:
    """Problems and their owned research/experiment collections."""

    async def create(self, brief: str, db: AsyncSession) -> Problem:
        brief = (brief or "").strip()
        if not brief:
            raise ValidationError("must not be empty", field="brief")

        problem = Problem(brief=brief, is_investigate=False, research=[], experiments=[])
        db.add(problem)
        await db.commit()
        await db.refresh(problem)

        logger.info(f"Created problem {problem.id}")
        return await self.find_one(problem.id, db)

    async def find_all(self, db: AsyncSession) -> List[Problem]:
        result = await db.execute(_with_children(select(Problem).order_by(Problem.id.asc())))
        return list(result.scalars().all())

    async def find_investigate(self, db: AsyncSession) -> List[Problem]:
        """Problems promoted for active research."""
        result = await db.execute(
            _with_children(
                select(Problem)
                .where(Problem.is_investigate.is_(True))
                .order_by(Problem.id.asc())
            )
        )
        return list(result.scalars().all())

    async def find_one(self, problem_id: int, db: AsyncSession) -> Problem:
        """
        Get a problem with its research and experiments loaded.

        Raises:
            ProblemNotFoundError: If no problem has this id
        """
        result = await db.execute(_with_children(select(Problem).where(Problem.id == problem_id)))
        problem = result.scalar_one_or_none()
        if problem is None:
            raise ProblemNotFoundError(problem_id)
        return problem

    async def exists(self, problem_id: int, db: AsyncSession) -> bool:
        result = await db.execute(select(Problem.id).where(Problem.id == problem_id))
        return result.scalar_one_or_none() is not None

    async def update(self, problem_id: int, patch: ProblemUpdate, db: AsyncSession) -> Problem:
        """
        Apply a partial update. Fields absent from ``patch`` keep their values.

        Raises:
            ProblemNotFoundError: If no problem has this id; nothing is written
        """
        problem = await self.find_one(problem_id, db)

        changes = patch.model_dump(exclude_unset=True)
        for field_name, value in changes.items():
            setattr(problem, field_name, value)

        if changes:
            await db.commit()
            logger.info(f"Updated problem {problem_id}: {sorted(changes)}")
        return await self.find_one(problem_id, db)

    async def remove(self, problem_id: int, db: AsyncSession) -> None:
        """
        Delete a problem together with its research and experiments.

        Raises:
            ProblemNotFoundError: If no problem has this id
        """
        problem = await self.find_one(problem_id, db)
        n_research, n_experiments = len(problem.research), len(problem.experiments)
        await db.delete(problem)
        await db.commit()
        logger.info(f"Deleted problem {problem_id} with {n_research} research and {n_experiments} experiments")
