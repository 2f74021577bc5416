"""
Research service: findings attached to a problem and their approval flag.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.research import Research
from app.schemas.research import ResearchUpdate
from app.services.problem_service import ProblemService
from app.utils.exceptions import ProblemNotFoundError, ResearchNotFoundError, ValidationError


class ResearchService:
    def __init__(self, problem_service: Optional[ProblemService] = None):
        self.problem_service = problem_service or ProblemService()

    async def create(self, problem_id: int, content: str, db: AsyncSession) -> Research:
        """
        Attach a new, unapproved finding to a problem.

        Raises:
            ProblemNotFoundError: If the owning problem does not exist
            ValidationError: If content is empty
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError("must not be empty", field="content")
        if not await self.problem_service.exists(problem_id, db):
            raise ProblemNotFoundError(problem_id)

        research = Research(problem_id=problem_id, content=content, is_approved=False)
        db.add(research)
        try:
            await db.commit()
        except IntegrityError as e:
            # Problem deleted between the existence check and the insert
            await db.rollback()
            raise ProblemNotFoundError(problem_id) from e
        await db.refresh(research)

        logger.info(f"Created research {research.id} for problem {problem_id}")
        return research

    async def find_by_problem_id(self, problem_id: int, db: AsyncSession) -> List[Research]:
        result = await db.execute(
            select(Research).where(Research.problem_id == problem_id).order_by(Research.id.asc())
        )
        return list(result.scalars().all())

    async def find_approved_by_problem_id(self, problem_id: int, db: AsyncSession) -> List[Research]:
        result = await db.execute(
            select(Research)
            .where(Research.problem_id == problem_id, Research.is_approved.is_(True))
            .order_by(Research.id.asc())
        )
        return list(result.scalars().all())

    async def get(self, research_id: int, db: AsyncSession, problem_id: Optional[int] = None) -> Research:
        """
        Get a research item, optionally scoped to its owning problem.

        Raises:
            ResearchNotFoundError: If absent, or owned by a different problem
        """
        research = await db.get(Research, research_id)
        if research is None or (problem_id is not None and research.problem_id != problem_id):
            raise ResearchNotFoundError(research_id)
        return research

    async def update(
        self,
        research_id: int,
        patch: ResearchUpdate,
        db: AsyncSession,
        problem_id: Optional[int] = None,
    ) -> Research:
        research = await self.get(research_id, db, problem_id=problem_id)

        changes = patch.model_dump(exclude_unset=True)
        for field_name, value in changes.items():
            setattr(research, field_name, value)

        if changes:
            await db.commit()
            await db.refresh(research)
            logger.info(f"Updated research {research_id}: {sorted(changes)}")
        return research

    async def update_is_approved(
        self,
        research_id: int,
        is_approved: bool,
        db: AsyncSession,
        problem_id: Optional[int] = None,
    ) -> Research:
        return await self.update(
            research_id, ResearchUpdate(is_approved=is_approved), db, problem_id=problem_id
        )

    async def remove(self, research_id: int, db: AsyncSession, problem_id: Optional[int] = None) -> None:
        research = await self.get(research_id, db, problem_id=problem_id)
        await db.delete(research)
        await db.commit()
        logger.info(f"Deleted research {research_id}")
