"""
Problems API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.problem import ProblemCreate, ProblemResponse, ProblemUpdate
from app.services.problem_service import ProblemService

router = APIRouter()

problem_service = ProblemService()


@router.post("", response_model=ProblemResponse, status_code=201)
async def create_problem(
    payload: ProblemCreate,
    db: AsyncSession = Depends(get_db),
):
    return await problem_service.create(payload.brief, db)


@router.get("", response_model=List[ProblemResponse])
async def list_problems(db: AsyncSession = Depends(get_db)):
    return await problem_service.find_all(db)


# Declared before /{problem_id} so the literal segment wins
@router.get("/investigate", response_model=List[ProblemResponse])
async def list_problems_to_investigate(db: AsyncSession = Depends(get_db)):
    """Problems flagged for active research."""
    return await problem_service.find_investigate(db)


@router.get("/{problem_id}", response_model=ProblemResponse)
async def get_problem(problem_id: int, db: AsyncSession = Depends(get_db)):
    return await problem_service.find_one(problem_id, db)


@router.api_route("/{problem_id}", methods=["PUT", "PATCH"], response_model=ProblemResponse)
async def update_problem(
    problem_id: int,
    payload: ProblemUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Partially update a problem.

    PUT and PATCH share the same contract: fields omitted from the body are
    left unchanged.
    """
    return await problem_service.update(problem_id, payload, db)


@router.delete("/{problem_id}", response_model=MessageResponse)
async def delete_problem(problem_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a problem and, with it, all of its research and experiments."""
    await problem_service.remove(problem_id, db)
    return MessageResponse(message="Problem deleted successfully")
