"""
Research API endpoints, nested under a problem.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.research import ResearchCreate, ResearchResponse, ResearchUpdate
from app.services.research_service import ResearchService

router = APIRouter()

research_service = ResearchService()


@router.post("", response_model=ResearchResponse, status_code=201)
async def create_research(
    problem_id: int,
    payload: ResearchCreate,
    db: AsyncSession = Depends(get_db),
):
    return await research_service.create(problem_id, payload.content, db)


@router.get("", response_model=List[ResearchResponse])
async def list_research(problem_id: int, db: AsyncSession = Depends(get_db)):
    return await research_service.find_by_problem_id(problem_id, db)


@router.get("/approved", response_model=List[ResearchResponse])
async def list_approved_research(problem_id: int, db: AsyncSession = Depends(get_db)):
    return await research_service.find_approved_by_problem_id(problem_id, db)


@router.patch("/{research_id}", response_model=ResearchResponse)
async def update_research(
    problem_id: int,
    research_id: int,
    payload: ResearchUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await research_service.update(research_id, payload, db, problem_id=problem_id)


@router.delete("/{research_id}", response_model=MessageResponse)
async def delete_research(problem_id: int, research_id: int, db: AsyncSession = Depends(get_db)):
    await research_service.remove(research_id, db, problem_id=problem_id)
    return MessageResponse(message="Research item deleted successfully")
