"""
Experiment API endpoints, nested under a problem.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.experiment import ExperimentCreate, ExperimentResponse, ExperimentUpdate
from app.services.experiment_service import ExperimentService

router = APIRouter()

experiment_service = ExperimentService()


@router.post("", response_model=ExperimentResponse, status_code=201)
async def create_experiment(
    problem_id: int,
    payload: ExperimentCreate,
    db: AsyncSession = Depends(get_db),
):
    return await experiment_service.create(problem_id, payload.proposal, db)


@router.get("", response_model=List[ExperimentResponse])
async def list_experiments(problem_id: int, db: AsyncSession = Depends(get_db)):
    return await experiment_service.find_by_problem_id(problem_id, db)


@router.get("/approved", response_model=List[ExperimentResponse])
async def list_approved_experiments(problem_id: int, db: AsyncSession = Depends(get_db)):
    return await experiment_service.find_approved_by_problem_id(problem_id, db)


@router.patch("/{experiment_id}", response_model=ExperimentResponse)
async def update_experiment(
    problem_id: int,
    experiment_id: int,
    payload: ExperimentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Approve, start, finish or edit an experiment. Only supplied fields change."""
    return await experiment_service.update(experiment_id, payload, db, problem_id=problem_id)


@router.delete("/{experiment_id}", response_model=MessageResponse)
async def delete_experiment(problem_id: int, experiment_id: int, db: AsyncSession = Depends(get_db)):
    await experiment_service.remove(experiment_id, db, problem_id=problem_id)
    return MessageResponse(message="Experiment deleted successfully")
