"""
Main API router configuration.
"""

from fastapi import APIRouter
from app.api.endpoints import problems, research, experiments

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(problems.router, prefix="/problems", tags=["problems"])
api_router.include_router(research.router, prefix="/problems/{problem_id}/research", tags=["research"])
api_router.include_router(experiments.router, prefix="/problems/{problem_id}/experiments", tags=["experiments"])
