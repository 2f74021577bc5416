"""
Pydantic schemas for problems.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel, require_text, reject_null
from app.schemas.experiment import ExperimentResponse
from app.schemas.research import ResearchResponse


class ProblemCreate(CamelModel):
    brief: str

    @field_validator("brief")
    @classmethod
    def validate_brief(cls, v):
        return require_text(v, "brief")


class ProblemUpdate(CamelModel):
    """Patch struct shared by PUT and PATCH: omitted fields are left untouched."""
    brief: Optional[str] = None
    is_investigate: Optional[bool] = None
    related_experiments: Optional[List[str]] = None

    @field_validator("brief")
    @classmethod
    def validate_brief(cls, v):
        return require_text(v, "brief")

    @field_validator("is_investigate")
    @classmethod
    def validate_is_investigate(cls, v):
        return reject_null(v, "isInvestigate")


class ProblemResponse(CamelModel):
    id: int
    brief: str
    is_investigate: bool = False
    related_experiments: Optional[List[str]] = None
    research: List[ResearchResponse] = Field(default_factory=list)
    experiments: List[ExperimentResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
