"""
Pydantic schemas for experiment proposals and status tracking.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from app.models.experiment import ExperimentStatus
from app.schemas.common import CamelModel, require_text, reject_null


class ExperimentCreate(CamelModel):
    proposal: str

    @field_validator("proposal")
    @classmethod
    def validate_proposal(cls, v):
        return require_text(v, "proposal")


class ExperimentUpdate(CamelModel):
    """Patch struct: only the fields present in the request are applied.

    ``url`` may be set to null explicitly to clear the result link.
    """
    proposal: Optional[str] = None
    is_approved: Optional[bool] = None
    status: Optional[ExperimentStatus] = None
    url: Optional[str] = Field(default=None, max_length=2048)

    @field_validator("proposal")
    @classmethod
    def validate_proposal(cls, v):
        return require_text(v, "proposal")

    @field_validator("is_approved")
    @classmethod
    def validate_is_approved(cls, v):
        return reject_null(v, "isApproved")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return reject_null(v, "status")


class ExperimentResponse(CamelModel):
    id: int
    problem_id: int
    proposal: str
    is_approved: bool
    status: ExperimentStatus
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
