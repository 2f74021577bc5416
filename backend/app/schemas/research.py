"""
Pydantic schemas for research findings.
"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from app.schemas.common import CamelModel, require_text, reject_null


class ResearchCreate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        return require_text(v, "content")


class ResearchUpdate(CamelModel):
    """Patch struct: only the fields present in the request are applied."""
    content: Optional[str] = None
    is_approved: Optional[bool] = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        return require_text(v, "content")

    @field_validator("is_approved")
    @classmethod
    def validate_is_approved(cls, v):
        return reject_null(v, "isApproved")


class ResearchResponse(CamelModel):
    id: int
    problem_id: int
    content: str
    is_approved: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
