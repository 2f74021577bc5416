"""
Common Pydantic schemas for API requests and responses.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema for the tracker wire format.

    Fields are declared in snake_case and serialized as camelCase
    (``is_approved`` -> ``isApproved``). Request bodies accept either spelling.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def require_text(value, field: str):
    """Strip a required free-text field and reject empty values."""
    if value is None:
        raise ValueError(f"{field} cannot be null")
    value = str(value).strip()
    if not value:
        raise ValueError(f"{field} must not be empty")
    return value


def reject_null(value, field: str):
    """Reject an explicit null for a field that may be omitted but not cleared."""
    if value is None:
        raise ValueError(f"{field} cannot be null")
    return value


class MessageResponse(CamelModel):
    """Plain acknowledgement, returned by deletes."""
    message: str
