"""
Custom exception classes for the Discovery Tracker application.
"""

from typing import Optional


class TrackerException(Exception):
    """Base exception for all Discovery Tracker errors."""

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(self.message)


class NotFoundError(TrackerException):
    """Raised when a referenced record does not exist."""

    entity = "Record"

    def __init__(self, record_id, detail: Optional[str] = None):
        message = f"{self.entity} not found: {record_id}"
        super().__init__(message, detail)
        self.record_id = record_id


class ProblemNotFoundError(NotFoundError):
    """Raised when a problem is not found."""

    entity = "Problem"


class ResearchNotFoundError(NotFoundError):
    """Raised when a research item is not found."""

    entity = "Research"


class ExperimentNotFoundError(NotFoundError):
    """Raised when an experiment is not found."""

    entity = "Experiment"


class ValidationError(TrackerException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, detail: Optional[str] = None):
        if field:
            message = f"Validation error for field '{field}': {message}"
        super().__init__(message, detail)
        self.field = field


class InvalidTransitionError(TrackerException):
    """Raised when an experiment status change skips or reverses the workflow."""

    def __init__(self, current: str, requested: str, detail: Optional[str] = None):
        message = f"Invalid status transition: {current} -> {requested}"
        super().__init__(message, detail)
        self.current = current
        self.requested = requested
