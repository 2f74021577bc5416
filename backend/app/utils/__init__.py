"""
Utility modules for the Discovery Tracker application.
"""

from .exceptions import (
    TrackerException,
    NotFoundError,
    ProblemNotFoundError,
    ResearchNotFoundError,
    ExperimentNotFoundError,
    ValidationError,
    InvalidTransitionError,
)

__all__ = [
    "TrackerException",
    "NotFoundError",
    "ProblemNotFoundError",
    "ResearchNotFoundError",
    "ExperimentNotFoundError",
    "ValidationError",
    "InvalidTransitionError",
]
