"""
Database models for the Discovery Tracker application.
"""

from .problem import Problem
from .research import Research
from .experiment import Experiment, ExperimentStatus

__all__ = [
    "Problem",
    "Research",
    "Experiment",
    "ExperimentStatus",
]
