"""
Experiment proposals and their execution status.

An Experiment is proposed against a Problem, approved by a human, then moved
through NOT STARTED -> IN PROGRESS -> FINISHED by whoever runs it. The result
link (url) is normally filled in when it finishes.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Index
from sqlalchemy.orm import relationship

from app.core.database import Base


class ExperimentStatus(str, enum.Enum):
    NOT_STARTED = "NOT STARTED"
    IN_PROGRESS = "IN PROGRESS"
    FINISHED = "FINISHED"


# Forward-only workflow
ALLOWED_TRANSITIONS = {
    ExperimentStatus.NOT_STARTED: {ExperimentStatus.IN_PROGRESS},
    ExperimentStatus.IN_PROGRESS: {ExperimentStatus.FINISHED},
    ExperimentStatus.FINISHED: set(),
}


class Experiment(Base):
    __tablename__ = "experiments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True)

    proposal = Column(Text, nullable=False)
    is_approved = Column(Boolean, nullable=False, default=False)
    status = Column(String(32), nullable=False, default=ExperimentStatus.NOT_STARTED.value)
    url = Column(String(2048), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    problem = relationship("Problem", back_populates="experiments")

    __table_args__ = (
        Index("ix_experiments_problem_approved", "problem_id", "is_approved"),
    )

    def __repr__(self) -> str:
        return f"<Experiment(id={self.id}, problem_id={self.problem_id}, status={self.status})>"
