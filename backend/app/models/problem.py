"""
Problem: the root aggregate of the discovery tracker.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, Text
from sqlalchemy.orm import relationship

from app.core.database import Base


class Problem(Base):
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, autoincrement=True)
    brief = Column(Text, nullable=False)
    is_investigate = Column(Boolean, nullable=False, default=False, index=True)
    related_experiments = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    research = relationship(
        "Research",
        back_populates="problem",
        cascade="all, delete-orphan",
        order_by="Research.id",
    )
    experiments = relationship(
        "Experiment",
        back_populates="problem",
        cascade="all, delete-orphan",
        order_by="Experiment.id",
    )

    def __repr__(self) -> str:
        return f"<Problem(id={self.id}, is_investigate={self.is_investigate})>"
