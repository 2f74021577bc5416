"""
Research findings attached to a problem.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text, Index
from sqlalchemy.orm import relationship

from app.core.database import Base


class Research(Base):
    __tablename__ = "research"

    id = Column(Integer, primary_key=True, autoincrement=True)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    # Human gate: agents only act on approved findings
    is_approved = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    problem = relationship("Problem", back_populates="research")

    __table_args__ = (
        Index("ix_research_problem_approved", "problem_id", "is_approved"),
    )

    def __repr__(self) -> str:
        return f"<Research(id={self.id}, problem_id={self.problem_id}, approved={self.is_approved})>"
