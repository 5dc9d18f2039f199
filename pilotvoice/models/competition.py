"""Competition model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from pilotvoice.database import Base
from pilotvoice.models.base import created_at_column


class Competition(Base):
    """A competition whose participants are surveyed afterwards."""

    __tablename__ = "competitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    country_code = Column(String(2), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    participant_count = Column(Integer, nullable=False, default=0)
    tasks_count = Column(Integer, nullable=False, default=0)
    created_at = created_at_column()

    surveys = relationship("Survey", back_populates="competition")

    def __repr__(self) -> str:
        return f"<Competition(id={self.id}, name={self.name!r})>"
