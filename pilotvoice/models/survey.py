"""Survey model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from pilotvoice.database import Base
from pilotvoice.models.base import created_at_column, utc_now
from pilotvoice.utils.datetime_helpers import ensure_utc


class Survey(Base):
    """A time-windowed feedback form tied to one competition."""

    __tablename__ = "surveys"

    id = Column(Integer, primary_key=True, autoincrement=True)
    competition_id = Column(
        Integer, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slug = Column(String(120), nullable=False, unique=True)
    opens_at = Column(DateTime(timezone=True), nullable=False)
    closes_at = Column(DateTime(timezone=True), nullable=False)
    created_at = created_at_column()

    competition = relationship("Competition", back_populates="surveys")
    responses = relationship("SurveyResponse", back_populates="survey")

    def is_open(self, now: datetime | None = None) -> bool:
        """Whether ``now`` falls inside ``[opens_at, closes_at)``."""
        now = ensure_utc(now) if now else utc_now()
        return ensure_utc(self.opens_at) <= now < ensure_utc(self.closes_at)

    def __repr__(self) -> str:
        return f"<Survey(id={self.id}, slug={self.slug!r}, competition_id={self.competition_id})>"
