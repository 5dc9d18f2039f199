"""Survey response model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, SmallInteger, Text
from sqlalchemy.orm import relationship

from pilotvoice.database import Base
from pilotvoice.models.base import created_at_column, get_uuid_column, updated_at_column


class SurveyResponse(Base):
    """One user's in-progress or completed answer set for a survey.

    ``completed_at`` is null while the response is a draft and set once the
    user completes the survey.
    """

    __tablename__ = "survey_responses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    survey_id = Column(
        Integer, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = get_uuid_column(nullable=False, index=True)
    overall_rating = Column(SmallInteger, nullable=True)
    open_feedback = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()

    survey = relationship("Survey", back_populates="responses")

    __table_args__ = (
        Index("ix_survey_responses_survey_user", "survey_id", "user_id", unique=True),
    )

    def __repr__(self) -> str:
        return (
            f"<SurveyResponse(id={self.id}, survey_id={self.survey_id}, user_id={self.user_id})>")
