"""Pydantic schemas for survey response endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import Field

from pilotvoice.schemas.base import BaseSchema

MIN_RATING = 1
MAX_RATING = 10
MAX_FEEDBACK_LENGTH = 10_000

Rating = Annotated[int, Field(ge=MIN_RATING, le=MAX_RATING, strict=True)]
Feedback = Annotated[str, Field(max_length=MAX_FEEDBACK_LENGTH)]


class SurveyResponseDto(BaseSchema):
    """A stored survey response."""

    id: int
    survey_id: int
    user_id: UUID
    overall_rating: Optional[int] = None
    open_feedback: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class CreateSurveyResponseCommand(BaseSchema):
    """Body for starting a survey; may carry an initial rating."""

    overall_rating: Optional[Rating] = None


class UpdateSurveyResponseCommand(BaseSchema):
    """Partial update body. Omitted fields are left untouched; explicit nulls clear them."""

    overall_rating: Optional[Rating] = None
    open_feedback: Optional[Feedback] = None
    completed_at: Optional[datetime] = None

    def provided_fields(self) -> dict:
        """Fields the caller actually sent, including explicit nulls."""
        return {name: getattr(self, name) for name in self.model_fields_set}
