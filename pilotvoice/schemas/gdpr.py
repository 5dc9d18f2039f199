"""Schemas for the personal data (GDPR) check."""
from __future__ import annotations

from typing import Optional

from pydantic import Field

from pilotvoice.schemas.base import CamelSchema


class GdprCheckRequest(CamelSchema):
    """Text submitted for screening."""

    text: str


class GdprCheckResult(CamelSchema):
    """Verdict of the detect-then-anonymize screening step."""

    contains_personal_data: bool
    confidence: float = Field(ge=0.0, le=1.0)
    original_text: str
    anonymized_text: Optional[str] = None
    detected_data_types: Optional[list[str]] = None

    @property
    def missing_rewrite(self) -> bool:
        """True when personal data was flagged but no usable rewrite came back."""
        return self.contains_personal_data and not (self.anonymized_text or "").strip()

    @property
    def stored_text(self) -> str:
        """Value that may be persisted: the rewrite when one exists, else the original.

        Callers must reject ``missing_rewrite`` verdicts first.
        """
        return self.anonymized_text or self.original_text
