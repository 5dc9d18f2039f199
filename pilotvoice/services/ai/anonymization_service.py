"""
Personal data screening for free-text survey feedback.

The check runs in two sequential steps: a detection completion decides
whether the text identifies anyone, and only when it does is a second
completion asked to rewrite the text with generic role references.
"""
from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pilotvoice.schemas.gdpr import GdprCheckResult
from pilotvoice.services.ai.openrouter_api import OpenRouterClient
from pilotvoice.services.ai.prompt_builder import (
    ANONYMIZATION_SCHEMA,
    ANONYMIZATION_SYSTEM_PROMPT,
    DETECTION_SCHEMA,
    DETECTION_SYSTEM_PROMPT,
    build_anonymization_prompt,
    build_detection_prompt,
)

logger = logging.getLogger(__name__)

DETECTION_TEMPERATURE = 0.3
DETECTION_MAX_TOKENS = 200
ANONYMIZATION_TEMPERATURE = 0.5
ANONYMIZATION_MAX_TOKENS = 1000


class AnonymizationError(RuntimeError):
    """Raised when feedback cannot be screened or anonymized."""

    def __init__(self, message: str):
        super().__init__(f"Failed to anonymize feedback: {message}")
        self.reason = message


class AnonymizationStrategy(Protocol):
    """Anything that can screen a piece of feedback."""

    async def check_and_anonymize(self, text: str) -> GdprCheckResult:
        ...


class PersonalDataDetection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contains_personal_data: bool = Field(alias="containsPersonalData")
    confidence: float
    detected_data_types: list[str] = Field(default_factory=list, alias="detectedDataTypes")
    explanation: str = ""


class AnonymizedText(BaseModel):
    anonymized_text: str = Field(alias="anonymizedText")


def clean_result(text: str) -> GdprCheckResult:
    """Verdict for empty or whitespace-only text, which never leaves the process."""
    return GdprCheckResult(
        contains_personal_data=False,
        confidence=1.0,
        original_text=text,
        anonymized_text=None,
    )


class AnonymizationService:
    """Detect-then-anonymize screening backed by OpenRouter."""

    def __init__(self, client: OpenRouterClient, model: str | None = None):
        self.client = client
        self.model = model or client.settings.openrouter_model

    async def check_and_anonymize(self, text: str) -> GdprCheckResult:
        """
        Check whether ``text`` contains personal data and anonymize it if so.

        Args:
            text: The feedback text to check

        Returns:
            GdprCheckResult; ``anonymized_text`` is None unless personal data was detected

        Raises:
            AnonymizationError: If either completion fails or the rewrite comes back empty
        """
        if not text or not text.strip():
            return clean_result(text)

        try:
            detection = await self._detect(text)
            logger.info(
                f"Personal data detection: contains={detection.contains_personal_data} "
                f"confidence={detection.confidence} types={detection.detected_data_types}"
            )

            anonymized_text = None
            if detection.contains_personal_data:
                anonymized_text = await self._anonymize(text)

            return GdprCheckResult(
                contains_personal_data=detection.contains_personal_data,
                confidence=min(max(detection.confidence, 0.0), 1.0),
                original_text=text,
                anonymized_text=anonymized_text,
                detected_data_types=detection.detected_data_types,
            )
        except AnonymizationError:
            raise
        except Exception as exc:
            raise AnonymizationError(str(exc) or "Unknown error occurred") from exc

    async def _detect(self, text: str) -> PersonalDataDetection:
        payload = await self.client.generate_structured_completion(
            DETECTION_SYSTEM_PROMPT,
            build_detection_prompt(text),
            DETECTION_SCHEMA,
            model=self.model,
            temperature=DETECTION_TEMPERATURE,
            max_tokens=DETECTION_MAX_TOKENS,
        )
        try:
            return PersonalDataDetection.model_validate(payload)
        except ValidationError as exc:
            raise AnonymizationError(f"Detection response did not match schema: {exc}") from exc

    async def _anonymize(self, text: str) -> str:
        payload = await self.client.generate_structured_completion(
            ANONYMIZATION_SYSTEM_PROMPT,
            build_anonymization_prompt(text),
            ANONYMIZATION_SCHEMA,
            model=self.model,
            temperature=ANONYMIZATION_TEMPERATURE,
            max_tokens=ANONYMIZATION_MAX_TOKENS,
        )
        try:
            result = AnonymizedText.model_validate(payload)
        except ValidationError as exc:
            raise AnonymizationError(f"Anonymization response did not match schema: {exc}") from exc

        anonymized_text = result.anonymized_text.strip()
        if not anonymized_text:
            raise AnonymizationError("OpenRouter API returned empty anonymized text")
        return anonymized_text
