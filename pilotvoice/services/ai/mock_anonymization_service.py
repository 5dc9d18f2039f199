"""
Offline stand-in for the OpenRouter-backed anonymization service.

Returns one of a fixed set of verdicts (most of them clean) after a short
simulated delay, so the survey flow can be exercised without API keys.
"""
from __future__ import annotations

import asyncio
import random

from pilotvoice.schemas.gdpr import GdprCheckResult
from pilotvoice.services.ai.anonymization_service import clean_result

# (contains_personal_data, confidence, anonymized_text, detected_data_types)
MOCK_VERDICTS: list[tuple[bool, float, str | None, list[str] | None]] = [
    (False, 0.99, None, None),
    (False, 0.95, None, None),
    (False, 0.92, None, None),
    (False, 0.88, None, None),
    (False, 0.96, None, None),
    (False, 0.99, None, None),
    (False, 0.94, None, None),
    (True, 0.85, "The organizer did a great job.", ["full_name"]),
    (True, 0.95, "Please contact me at the provided email.", ["email"]),
    (True, 0.75, "A participant mentioned an issue with the landing zone.", ["full_name", "location"]),
    (True, 0.91, "My phone number was called by mistake.", ["phone"]),
    (True, 0.88, "The pilot had excellent flight skills.", ["full_name"]),
]

PREVIEW_LENGTH = 30


class MockAnonymizationService:
    """Canned GDPR verdicts with simulated latency."""

    def __init__(
            self,
            rng: random.Random | None = None,
            min_delay_seconds: float = 0.3,
            max_delay_seconds: float = 0.7,
    ):
        self.rng = rng or random.Random()
        self.min_delay_seconds = min_delay_seconds
        self.max_delay_seconds = max_delay_seconds

    async def check_and_anonymize(self, text: str) -> GdprCheckResult:
        if not text or not text.strip():
            return clean_result(text)

        if self.max_delay_seconds > 0:
            await asyncio.sleep(self.rng.uniform(self.min_delay_seconds, self.max_delay_seconds))

        contains, confidence, anonymized_text, data_types = self.rng.choice(MOCK_VERDICTS)
        if contains and anonymized_text:
            anonymized_text = f'{anonymized_text} (anonymized from: "{text[:PREVIEW_LENGTH]}...")'

        return GdprCheckResult(
            contains_personal_data=contains,
            confidence=confidence,
            original_text=text,
            anonymized_text=anonymized_text,
            detected_data_types=data_types,
        )
