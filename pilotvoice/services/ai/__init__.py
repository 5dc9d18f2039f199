"""Personal data screening services."""
from pilotvoice.services.ai.anonymization_service import (
    AnonymizationError,
    AnonymizationService,
    AnonymizationStrategy,
)
from pilotvoice.services.ai.mock_anonymization_service import MockAnonymizationService
from pilotvoice.services.ai.provider import build_anonymization_service

__all__ = [
    "AnonymizationError",
    "AnonymizationService",
    "AnonymizationStrategy",
    "MockAnonymizationService",
    "build_anonymization_service",
]
