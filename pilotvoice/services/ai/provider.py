"""Selection of the anonymization strategy at application start."""
import logging

from pilotvoice.config import Settings
from pilotvoice.services.ai.anonymization_service import AnonymizationService, AnonymizationStrategy
from pilotvoice.services.ai.mock_anonymization_service import MockAnonymizationService
from pilotvoice.services.ai.openrouter_api import OpenRouterClient

logger = logging.getLogger(__name__)


def build_anonymization_service(settings: Settings) -> AnonymizationStrategy:
    """Construct the anonymization strategy configured by ``settings``.

    Called once while the application is created; the result is injected into
    request handlers rather than looked up globally.
    """
    if settings.mock_ai_service:
        logger.info("Using MOCK anonymization service")
        return MockAnonymizationService()

    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY is not set; GDPR checks will fail until it is configured")
    logger.info(f"Using OpenRouter anonymization service with model {settings.openrouter_model}")
    return AnonymizationService(OpenRouterClient(settings))
