"""Service layer."""
from pilotvoice.services.auth_service import AuthService, AuthError, AuthenticatedUser
from pilotvoice.services.competition_service import CompetitionService
from pilotvoice.services.profile_service import ProfileService
from pilotvoice.services.survey_response_service import SurveyResponseService
from pilotvoice.services.survey_service import SurveyService
from pilotvoice.services.test_data_service import TestDataService

# Personal data screening
from pilotvoice.services.ai import (
    AnonymizationError,
    AnonymizationService,
    MockAnonymizationService,
    build_anonymization_service,
)

__all__ = [
    "AuthService",
    "AuthError",
    "AuthenticatedUser",
    "CompetitionService",
    "ProfileService",
    "SurveyResponseService",
    "SurveyService",
    "TestDataService",
    "AnonymizationError",
    "AnonymizationService",
    "MockAnonymizationService",
    "build_anonymization_service",
]
