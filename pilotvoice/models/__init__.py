"""Database models."""
from pilotvoice.models.competition import Competition
from pilotvoice.models.survey import Survey
from pilotvoice.models.survey_response import SurveyResponse
from pilotvoice.models.profile import Profile

__all__ = [
    "Competition",
    "Survey",
    "SurveyResponse",
    "Profile",
]
