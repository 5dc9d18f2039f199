"""API routers."""
from pilotvoice.routers import competitions, health, survey_responses, surveys, user

__all__ = [
    "competitions",
    "health",
    "survey_responses",
    "surveys",
    "user",
]
