"""Start action shown on a survey landing page."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from pilotvoice.client.api_client import SurveyApiClient, SurveyApiError
from pilotvoice.schemas.survey_response import SurveyResponseDto

logger = logging.getLogger(__name__)

SIGN_IN_LABEL = "Sign In to Start"
CONTINUE_LABEL = "Continue Survey"
START_LABEL = "Start Survey"


def fill_url(slug: str) -> str:
    return f"/surveys/{slug}/fill"


def thank_you_url(slug: str) -> str:
    return f"/surveys/{slug}/thanks"


def build_sign_in_url(slug: str) -> str:
    """Login page that sends the user straight to the form afterwards."""
    return f"/login?redirect={fill_url(slug)}"


@dataclass(frozen=True)
class StartAction:
    label: str
    href: str
    creates_response: bool = False


def resolve_start_action(slug: str, authenticated: bool, response: Optional[SurveyResponseDto]) -> StartAction:
    if not authenticated:
        return StartAction(SIGN_IN_LABEL, build_sign_in_url(slug))
    if response is not None:
        return StartAction(CONTINUE_LABEL, fill_url(slug))
    return StartAction(START_LABEL, fill_url(slug), creates_response=True)


class SurveyStart:
    """Loads the caller's state for a survey and performs the start action."""

    def __init__(self, api: SurveyApiClient, survey_id: int, slug: str):
        self.api = api
        self.survey_id = survey_id
        self.slug = slug
        self.authenticated = False
        self.response: Optional[SurveyResponseDto] = None
        self.error: Optional[str] = None

    @property
    def action(self) -> StartAction:
        return resolve_start_action(self.slug, self.authenticated, self.response)

    async def load(self) -> StartAction:
        try:
            self.response = await self.api.get_my_response(self.survey_id)
            self.authenticated = True
        except SurveyApiError as e:
            self.response = None
            if e.status == 401:
                self.authenticated = False
            elif e.status == 404:
                self.error = "Survey not found."
            else:
                logger.error(f"Error loading survey start state: {e}")
                self.error = "Failed to load data. Please try refreshing the page."
        return self.action

    async def start(self) -> Optional[str]:
        """Run the current action and return the URL to navigate to, or None on error."""
        action = self.action
        if not action.creates_response:
            return action.href

        self.error = None
        try:
            self.response = await self.api.create_response(self.survey_id)
        except SurveyApiError as e:
            if e.status == 401:
                self.authenticated = False
                self.error = "Session expired. Please log in again."
                return None
            if not e.is_conflict:
                logger.error(f"Error starting survey {self.survey_id}: {e}")
                self.error = "An error occurred while starting the survey. Please try again."
                return None
            logger.info(f"Survey {self.survey_id} already started, adopting existing response")
            try:
                self.response = await self.api.get_my_response(self.survey_id)
            except SurveyApiError as refetch_error:
                logger.error(f"Error fetching existing response: {refetch_error}")
                self.error = "You have already started this survey."
                return None
            if self.response is None:
                self.error = "You have already started this survey."
                return None

        return fill_url(self.slug)
