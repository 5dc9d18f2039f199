"""
Client-side orchestration of filling in a survey.

States::

    initializing -> ready -> completing -> done
                      ^          |
                      |          v
                      +-- awaiting_gdpr_decision

``error`` is terminal and only reachable while initializing. Failures while
saving or completing leave the flow in ``ready`` with an inline message and
never discard what the user typed.
"""
from __future__ import annotations

import logging
from datetime import datetime, UTC
from enum import Enum
from typing import Callable, Optional

from pilotvoice.client.api_client import SurveyApiClient, SurveyApiError
from pilotvoice.client.autosave import Draft, SaveStatus, SurveyAutoSaver
from pilotvoice.client.survey_start import thank_you_url
from pilotvoice.schemas.gdpr import GdprCheckResult
from pilotvoice.schemas.survey_response import MAX_RATING, MIN_RATING, SurveyResponseDto

logger = logging.getLogger(__name__)

INIT_ERROR_MESSAGE = "Failed to initialize survey. Please try again."
GDPR_CHECK_ERROR_MESSAGE = "Could not verify feedback for personal data. Please try again."
SAVE_ERROR_MESSAGE = "Could not save survey. Check your connection and try again."
COMPLETE_ERROR_MESSAGE = "Could not complete survey. Check your connection and try again."


class FlowState(str, Enum):
    INITIALIZING = "initializing"
    READY = "ready"
    COMPLETING = "completing"
    AWAITING_GDPR_DECISION = "awaiting_gdpr_decision"
    DONE = "done"
    ERROR = "error"


class SurveyFillFlow:
    """Drives one user's session on the survey form."""

    def __init__(
            self,
            api: SurveyApiClient,
            survey_id: int,
            survey_slug: str,
            initial_response: Optional[SurveyResponseDto] = None,
            debounce_seconds: float = 5.0,
            on_status_change: Optional[Callable[[SaveStatus], None]] = None,
    ):
        self.api = api
        self.survey_id = survey_id
        self.survey_slug = survey_slug
        self.debounce_seconds = debounce_seconds
        self._on_status_change = on_status_change

        self.state = FlowState.INITIALIZING
        self.response: Optional[SurveyResponseDto] = initial_response
        self.gdpr_result: Optional[GdprCheckResult] = None
        self.redirect_url: Optional[str] = None

        self.init_error: Optional[str] = None
        self.gdpr_check_error: Optional[str] = None
        self.save_error: Optional[str] = None
        self.complete_error: Optional[str] = None

        self.saver: Optional[SurveyAutoSaver] = None

    @classmethod
    def from_settings(
            cls,
            settings,
            api: SurveyApiClient,
            survey_id: int,
            survey_slug: str,
            initial_response: Optional[SurveyResponseDto] = None,
    ) -> "SurveyFillFlow":
        return cls(
            api,
            survey_id,
            survey_slug,
            initial_response=initial_response,
            debounce_seconds=settings.autosave_debounce_seconds,
        )

    @property
    def save_status(self) -> SaveStatus:
        return self.saver.status if self.saver else SaveStatus.IDLE

    @property
    def can_complete(self) -> bool:
        return (
            self.state == FlowState.READY
            and self.response is not None
            and self.response.overall_rating is not None
        )

    @property
    def draft(self) -> Draft:
        return Draft(self.response.overall_rating, self.response.open_feedback)

    async def initialize(self) -> FlowState:
        """Make sure the user has a response row, creating one if needed."""
        if self.response is None:
            try:
                self.response = await self.api.create_response(self.survey_id)
            except SurveyApiError as e:
                if e.is_conflict:
                    self.response = await self._adopt_existing_response()
                else:
                    logger.error(f"Failed to initialize survey response: {e}")

        if self.response is None:
            self.init_error = INIT_ERROR_MESSAGE
            self.state = FlowState.ERROR
            return self.state

        self.saver = SurveyAutoSaver(
            self._autosave,
            self.draft,
            debounce_seconds=self.debounce_seconds,
            on_status_change=self._on_status_change,
        )
        self.state = FlowState.READY
        return self.state

    async def _adopt_existing_response(self) -> Optional[SurveyResponseDto]:
        logger.info(f"Response for survey {self.survey_id} already exists, adopting it")
        try:
            return await self.api.get_my_response(self.survey_id)
        except SurveyApiError as e:
            logger.error(f"Failed to fetch existing survey response: {e}")
            return None

    def set_rating(self, rating: int) -> None:
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        self._edit(overall_rating=rating)

    def set_feedback(self, feedback: str) -> None:
        self._edit(open_feedback=feedback or None)
        # A verdict only applies to the text it was computed for
        if self.gdpr_result is not None and self.gdpr_result.original_text != self.response.open_feedback:
            self.gdpr_result = None
            if self.state == FlowState.AWAITING_GDPR_DECISION:
                self.state = FlowState.READY

    def _edit(self, **changes) -> None:
        if self.response is None or self.state in (FlowState.DONE, FlowState.ERROR, FlowState.INITIALIZING):
            return
        self.response = self.response.model_copy(update=changes)
        self.saver.update(self.draft)

    async def save(self) -> bool:
        """Save rating and feedback immediately, without screening or completing."""
        if self.response is None or self.saver is None:
            return False

        draft = self.draft
        self.save_error = None
        try:
            await self.api.update_response(self.response.id, **draft.as_payload())
        except SurveyApiError as e:
            logger.error(f"Manual save failed: {e}")
            self.save_error = SAVE_ERROR_MESSAGE
            self.saver.acknowledge(draft, succeeded=False)
            return False

        self.saver.acknowledge(draft, succeeded=True)
        return True

    async def complete(self) -> FlowState:
        """Screen the feedback if needed, then submit the response as completed."""
        if not self.can_complete:
            return self.state

        feedback = self.response.open_feedback
        if feedback and feedback.strip() and self.gdpr_result is None:
            self.state = FlowState.COMPLETING
            self.gdpr_check_error = None
            try:
                result = await self.api.check_gdpr(feedback)
            except SurveyApiError as e:
                logger.error(f"GDPR check failed: {e}")
                self.gdpr_check_error = GDPR_CHECK_ERROR_MESSAGE
                self.state = FlowState.READY
                return self.state

            if self.response.open_feedback != feedback:
                # Edited while screening; the verdict belongs to the old text
                logger.info("Feedback changed during GDPR check, discarding verdict")
                self.state = FlowState.READY
                return self.state
            if result.missing_rewrite:
                logger.error("GDPR check flagged personal data without an anonymized version")
                self.gdpr_check_error = GDPR_CHECK_ERROR_MESSAGE
                self.state = FlowState.READY
                return self.state

            self.gdpr_result = result
            if result.contains_personal_data:
                self.state = FlowState.AWAITING_GDPR_DECISION
                return self.state

        return await self._submit()

    async def accept_anonymized(self) -> FlowState:
        """Replace the feedback with its anonymized version and submit."""
        if self.state != FlowState.AWAITING_GDPR_DECISION or self.gdpr_result is None:
            return self.state

        if self.gdpr_result.missing_rewrite:
            self.gdpr_result = None
            self.gdpr_check_error = GDPR_CHECK_ERROR_MESSAGE
            self.state = FlowState.READY
            return self.state

        anonymized = self.gdpr_result.anonymized_text
        self.response = self.response.model_copy(update={"open_feedback": anonymized})
        self.gdpr_result = None
        return await self._submit()

    def edit_response(self) -> FlowState:
        """Dismiss the GDPR warning and let the user change the feedback."""
        self.gdpr_result = None
        self.gdpr_check_error = None
        if self.state == FlowState.AWAITING_GDPR_DECISION:
            self.state = FlowState.READY
        return self.state

    async def _submit(self) -> FlowState:
        self.state = FlowState.COMPLETING
        self.complete_error = None
        self.saver.cancel_pending()

        try:
            self.response = await self.api.update_response(
                self.response.id,
                overall_rating=self.response.overall_rating,
                open_feedback=self.response.open_feedback,
                completed_at=datetime.now(UTC),
            )
        except SurveyApiError as e:
            logger.error(f"Failed to complete survey response {self.response.id}: {e}")
            self.complete_error = COMPLETE_ERROR_MESSAGE
            self.state = FlowState.READY
            return self.state

        await self.saver.close()
        self.redirect_url = thank_you_url(self.survey_slug)
        self.state = FlowState.DONE
        return self.state

    async def close(self) -> None:
        if self.saver is not None:
            await self.saver.close()

    async def _autosave(self, draft: Draft) -> None:
        await self.api.update_response(self.response.id, **draft.as_payload())
