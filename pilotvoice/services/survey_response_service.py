"""Lifecycle of survey responses: lookup, creation and partial updates."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pilotvoice.models.survey import Survey
from pilotvoice.models.survey_response import SurveyResponse
from pilotvoice.schemas.survey_response import CreateSurveyResponseCommand, UpdateSurveyResponseCommand
from pilotvoice.services.ai.anonymization_service import AnonymizationError, AnonymizationStrategy
from pilotvoice.utils.db_errors import is_unique_violation
from pilotvoice.utils.exceptions import (
    DuplicateSurveyResponseError,
    SurveyNotFoundError,
    SurveyResponseForbiddenError,
    SurveyResponseNotFoundError,
)

logger = logging.getLogger(__name__)


class SurveyResponseService:
    """Service owning the survey response row of each user."""

    def __init__(self, db: AsyncSession, anonymizer: AnonymizationStrategy):
        self.db = db
        self.anonymizer = anonymizer

    async def _ensure_survey_exists(self, survey_id: int) -> None:
        result = await self.db.execute(select(Survey.id).where(Survey.id == survey_id))
        if result.scalar_one_or_none() is None:
            raise SurveyNotFoundError(survey_id)

    async def find_user_response(self, survey_id: int, user_id: UUID) -> SurveyResponse | None:
        """Return the user's response for a survey, or None if they have not started it.

        Raises:
            SurveyNotFoundError: If the survey doesn't exist
        """
        await self._ensure_survey_exists(survey_id)

        result = await self.db.execute(
            select(SurveyResponse).where(
                SurveyResponse.survey_id == survey_id,
                SurveyResponse.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def create_survey_response(
            self,
            command: CreateSurveyResponseCommand,
            survey_id: int,
            user_id: UUID,
    ) -> SurveyResponse:
        """Start a survey for the user.

        Duplicates are detected by the unique index on (survey_id, user_id)
        rather than a prior read, so two concurrent creates cannot both succeed.

        Raises:
            SurveyNotFoundError: If the survey doesn't exist
            DuplicateSurveyResponseError: If the user already has a response
        """
        await self._ensure_survey_exists(survey_id)

        response = SurveyResponse(
            survey_id=survey_id,
            user_id=user_id,
            overall_rating=command.overall_rating,
        )
        # Savepoint so a duplicate only discards this insert, not the caller's session
        savepoint = await self.db.begin_nested()
        try:
            self.db.add(response)
            await self.db.flush()
            await savepoint.commit()
        except IntegrityError as exc:
            await savepoint.rollback()
            if is_unique_violation(exc):
                logger.info(f"User {user_id} attempted to create a second response for survey {survey_id}")
                raise DuplicateSurveyResponseError(survey_id, user_id) from exc
            raise

        await self.db.commit()
        await self.db.refresh(response)
        logger.info(f"Created survey response {response.id} for user {user_id} on survey {survey_id}")
        return response

    async def update_survey_response(
            self,
            command: UpdateSurveyResponseCommand,
            response_id: int,
            user_id: UUID,
    ) -> SurveyResponse:
        """Apply the fields present in ``command`` to the user's response.

        Non-null ``open_feedback`` is screened first and stored in anonymized
        form when it contains personal data.

        Raises:
            SurveyResponseNotFoundError: If the response doesn't exist
            SurveyResponseForbiddenError: If the user doesn't own the response
            AnonymizationError: If feedback screening fails (nothing is written)
        """
        result = await self.db.execute(select(SurveyResponse).where(SurveyResponse.id == response_id))
        response = result.scalar_one_or_none()

        if response is None:
            raise SurveyResponseNotFoundError(response_id)

        if response.user_id != user_id:
            logger.warning(f"User {user_id} attempted to update survey response {response_id} they do not own")
            raise SurveyResponseForbiddenError()

        changes = command.provided_fields()

        feedback = changes.get("open_feedback")
        if feedback is not None:
            try:
                verdict = await self.anonymizer.check_and_anonymize(feedback)
            except AnonymizationError:
                logger.error(f"Anonymization error for survey response {response_id}", exc_info=True)
                raise
            except Exception as exc:
                logger.error(f"Unknown error during anonymization for survey response {response_id}", exc_info=True)
                raise AnonymizationError(str(exc) or "Unknown error") from exc
            if verdict.missing_rewrite:
                logger.error(f"Personal data flagged without a rewrite for survey response {response_id}")
                raise AnonymizationError("Personal data detected but no anonymized text was produced")
            changes["open_feedback"] = verdict.stored_text

        for field, value in changes.items():
            setattr(response, field, value)

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(response)
        logger.info(f"Updated survey response {response_id} fields={sorted(changes)}")
        return response
