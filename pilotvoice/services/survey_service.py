"""Survey lookup."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pilotvoice.models.survey import Survey
from pilotvoice.utils.exceptions import SurveyNotFoundError

logger = logging.getLogger(__name__)


class SurveyService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_survey_by_slug(self, slug: str) -> Survey:
        """Fetch a survey together with its competition.

        Raises:
            SurveyNotFoundError: If no survey has this slug
        """
        result = await self.db.execute(
            select(Survey).options(selectinload(Survey.competition)).where(Survey.slug == slug)
        )
        survey = result.scalar_one_or_none()
        if survey is None:
            raise SurveyNotFoundError(slug)

        if survey.competition is None:
            logger.error(f"Survey {survey.id} references missing competition {survey.competition_id}")
            raise RuntimeError(f"Competition with id {survey.competition_id} not found")

        return survey
