"""Seeding and removal of end-to-end test competitions and surveys."""
import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pilotvoice.models.base import utc_now
from pilotvoice.models.competition import Competition
from pilotvoice.models.survey import Survey
from pilotvoice.models.survey_response import SurveyResponse

logger = logging.getLogger(__name__)

TEST_SURVEY_SLUG_PREFIX = "e2e-"
TEST_COMPETITION_NAME_PREFIX = "E2E Test Competition"

# (name, city, country_code, starts in days, ends in days, participants, tasks)
SEED_COMPETITIONS = [
    ("Alpha", "Zakopane", "PL", -14, -12, 48, 5),
    ("Bravo", "Liptovsky Mikulas", "SK", -7, -3, 52, 4),
    ("Charlie", "Frydek Mistek", "CZ", 3, 7, 60, 6),
]


class TestDataService:
    """Creates and deletes the ``e2e-`` fixtures used by browser and API tests."""

    __test__ = False  # not a pytest test class

    def __init__(self, db: AsyncSession):
        self.db = db

    async def seed(self, suffix: str, now: datetime | None = None) -> tuple[list[int], list[str]]:
        """Insert three competitions and open surveys for the first two.

        Returns:
            (competition_ids, survey_slugs)
        """
        now = now or utc_now()
        competitions = [
            Competition(
                name=f"{TEST_COMPETITION_NAME_PREFIX} {label} {suffix}",
                city=city,
                country_code=country_code,
                starts_at=now + timedelta(days=starts),
                ends_at=now + timedelta(days=ends),
                participant_count=participants,
                tasks_count=tasks,
            )
            for label, city, country_code, starts, ends, participants, tasks in SEED_COMPETITIONS
        ]
        self.db.add_all(competitions)
        await self.db.flush()

        surveys = [
            Survey(
                competition_id=competition.id,
                slug=f"{TEST_SURVEY_SLUG_PREFIX}test-survey-{index + 1}-{suffix}",
                opens_at=now - timedelta(days=2),
                closes_at=now + timedelta(days=5 + index),
            )
            for index, competition in enumerate(competitions[:2])
        ]
        self.db.add_all(surveys)
        await self.db.commit()

        logger.info(f"Seeded {len(competitions)} competitions and {len(surveys)} surveys (suffix={suffix})")
        return [c.id for c in competitions], [s.slug for s in surveys]

    async def create_empty_survey(self, suffix: str, now: datetime | None = None) -> Survey:
        """A survey nobody has started, on a fresh competition."""
        return await self._create_survey(f"{TEST_SURVEY_SLUG_PREFIX}empty-survey-{suffix}", suffix, now)

    async def create_survey_with_response(
            self,
            user_id: UUID,
            suffix: str,
            now: datetime | None = None,
    ) -> tuple[Survey, SurveyResponse]:
        """A survey on which ``user_id`` already has an in-progress response."""
        survey = await self._create_survey(f"{TEST_SURVEY_SLUG_PREFIX}survey-with-response-{suffix}", suffix, now)
        response = SurveyResponse(survey_id=survey.id, user_id=user_id, overall_rating=4)
        self.db.add(response)
        await self.db.commit()
        await self.db.refresh(response)
        return survey, response

    async def _create_survey(self, slug: str, suffix: str, now: datetime | None) -> Survey:
        now = now or utc_now()
        competition = Competition(
            name=f"{TEST_COMPETITION_NAME_PREFIX} {suffix}",
            city="Zakopane",
            country_code="PL",
            starts_at=now - timedelta(days=7),
            ends_at=now - timedelta(days=3),
            participant_count=50,
            tasks_count=5,
        )
        self.db.add(competition)
        await self.db.flush()

        survey = Survey(
            competition_id=competition.id,
            slug=slug,
            opens_at=now - timedelta(days=2),
            closes_at=now + timedelta(days=7),
        )
        self.db.add(survey)
        await self.db.commit()
        await self.db.refresh(survey)
        return survey

    async def get_test_surveys(self) -> list[Survey]:
        result = await self.db.execute(
            select(Survey).where(Survey.slug.like(f"{TEST_SURVEY_SLUG_PREFIX}%")).order_by(Survey.id)
        )
        return list(result.scalars().all())

    async def cleanup_test_data(self, competition_ids: list[int] | None = None, dry_run: bool = False) -> dict[str, int]:
        """
        Delete test surveys, their responses and test competitions.

        Args:
            competition_ids: Restrict deletion to these competitions; all test data when omitted
            dry_run: Count what would be deleted without deleting

        Returns:
            Number of rows per table
        """
        if competition_ids is not None:
            competition_filter = Competition.id.in_(competition_ids)
        else:
            competition_filter = or_(
                Competition.name.like(f"{TEST_COMPETITION_NAME_PREFIX}%"),
                Competition.id.in_(
                    select(Survey.competition_id).where(Survey.slug.like(f"{TEST_SURVEY_SLUG_PREFIX}%"))
                ),
            )

        result = await self.db.execute(select(Competition.id).where(competition_filter))
        ids = list(result.scalars().all())

        result = await self.db.execute(select(Survey.id).where(Survey.competition_id.in_(ids)))
        survey_ids = list(result.scalars().all())

        if dry_run:
            result = await self.db.execute(
                select(SurveyResponse.id).where(SurveyResponse.survey_id.in_(survey_ids))
            )
            return {
                'survey_responses': len(result.scalars().all()),
                'surveys': len(survey_ids),
                'competitions': len(ids),
            }

        # Children first; SQLite does not enforce ON DELETE CASCADE by default
        deletion_counts = {}
        result = await self.db.execute(delete(SurveyResponse).where(SurveyResponse.survey_id.in_(survey_ids)))
        deletion_counts['survey_responses'] = result.rowcount or 0
        result = await self.db.execute(delete(Survey).where(Survey.id.in_(survey_ids)))
        deletion_counts['surveys'] = result.rowcount or 0
        result = await self.db.execute(delete(Competition).where(Competition.id.in_(ids)))
        deletion_counts['competitions'] = result.rowcount or 0

        await self.db.commit()
        logger.info(f"Removed test data: {deletion_counts}")
        return deletion_counts
