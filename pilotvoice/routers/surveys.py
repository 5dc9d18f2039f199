"""Survey lookup and survey response creation endpoints."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from pilotvoice.database import get_db
from pilotvoice.dependencies import get_current_user, get_survey_response_service
from pilotvoice.schemas.survey import CompetitionDto, SurveyDto, SurveyWithCompetition
from pilotvoice.schemas.survey_response import CreateSurveyResponseCommand, SurveyResponseDto
from pilotvoice.services.auth_service import AuthenticatedUser
from pilotvoice.services.survey_response_service import SurveyResponseService
from pilotvoice.services.survey_service import SurveyService
from pilotvoice.utils.exceptions import DuplicateSurveyResponseError, SurveyNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/surveys", tags=["surveys"])

SurveyId = Path(..., gt=0, description="Survey id")


@router.get("/by-slug/{slug}", response_model=SurveyWithCompetition)
async def get_survey_by_slug(
    slug: str = Path(..., min_length=1, max_length=120),
    db: AsyncSession = Depends(get_db),
) -> SurveyWithCompetition:
    """Return a survey and its competition, as shown on the survey landing page."""
    try:
        survey = await SurveyService(db).get_survey_by_slug(slug)
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
    except Exception as e:
        logger.error(f"Error fetching survey {slug!r}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_server_error")

    return SurveyWithCompetition(
        survey=SurveyDto(
            id=survey.id,
            competition_id=survey.competition_id,
            slug=survey.slug,
            opens_at=survey.opens_at,
            closes_at=survey.closes_at,
            is_open=survey.is_open(),
        ),
        competition=CompetitionDto.model_validate(survey.competition),
    )


@router.get("/{survey_id}/responses/me", response_model=Optional[SurveyResponseDto])
async def get_my_survey_response(
    survey_id: int = SurveyId,
    user: AuthenticatedUser = Depends(get_current_user),
    service: SurveyResponseService = Depends(get_survey_response_service),
) -> SurveyResponseDto | None:
    """Return the caller's response for the survey, or null if they have not started it."""
    try:
        response = await service.find_user_response(survey_id, user.id)
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
    except Exception as e:
        logger.error(f"Error fetching survey response: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_server_error")

    return SurveyResponseDto.model_validate(response) if response else None


@router.post("/{survey_id}/responses", response_model=SurveyResponseDto, status_code=status.HTTP_201_CREATED)
async def create_survey_response(
    survey_id: int = SurveyId,
    command: Optional[CreateSurveyResponseCommand] = Body(default=None),
    user: AuthenticatedUser = Depends(get_current_user),
    service: SurveyResponseService = Depends(get_survey_response_service),
) -> SurveyResponseDto:
    """Start the survey for the caller."""
    try:
        response = await service.create_survey_response(
            command or CreateSurveyResponseCommand(), survey_id, user.id
        )
    except SurveyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_not_found")
    except DuplicateSurveyResponseError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="survey_response_exists")
    except Exception as e:
        logger.error(f"Error creating survey response: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_server_error")

    return SurveyResponseDto.model_validate(response)
