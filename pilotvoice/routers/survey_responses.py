"""Survey response update and GDPR check endpoints."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, status

from pilotvoice.dependencies import get_anonymization_service, get_current_user, get_survey_response_service
from pilotvoice.schemas.gdpr import GdprCheckRequest, GdprCheckResult
from pilotvoice.schemas.survey_response import SurveyResponseDto, UpdateSurveyResponseCommand
from pilotvoice.services.ai.anonymization_service import AnonymizationError, AnonymizationStrategy
from pilotvoice.services.auth_service import AuthenticatedUser
from pilotvoice.services.survey_response_service import SurveyResponseService
from pilotvoice.utils.exceptions import SurveyResponseForbiddenError, SurveyResponseNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/survey-responses", tags=["survey-responses"])


@router.post("/check-gdpr", response_model=GdprCheckResult)
async def check_gdpr(
    request: GdprCheckRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    anonymizer: AnonymizationStrategy = Depends(get_anonymization_service),
) -> GdprCheckResult:
    """Screen feedback for personal data and return both original and anonymized text."""
    if not request.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="text_empty")

    try:
        return await anonymizer.check_and_anonymize(request.text)
    except AnonymizationError as e:
        logger.error(f"GDPR check failed for user {user.id}: {e}")
        raise HTTPException(status_code=500, detail="anonymization_failed")
    except Exception as e:
        logger.error(f"Unexpected error in GDPR check: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_server_error")


@router.patch("/{response_id}", response_model=SurveyResponseDto)
async def update_survey_response(
    response_id: int = Path(..., gt=0),
    command: Optional[UpdateSurveyResponseCommand] = Body(default=None),
    user: AuthenticatedUser = Depends(get_current_user),
    service: SurveyResponseService = Depends(get_survey_response_service),
) -> SurveyResponseDto:
    """Save progress on, or complete, the caller's survey response.

    ``open_feedback`` is anonymized before it is stored.
    """
    try:
        response = await service.update_survey_response(
            command or UpdateSurveyResponseCommand(), response_id, user.id
        )
    except SurveyResponseNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="survey_response_not_found")
    except SurveyResponseForbiddenError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
    except AnonymizationError as e:
        logger.error(f"Anonymization failed: {e}")
        raise HTTPException(status_code=500, detail="anonymization_failed")
    except Exception as e:
        logger.error(f"Unexpected error updating survey response: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_server_error")

    return SurveyResponseDto.model_validate(response)
