"""FastAPI dependencies."""
import logging

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pilotvoice.config import Settings
from pilotvoice.database import get_db
from pilotvoice.services.ai.anonymization_service import AnonymizationStrategy
from pilotvoice.services.auth_service import AuthError, AuthService, AuthenticatedUser
from pilotvoice.services.survey_response_service import SurveyResponseService

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_anonymization_service(request: Request) -> AnonymizationStrategy:
    """The anonymization strategy chosen when the application was created."""
    return request.app.state.anonymization_service


def get_survey_response_service(
        db: AsyncSession = Depends(get_db),
        anonymizer: AnonymizationStrategy = Depends(get_anonymization_service),
) -> SurveyResponseService:
    return SurveyResponseService(db, anonymizer)


async def get_current_user(
        request: Request,
        authorization: str | None = Header(default=None, alias="Authorization"),
        settings: Settings = Depends(get_app_settings),
) -> AuthenticatedUser:
    """Resolve the authenticated user via the identity provider's JWT access token.

    Checks for the access token in the following order:
    1. HTTP-only cookie
    2. Authorization header (API clients)
    """
    token = request.cookies.get(settings.access_token_cookie_name)
    token_source = "cookie"

    if not token and authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise HTTPException(status_code=401, detail="invalid_authorization_header")
        token_source = "header"

    if not token:
        raise HTTPException(status_code=401, detail="missing_credentials")

    try:
        user = AuthService(settings).authenticate(token)
    except AuthError as exc:
        detail = "token_expired" if str(exc) == "token_expired" else "invalid_token"
        raise HTTPException(status_code=401, detail=detail) from exc

    logger.debug(f"Authenticated user via JWT {token_source}: {user.id}")
    return user
