"""Profile endpoints for the authenticated user."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from pilotvoice.database import get_db
from pilotvoice.dependencies import get_current_user
from pilotvoice.schemas.profile import ProfileDto, UpdateProfileCommand
from pilotvoice.services.auth_service import AuthenticatedUser
from pilotvoice.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile", response_model=ProfileDto)
async def get_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProfileDto:
    try:
        profile = await ProfileService(db).get_or_create_profile(user.id)
    except Exception as e:
        logger.error(f"Failed to fetch profile for {user.id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_server_error")
    return ProfileDto.model_validate(profile)


@router.patch("/profile", response_model=ProfileDto)
async def update_profile(
    command: UpdateProfileCommand,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProfileDto:
    try:
        profile = await ProfileService(db).update_profile(user.id, command)
    except Exception as e:
        logger.error(f"Failed to update profile for {user.id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_server_error")
    return ProfileDto.model_validate(profile)
