"""Profile read/update for the authenticated user."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pilotvoice.models.profile import Profile
from pilotvoice.schemas.profile import UpdateProfileCommand

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_create_profile(self, user_id: UUID) -> Profile:
        """Profiles are created on first access for identities the provider already knows."""
        result = await self.db.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()
        if profile is not None:
            return profile

        profile = Profile(user_id=user_id)
        self.db.add(profile)
        try:
            await self.db.commit()
        except IntegrityError:
            # Created concurrently by another request
            await self.db.rollback()
            result = await self.db.execute(select(Profile).where(Profile.user_id == user_id))
            return result.scalar_one()

        await self.db.refresh(profile)
        logger.info(f"Created profile for user {user_id}")
        return profile

    async def update_profile(self, user_id: UUID, command: UpdateProfileCommand) -> Profile:
        profile = await self.get_or_create_profile(user_id)
        for field in command.model_fields_set:
            setattr(profile, field, getattr(command, field))
        await self.db.commit()
        await self.db.refresh(profile)
        return profile
