"""Schemas for the caller's profile."""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field

from pilotvoice.schemas.base import BaseSchema


class ProfileDto(BaseSchema):
    civl_id: Optional[int] = None
    registration_reason: Optional[str] = None
    role: str


class UpdateProfileCommand(BaseSchema):
    """Profile fields the user may edit."""

    civl_id: Optional[Annotated[int, Field(gt=0, strict=True)]] = None
    registration_reason: Optional[Annotated[str, Field(max_length=500)]] = None
