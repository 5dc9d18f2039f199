"""Profile model keyed by the identity provider's user id."""
from __future__ import annotations

from sqlalchemy import Column, Integer, String, Text

from pilotvoice.database import Base
from pilotvoice.models.base import UserRole, created_at_column, get_uuid_column, updated_at_column


class Profile(Base):
    """Application-side profile for an authenticated identity."""

    __tablename__ = "profiles"

    user_id = get_uuid_column(primary_key=True)
    civl_id = Column(Integer, nullable=True)
    registration_reason = Column(Text, nullable=True)
    role = Column(String(16), nullable=False, default=UserRole.USER.value)
    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self) -> str:
        return f"<Profile(user_id={self.user_id}, role={self.role})>"
