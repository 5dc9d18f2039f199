"""Base utilities for SQLAlchemy models."""
from datetime import datetime, UTC
from enum import Enum
import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.sql import sqltypes


class UserRole(str, Enum):
    """Profile role enumeration for type safety."""
    USER = "user"
    ADMIN = "admin"


def utc_now() -> datetime:
    return datetime.now(UTC)


class AdaptiveUUID(sqltypes.TypeDecorator):
    """UUID stored natively on PostgreSQL and as 36-char text elsewhere."""

    impl = sqltypes.String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PGUUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    @staticmethod
    def _coerce_uuid(value):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))

    def process_bind_param(self, value, dialect):
        value = self._coerce_uuid(value)
        if value is None or dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        return self._coerce_uuid(value)


def get_uuid_column(*args, **kwargs):
    """Get a UUID column that adapts to the database dialect.

    Args:
        *args: Positional arguments to pass to Column (e.g., ForeignKey)
        **kwargs: Keyword arguments to pass to Column (e.g., primary_key=True)

    Example:
        user_id = get_uuid_column(primary_key=True)
    """
    return Column(AdaptiveUUID(), *args, **kwargs)


def created_at_column():
    return Column(DateTime(timezone=True), nullable=False, default=utc_now)


def updated_at_column():
    return Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
