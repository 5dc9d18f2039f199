"""Utility functions for Alembic migrations."""
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from alembic import op


def get_uuid_type():
    """UUID column type for the current dialect.

    PostgreSQL gets the native UUID type; SQLite and others store the
    36-character string form, matching ``AdaptiveUUID`` on the models.
    """
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return UUID(as_uuid=True)
    return sa.String(length=36)


def get_timestamp_default():
    """Server default for timestamp columns: NOW() on PostgreSQL, CURRENT_TIMESTAMP elsewhere."""
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return sa.text('NOW()')
    return sa.text('CURRENT_TIMESTAMP')
