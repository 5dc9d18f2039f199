"""Helpers for interpreting database driver errors."""
from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Return True when the integrity error comes from a unique constraint.

    asyncpg exposes the SQLSTATE on the wrapped driver error; SQLite only
    reports it in the message text.
    """
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is None:
        cause = getattr(orig, "__cause__", None)
        sqlstate = getattr(cause, "sqlstate", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    return "UNIQUE constraint failed" in str(orig)
