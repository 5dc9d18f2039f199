"""Utilities module."""
from pilotvoice.utils.datetime_helpers import ensure_utc

__all__ = ["ensure_utc"]
