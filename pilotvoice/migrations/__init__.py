"""Alembic migrations for the PilotVoice schema."""
