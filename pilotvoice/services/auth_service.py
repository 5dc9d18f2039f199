"""Verification of access tokens issued by the identity provider."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from pilotvoice.config import Settings

logger = logging.getLogger(__name__)


class AuthError(RuntimeError):
    """Raised when authentication fails."""


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity extracted from a verified access token."""

    id: UUID
    email: str | None = None
    role: str | None = None


class AuthService:
    """Decode and (for local development and tests) issue HS-signed access tokens.

    Tokens follow the identity provider's layout: ``sub`` carries the user id
    and ``aud`` is the configured audience.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def create_access_token(self, user_id: UUID, email: str | None = None) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "aud": self.settings.jwt_audience,
            "iat": now,
            "exp": now + timedelta(minutes=self.settings.access_token_exp_minutes),
            "role": "authenticated",
        }
        if email:
            payload["email"] = email
        return jwt.encode(payload, self.settings.auth_jwt_secret, algorithm=self.settings.jwt_algorithm)

    def decode_access_token(self, token: str) -> dict:
        try:
            return jwt.decode(
                token,
                self.settings.auth_jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
                audience=self.settings.jwt_audience,
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthError("token_expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthError("invalid_token") from exc

    def authenticate(self, token: str) -> AuthenticatedUser:
        payload = self.decode_access_token(token)
        subject = payload.get("sub")
        if not subject:
            raise AuthError("invalid_token")
        try:
            user_id = UUID(str(subject))
        except ValueError as exc:
            raise AuthError("invalid_token") from exc
        return AuthenticatedUser(id=user_id, email=payload.get("email"), role=payload.get("role"))
