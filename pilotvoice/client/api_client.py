"""HTTP client for the survey API."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional

import aiohttp
from aiohttp import ClientError, ClientTimeout

from pilotvoice.schemas.gdpr import GdprCheckResult
from pilotvoice.schemas.survey import SurveyWithCompetition
from pilotvoice.schemas.survey_response import SurveyResponseDto
from pilotvoice.utils.datetime_helpers import to_iso_utc

logger = logging.getLogger(__name__)


class SurveyApiError(Exception):
    """Raised when the survey API answers with an error or cannot be reached.

    ``status`` is 0 when no HTTP response was received.
    """

    def __init__(self, status: int, detail: str):
        super().__init__(f"Survey API error {status}: {detail}")
        self.status = status
        self.detail = detail

    @property
    def is_conflict(self) -> bool:
        return self.status == 409


class SurveyApiClient:
    """
    Client for the survey endpoints, authenticated with a bearer token.

    The aiohttp session is created lazily on first use and must be closed
    with ``close()`` or by using the client as an async context manager.
    """

    def __init__(
            self,
            base_url: str,
            access_token: Optional[str] = None,
            timeout_seconds: float = 30,
            session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.access_token = access_token
        self.timeout = ClientTimeout(total=timeout_seconds)
        self._session = session

    @classmethod
    def from_settings(cls, settings, base_url: str, access_token: Optional[str] = None) -> "SurveyApiClient":
        return cls(base_url, access_token=access_token, timeout_seconds=settings.client_timeout_seconds)

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            logger.debug("Created new aiohttp session for survey API client")

    async def close(self):
        """Close the underlying aiohttp client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("Closed aiohttp session for survey API client")
        self._session = None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def _request(self, method: str, endpoint: str, payload: Any = None) -> Any:
        await self._ensure_session()
        url = f"{self.base_url}{endpoint}"

        try:
            async with self._session.request(method, url, json=payload, headers=self._headers()) as response:
                if response.status >= 400:
                    raise SurveyApiError(response.status, await self._error_detail(response))
                if response.status == 204:
                    return None
                return await response.json()
        except asyncio.TimeoutError as e:
            logger.error(f"Survey API timeout for {method} {endpoint}")
            raise SurveyApiError(0, "timeout") from e
        except ClientError as e:
            logger.error(f"Survey API client error for {method} {endpoint}: {e}")
            raise SurveyApiError(0, "network_error") from e

    @staticmethod
    async def _error_detail(response: aiohttp.ClientResponse) -> str:
        try:
            body = await response.json(content_type=None)
        except (ValueError, ClientError):
            return await response.text() or response.reason or "unknown_error"
        if isinstance(body, dict) and isinstance(body.get("detail"), str):
            return body["detail"]
        return str(body)

    async def get_my_response(self, survey_id: int) -> Optional[SurveyResponseDto]:
        """The caller's response for ``survey_id``, or None if they have not started."""
        data = await self._request("GET", f"/api/surveys/{survey_id}/responses/me")
        return SurveyResponseDto.model_validate(data) if data else None

    async def create_response(self, survey_id: int, overall_rating: Optional[int] = None) -> SurveyResponseDto:
        payload = {"overall_rating": overall_rating} if overall_rating is not None else {}
        data = await self._request("POST", f"/api/surveys/{survey_id}/responses", payload)
        return SurveyResponseDto.model_validate(data)

    async def update_response(self, response_id: int, **fields: Any) -> SurveyResponseDto:
        """PATCH only the keyword arguments given; ``None`` values are sent as null."""
        payload = {
            key: to_iso_utc(value) if isinstance(value, datetime) else value
            for key, value in fields.items()
        }
        data = await self._request("PATCH", f"/api/survey-responses/{response_id}", payload)
        return SurveyResponseDto.model_validate(data)

    async def check_gdpr(self, text: str) -> GdprCheckResult:
        data = await self._request("POST", "/api/survey-responses/check-gdpr", {"text": text})
        return GdprCheckResult.model_validate(data)

    async def get_survey_by_slug(self, slug: str) -> SurveyWithCompetition:
        data = await self._request("GET", f"/api/surveys/by-slug/{slug}")
        return SurveyWithCompetition.model_validate(data)
