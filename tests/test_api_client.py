"""Tests for the aiohttp survey API client."""
from __future__ import annotations

import asyncio
from datetime import datetime, UTC

import pytest
from aiohttp import ClientError, ClientTimeout

from pilotvoice.client.api_client import SurveyApiClient, SurveyApiError

RESPONSE_JSON = {
    "id": 11,
    "survey_id": 3,
    "user_id": "6f1c7d1e-8c1f-4b59-9d55-3a0b5f1a2c44",
    "overall_rating": None,
    "open_feedback": None,
    "completed_at": None,
    "created_at": "2025-06-01T10:00:00Z",
    "updated_at": "2025-06-01T10:00:00Z",
}


class FakeResponse:
    def __init__(self, status: int, body=None, text: str = ""):
        self.status = status
        self._body = body
        self._text = text
        self.reason = "Reason"

    async def json(self, content_type="application/json"):
        if self._body is None and self._text:
            raise ValueError("not json")
        return self._body

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Records requests and replays queued responses or exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []
        self.closed = False

    def request(self, method, url, json=None, headers=None):
        self.requests.append({"method": method, "url": url, "json": json, "headers": headers})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self):
        self.closed = True


def make_client(*outcomes, token="token-123"):
    session = FakeSession(*outcomes)
    client = SurveyApiClient("http://api.example.com/", access_token=token, session=session)
    return client, session


class TestInit:

    def test_strips_trailing_slash(self):
        client = SurveyApiClient("http://api.example.com///")
        assert client.base_url == "http://api.example.com"

    def test_timeout(self):
        client = SurveyApiClient("http://api.example.com", timeout_seconds=12)
        assert isinstance(client.timeout, ClientTimeout)
        assert client.timeout.total == 12

    def test_from_settings(self):
        from pilotvoice.config import Settings

        client = SurveyApiClient.from_settings(Settings(client_timeout_seconds=7), "http://api", "tok")
        assert client.timeout.total == 7
        assert client.access_token == "tok"

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        client, session = make_client()
        async with client:
            pass
        assert session.closed
        assert client._session is None


class TestRequests:

    @pytest.mark.asyncio
    async def test_get_my_response_sends_bearer_token(self):
        client, session = make_client(FakeResponse(200, RESPONSE_JSON))

        response = await client.get_my_response(3)

        assert response.id == 11
        request = session.requests[0]
        assert request["method"] == "GET"
        assert request["url"] == "http://api.example.com/api/surveys/3/responses/me"
        assert request["headers"]["Authorization"] == "Bearer token-123"

    @pytest.mark.asyncio
    async def test_get_my_response_null(self):
        client, _ = make_client(FakeResponse(200, None))
        assert await client.get_my_response(3) is None

    @pytest.mark.asyncio
    async def test_no_token_no_header(self):
        client, session = make_client(FakeResponse(200, None), token=None)
        await client.get_my_response(3)
        assert "Authorization" not in session.requests[0]["headers"]

    @pytest.mark.asyncio
    async def test_create_response_sends_empty_object(self):
        client, session = make_client(FakeResponse(201, RESPONSE_JSON))

        await client.create_response(3)

        assert session.requests[0]["method"] == "POST"
        assert session.requests[0]["json"] == {}

    @pytest.mark.asyncio
    async def test_update_sends_only_given_fields(self):
        client, session = make_client(FakeResponse(200, RESPONSE_JSON))

        await client.update_response(
            11, open_feedback=None, completed_at=datetime(2025, 6, 2, 9, 0, tzinfo=UTC)
        )

        request = session.requests[0]
        assert request["method"] == "PATCH"
        assert request["url"] == "http://api.example.com/api/survey-responses/11"
        assert request["json"] == {"open_feedback": None, "completed_at": "2025-06-02T09:00:00Z"}

    @pytest.mark.asyncio
    async def test_check_gdpr_reads_camel_case(self):
        client, session = make_client(FakeResponse(200, {
            "containsPersonalData": True,
            "confidence": 0.8,
            "originalText": "Hi Tom",
            "anonymizedText": "Hi there",
            "detectedDataTypes": ["full_name"],
        }))

        result = await client.check_gdpr("Hi Tom")

        assert result.contains_personal_data is True
        assert result.anonymized_text == "Hi there"
        assert session.requests[0]["json"] == {"text": "Hi Tom"}


class TestErrors:

    @pytest.mark.asyncio
    async def test_error_status_carries_detail(self):
        client, _ = make_client(FakeResponse(409, {"detail": "survey_response_exists"}))

        with pytest.raises(SurveyApiError) as exc_info:
            await client.create_response(3)

        assert exc_info.value.status == 409
        assert exc_info.value.detail == "survey_response_exists"
        assert exc_info.value.is_conflict

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        client, _ = make_client(FakeResponse(502, None, text="Bad gateway"))

        with pytest.raises(SurveyApiError) as exc_info:
            await client.get_my_response(3)

        assert exc_info.value.status == 502
        assert exc_info.value.detail == "Bad gateway"

    @pytest.mark.asyncio
    async def test_timeout(self):
        client, _ = make_client(asyncio.TimeoutError())

        with pytest.raises(SurveyApiError) as exc_info:
            await client.get_my_response(3)

        assert exc_info.value.status == 0
        assert exc_info.value.detail == "timeout"

    @pytest.mark.asyncio
    async def test_network_error(self):
        client, _ = make_client(ClientError("connection refused"))

        with pytest.raises(SurveyApiError) as exc_info:
            await client.check_gdpr("text")

        assert exc_info.value.detail == "network_error"
