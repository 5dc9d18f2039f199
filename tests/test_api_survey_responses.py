"""API tests for survey response endpoints."""
from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi import status

from pilotvoice.services.ai.anonymization_service import AnonymizationError


async def start_survey(http_client, survey_id, headers, body=None):
    return await http_client.post(f"/api/surveys/{survey_id}/responses", json=body, headers=headers)


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_get_me_requires_authentication(self, http_client, empty_survey):
        response = await http_client.get(f"/api/surveys/{empty_survey.id}/responses/me")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "missing_credentials"

    @pytest.mark.asyncio
    async def test_create_requires_authentication(self, http_client, empty_survey):
        response = await http_client.post(f"/api/surveys/{empty_survey.id}/responses", json={})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_patch_requires_authentication(self, http_client):
        response = await http_client.patch("/api/survey-responses/1", json={"overall_rating": 3})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_check_gdpr_requires_authentication(self, http_client):
        response = await http_client.post("/api/survey-responses/check-gdpr", json={"text": "hello"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_garbage_token_is_rejected(self, http_client, empty_survey):
        response = await http_client.get(
            f"/api/surveys/{empty_survey.id}/responses/me",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "invalid_token"

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_rejected(self, http_client, empty_survey):
        response = await http_client.get(
            f"/api/surveys/{empty_survey.id}/responses/me",
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "invalid_authorization_header"

    @pytest.mark.asyncio
    async def test_cookie_token_is_accepted(self, test_app, http_client, empty_survey, auth_headers):
        token = auth_headers()["Authorization"].split(" ", 1)[1]
        cookie_name = test_app.state.settings.access_token_cookie_name

        response = await http_client.get(
            f"/api/surveys/{empty_survey.id}/responses/me",
            cookies={cookie_name: token},
        )

        assert response.status_code == status.HTTP_200_OK


class TestGetMyResponse:

    @pytest.mark.asyncio
    async def test_null_before_starting(self, http_client, empty_survey, auth_headers):
        response = await http_client.get(f"/api/surveys/{empty_survey.id}/responses/me", headers=auth_headers())
        assert response.status_code == status.HTTP_200_OK
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_returns_own_response(self, http_client, empty_survey, auth_headers):
        headers = auth_headers()
        created = (await start_survey(http_client, empty_survey.id, headers, {})).json()

        response = await http_client.get(f"/api/surveys/{empty_survey.id}/responses/me", headers=headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_unknown_survey_is_404(self, http_client, auth_headers):
        response = await http_client.get("/api/surveys/987654/responses/me", headers=auth_headers())
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "survey_not_found"

    @pytest.mark.asyncio
    async def test_non_numeric_survey_id_is_400(self, http_client, auth_headers):
        response = await http_client.get("/api/surveys/abc/responses/me", headers=auth_headers())
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"]


class TestCreateResponse:

    @pytest.mark.asyncio
    async def test_creates_with_201(self, http_client, empty_survey, auth_headers):
        user_id = uuid4()
        response = await start_survey(http_client, empty_survey.id, auth_headers(user_id), {})

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["survey_id"] == empty_survey.id
        assert data["user_id"] == str(user_id)
        assert data["overall_rating"] is None
        assert data["open_feedback"] is None
        assert data["completed_at"] is None
        assert data["created_at"].endswith("Z")

    @pytest.mark.asyncio
    async def test_body_may_be_omitted(self, http_client, empty_survey, auth_headers):
        response = await start_survey(http_client, empty_survey.id, auth_headers())
        assert response.status_code == status.HTTP_201_CREATED

    @pytest.mark.asyncio
    async def test_initial_rating(self, http_client, empty_survey, auth_headers):
        response = await start_survey(http_client, empty_survey.id, auth_headers(), {"overall_rating": 3})
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["overall_rating"] == 3

    @pytest.mark.asyncio
    async def test_second_create_is_409(self, http_client, empty_survey, auth_headers):
        headers = auth_headers()
        await start_survey(http_client, empty_survey.id, headers, {})

        response = await start_survey(http_client, empty_survey.id, headers, {})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "survey_response_exists"

    @pytest.mark.asyncio
    async def test_unknown_survey_is_404(self, http_client, auth_headers):
        response = await start_survey(http_client, 987654, auth_headers(), {})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_out_of_range_rating_is_400(self, http_client, empty_survey, auth_headers):
        response = await start_survey(http_client, empty_survey.id, auth_headers(), {"overall_rating": 11})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestUpdateResponse:

    @pytest.fixture
    async def owned(self, http_client, empty_survey, auth_headers):
        headers = auth_headers()
        created = (await start_survey(http_client, empty_survey.id, headers, {})).json()
        return created["id"], headers

    @pytest.mark.asyncio
    async def test_partial_update(self, http_client, owned):
        response_id, headers = owned
        await http_client.patch(
            f"/api/survey-responses/{response_id}",
            json={"overall_rating": 4, "open_feedback": "Good tasks"},
            headers=headers,
        )

        response = await http_client.patch(
            f"/api/survey-responses/{response_id}", json={"overall_rating": 5}, headers=headers
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["overall_rating"] == 5
        assert data["open_feedback"] == "Good tasks"
        assert data["completed_at"] is None

    @pytest.mark.asyncio
    async def test_personal_feedback_is_anonymized(self, http_client, owned, fake_anonymizer):
        response_id, headers = owned
        raw = "Call Piotr at +48 600 100 200"
        fake_anonymizer.personal[raw] = "Call the organizer at the provided number"

        response = await http_client.patch(
            f"/api/survey-responses/{response_id}", json={"open_feedback": raw}, headers=headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["open_feedback"] == "Call the organizer at the provided number"

    @pytest.mark.asyncio
    async def test_completion(self, http_client, owned):
        response_id, headers = owned

        response = await http_client.patch(
            f"/api/survey-responses/{response_id}",
            json={"overall_rating": 8, "open_feedback": "Great", "completed_at": "2025-06-01T10:00:00Z"},
            headers=headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["completed_at"] == "2025-06-01T10:00:00Z"

    @pytest.mark.asyncio
    async def test_other_user_is_403(self, http_client, owned, auth_headers):
        response_id, _ = owned

        response = await http_client.patch(
            f"/api/survey-responses/{response_id}", json={"overall_rating": 1}, headers=auth_headers()
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "forbidden"

    @pytest.mark.asyncio
    async def test_unknown_response_is_404(self, http_client, auth_headers):
        response = await http_client.patch(
            "/api/survey-responses/999999", json={"overall_rating": 1}, headers=auth_headers()
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "survey_response_not_found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"overall_rating": 0},
        {"overall_rating": "5"},
        {"open_feedback": "x" * 10_001},
        {"completed_at": "yesterday"},
    ])
    async def test_invalid_body_is_400(self, http_client, owned, body):
        response_id, headers = owned
        response = await http_client.patch(f"/api/survey-responses/{response_id}", json=body, headers=headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"]

    @pytest.mark.asyncio
    async def test_anonymization_failure_is_500(self, http_client, owned, fake_anonymizer):
        response_id, headers = owned
        fake_anonymizer.error = AnonymizationError("OpenRouter service is temporarily unavailable.")

        response = await http_client.patch(
            f"/api/survey-responses/{response_id}", json={"open_feedback": "Anna was late"}, headers=headers
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "anonymization_failed"


class TestCheckGdpr:

    @pytest.mark.asyncio
    async def test_clean_text(self, http_client, auth_headers):
        response = await http_client.post(
            "/api/survey-responses/check-gdpr", json={"text": "Lovely venue"}, headers=auth_headers()
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["containsPersonalData"] is False
        assert data["originalText"] == "Lovely venue"
        assert data["anonymizedText"] is None

    @pytest.mark.asyncio
    async def test_personal_text(self, http_client, auth_headers, fake_anonymizer):
        fake_anonymizer.personal["Thanks Marek"] = "Thanks to the organizer"

        response = await http_client.post(
            "/api/survey-responses/check-gdpr", json={"text": "Thanks Marek"}, headers=auth_headers()
        )

        data = response.json()
        assert data["containsPersonalData"] is True
        assert data["anonymizedText"] == "Thanks to the organizer"
        assert data["detectedDataTypes"] == ["full_name"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"text": 42}])
    async def test_missing_text_is_400(self, http_client, auth_headers, body):
        response = await http_client.post("/api/survey-responses/check-gdpr", json=body, headers=auth_headers())
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_blank_text_is_400(self, http_client, auth_headers, fake_anonymizer):
        response = await http_client.post(
            "/api/survey-responses/check-gdpr", json={"text": "   "}, headers=auth_headers()
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "text_empty"
        assert fake_anonymizer.calls == []

    @pytest.mark.asyncio
    async def test_screening_failure_is_500(self, http_client, auth_headers, fake_anonymizer):
        fake_anonymizer.error = AnonymizationError("Rate limit exceeded. Please try again later.")

        response = await http_client.post(
            "/api/survey-responses/check-gdpr", json={"text": "Some text"}, headers=auth_headers()
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
