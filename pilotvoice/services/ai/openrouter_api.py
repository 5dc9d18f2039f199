"""
Helper for interacting with the OpenRouter API.

OpenRouter exposes an OpenAI-compatible chat completions endpoint, so the
official ``openai`` SDK is pointed at it. Completions are requested with a
strict JSON schema and parsed into plain dicts.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from pilotvoice.config import Settings

__all__ = [
    "OpenRouterError",
    "OpenRouterAPIError",
    "OpenRouterValidationError",
    "ResponseSchema",
    "OpenRouterClient",
]

logger = logging.getLogger(__name__)

JsonSchema = dict[str, Any]


class OpenRouterError(RuntimeError):
    """Raised when OpenRouter cannot be contacted or is misconfigured."""


class OpenRouterAPIError(OpenRouterError):
    """Raised when OpenRouter answers with a non-2xx status."""

    def __init__(self, message: str, status: int, details: Any = None):
        super().__init__(message)
        self.status = status
        self.details = details


class OpenRouterValidationError(OpenRouterError):
    """Raised when a completion cannot be parsed into the requested shape."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


@dataclass(frozen=True)
class ResponseSchema:
    """Named JSON schema the completion must satisfy."""

    name: str
    schema: JsonSchema


def describe_status(status: int, details: Any = None) -> str:
    """User-friendly message for an OpenRouter HTTP status code."""
    if status == 401:
        return "Invalid API Key. Please check your OpenRouter API key configuration."
    if status == 429:
        return "Rate limit exceeded. Please try again later."
    if status in (500, 502, 503):
        return "OpenRouter service is temporarily unavailable. Please try again later."

    message = f"API request failed with status {status}"
    error = details.get("error") if isinstance(details, dict) else None
    if isinstance(error, dict) and error.get("message"):
        message = f"{message}: {error['message']}"
    return message


class OpenRouterClient:
    """Structured (JSON-schema constrained) completions through OpenRouter."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if not self.settings.openrouter_api_key:
            logger.error("OpenRouterClient: OPENROUTER_API_KEY is not configured")
            raise OpenRouterError("OpenRouter API key is missing. The service cannot be used.")

        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.openrouter_api_key,
                base_url=self.settings.openrouter_base_url,
                timeout=self.settings.ai_timeout_seconds,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": self.settings.site_url,
                    "X-Title": self.settings.app_name,
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    @staticmethod
    def build_request(
            model: str,
            system_prompt: str,
            user_prompt: str,
            response_schema: ResponseSchema,
            temperature: float | None = None,
            max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Keyword arguments for ``chat.completions.create``."""
        request: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": response_schema.name,
                    "strict": True,
                    "schema": response_schema.schema,
                },
            },
        }
        if temperature is not None:
            request["temperature"] = temperature
        if max_tokens is not None:
            request["max_tokens"] = max_tokens
        return request

    async def generate_structured_completion(
            self,
            system_prompt: str,
            user_prompt: str,
            response_schema: ResponseSchema,
            model: str | None = None,
            temperature: float | None = None,
            max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """
        Request a completion constrained to ``response_schema``.

        Returns:
            The parsed JSON object produced by the model

        Raises:
            OpenRouterAPIError: If OpenRouter answers with an error status
            OpenRouterValidationError: If the answer is empty or not a JSON object
            OpenRouterError: If the key is missing or the request cannot be sent
        """
        client = self._get_client()
        request = self.build_request(
            model or self.settings.openrouter_model,
            system_prompt,
            user_prompt,
            response_schema,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        try:
            response = await client.chat.completions.create(**request)
        except APIStatusError as exc:
            details = exc.body if exc.body is not None else {"message": str(exc)}
            raise OpenRouterAPIError(describe_status(exc.status_code, details), exc.status_code, details) from exc
        except APIConnectionError as exc:
            logger.error(f"OpenRouterClient: network request failed: {exc}")
            raise OpenRouterError("Network request failed. Please check your connection.") from exc
        except OpenAIError as exc:
            raise OpenRouterError(f"OpenRouter API error: {exc}") from exc

        return self.parse_response(response)

    @staticmethod
    def parse_response(response) -> dict[str, Any]:
        """Extract and decode the JSON object from a chat completion."""
        if not response.choices:
            raise OpenRouterValidationError("API response contains no choices")

        message = response.choices[0].message
        content = message.content if message else None
        if not content:
            raise OpenRouterValidationError("API response contains no content")

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error(f"OpenRouterClient: failed to parse response as JSON: {exc}")
            raise OpenRouterValidationError(
                "Failed to parse API response as JSON",
                {"content": content, "error": str(exc)},
            ) from exc

        if not isinstance(parsed, dict):
            raise OpenRouterValidationError("Parsed response is not a valid object", {"parsed": parsed})

        return parsed
