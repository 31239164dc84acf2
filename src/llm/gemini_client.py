"""Client for the Google Gemini ``generateContent`` REST endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from analysis.errors import GenerativeServiceError
from config.settings import get_settings
from llm.base import BaseLLMClient

LOGGER = logging.getLogger(__name__)


class GeminiClient(BaseLLMClient):
    """Minimal client for Gemini text generation over plain HTTPS."""

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        settings = get_settings()
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY must be configured for the Gemini client.")

        self._endpoint = settings.gemini_endpoint.rstrip("/")
        self._model = settings.gemini_model
        self._api_key = settings.gemini_api_key
        self._timeout = settings.gemini_timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "X-Goog-Api-Key": self._api_key}

    async def complete(self, prompt: str, *, temperature: float | None = None) -> str:
        payload: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if temperature is not None:
            payload["generationConfig"] = {"temperature": temperature}

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(
                f"{self._endpoint}/{self._model}:generateContent",
                json=payload,
                headers=self._headers(),
            )

        if response.is_error:
            LOGGER.error("Gemini request failed | status=%s", response.status_code)
            raise GenerativeServiceError(_error_body(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise GenerativeServiceError(
                {"error": "Generative service returned a non-JSON body"}, status_code=502
            ) from exc
        return first_candidate_text(data)


def first_candidate_text(data: Any) -> str:
    """Text of the first part of the first candidate, or ``""`` when absent."""

    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
