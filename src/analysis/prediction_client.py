"""HTTP client for the sensor prediction service."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from analysis.errors import PredictionServiceError
from config.settings import get_settings

LOGGER = logging.getLogger(__name__)


class PredictionClient:
    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        settings = get_settings()
        self._url = settings.prediction_service_url
        self._timeout = settings.prediction_timeout_seconds
        self._transport = transport

    async def predict(self, features: dict[str, float]) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(self._url, json=features)

        if response.is_error:
            LOGGER.error("Prediction request failed | status=%s", response.status_code)
            try:
                body: Any = response.json()
            except ValueError:
                body = response.text
            raise PredictionServiceError(body, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise PredictionServiceError(
                {"error": "Prediction service returned a non-JSON body"}, status_code=502
            ) from exc
        if not isinstance(data, dict):
            raise PredictionServiceError(
                {"error": "Prediction service returned a non-object body"}, status_code=502
            )
        return data
