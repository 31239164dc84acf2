"""Sensor analysis: prediction service call enriched with a generated expert note."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from analysis.errors import UpstreamUnavailableError
from analysis.prediction_client import PredictionClient
from analysis.schemas import SensorReading
from llm.base import BaseLLMClient
from prompts.loader import load_prompt

LOGGER = logging.getLogger(__name__)

PROMPT_FILE = "sensor_analysis.txt"


def build_analysis_prompt(prediction: dict[str, Any]) -> str:
    return load_prompt(PROMPT_FILE).format(data=json.dumps(prediction, indent=2))


class SensorAnalyzer:
    """Forwards readings to the prediction service and asks the LLM to explain the result.

    Without an LLM client the note is left empty. Upstream error responses surface as
    ``UpstreamResponseError`` subclasses; connection failures as
    ``UpstreamUnavailableError``.
    """

    def __init__(self, predictor: PredictionClient, llm: BaseLLMClient | None = None) -> None:
        self._predictor = predictor
        self._llm = llm

    async def analyze(self, reading: SensorReading) -> dict[str, Any]:
        try:
            prediction = await self._predictor.predict(reading.to_features())
            charts = prediction.pop("charts", None)

            note = ""
            if self._llm is not None:
                note = await self._llm.complete(build_analysis_prompt(prediction))
            else:
                LOGGER.info("No generative client configured; skipping analysis note")
        except httpx.TransportError as exc:
            LOGGER.error("Upstream connection failed: %s", exc)
            raise UpstreamUnavailableError() from exc

        return {**prediction, "note": note, "charts": charts}
