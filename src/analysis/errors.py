"""Domain-specific exceptions for the sensor analysis proxy.

These exceptions are safe to import from API layers without triggering network clients.
"""

from __future__ import annotations

from typing import Any


class AnalysisError(Exception):
    status_code: int = 500
    default_detail: str = "Analysis error"

    def __init__(self, detail: Any = None, *, status_code: int | None = None) -> None:
        if detail is None:
            detail = self.default_detail
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code

    def to_content(self) -> Any:
        if isinstance(self.detail, (dict, list)):
            return self.detail
        return {"error": self.detail}


class UpstreamResponseError(AnalysisError):
    """An upstream service answered with an error; its status and body pass through."""

    default_detail = "Upstream service returned an error."


class PredictionServiceError(UpstreamResponseError):
    default_detail = "Prediction service returned an error."


class GenerativeServiceError(UpstreamResponseError):
    default_detail = "Generative service returned an error."


class UpstreamUnavailableError(AnalysisError):
    status_code = 500
    default_detail = "Failed to connect to Python or Gemini"
