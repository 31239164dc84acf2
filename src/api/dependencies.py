"""Shared FastAPI dependencies.

Separated so tests can swap external collaborators through ``app.dependency_overrides``.
"""

from __future__ import annotations

from collections.abc import Callable

from analysis.prediction_client import PredictionClient
from analysis.service import SensorAnalyzer
from config.settings import get_settings
from integrations.elevenlabs import build_agent_leg
from integrations.twilio_client import OutboundCaller
from llm.gemini_client import GeminiClient
from relay.legs import AgentLeg


def get_analyzer() -> SensorAnalyzer:
    llm = None
    if get_settings().gemini_api_key:
        llm = GeminiClient()
    return SensorAnalyzer(PredictionClient(), llm)


def get_agent_leg_factory() -> Callable[[], AgentLeg]:
    return build_agent_leg


def get_outbound_caller() -> OutboundCaller:
    return OutboundCaller()
