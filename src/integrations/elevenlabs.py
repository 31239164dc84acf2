from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode

from config.settings import get_settings
from relay.legs import WebSocketAgentLeg


@dataclass(frozen=True)
class ElevenLabsConfig:
    agent_id: str
    convai_url: str


def get_elevenlabs_config() -> ElevenLabsConfig:
    settings = get_settings()
    if not settings.elevenlabs_agent_id:
        raise ValueError("ELEVENLABS_AGENT_ID is not configured")

    return ElevenLabsConfig(
        agent_id=settings.elevenlabs_agent_id,
        convai_url=settings.elevenlabs_convai_url,
    )


def conversation_url(cfg: ElevenLabsConfig) -> str:
    separator = "&" if "?" in cfg.convai_url else "?"
    return f"{cfg.convai_url}{separator}{urlencode({'agent_id': cfg.agent_id})}"


def build_agent_leg(cfg: ElevenLabsConfig | None = None) -> WebSocketAgentLeg:
    """Create an (unopened) agent leg for one call."""

    return WebSocketAgentLeg(conversation_url(cfg or get_elevenlabs_config()))
