"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["local", "dev", "prod"] = Field(default="local")
    log_level: str = Field(default="INFO")
    port: int = Field(default=3000)

    public_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("base_url", "public_base_url"),
        description="Public base URL used for Twilio callbacks (e.g. https://<ngrok>.ngrok-free.app).",
    )

    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # ElevenLabs conversational agent
    elevenlabs_agent_id: str | None = Field(default=None)
    elevenlabs_convai_url: str = Field(
        default="wss://api.elevenlabs.io/v1/convai/conversation",
        description="Conversation WebSocket endpoint; the agent id is appended as a query parameter.",
    )

    # Media relay behaviour while the agent connection is still opening
    agent_frame_policy: Literal["drop", "buffer"] = Field(
        default="drop",
        description="What to do with caller audio that arrives before the agent leg is ready.",
    )
    agent_buffer_max_frames: int = Field(default=50, ge=1)

    # Twilio (Voice)
    twilio_account_sid: str | None = Field(default=None)
    twilio_auth_token: str | None = Field(default=None)
    twilio_from_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("twilio_phone_number", "twilio_from_number"),
        description="E.164, e.g. +1415...",
    )

    # Sensor analysis
    prediction_service_url: str = Field(default="http://127.0.0.1:5001/predict")
    prediction_timeout_seconds: float = Field(default=30.0, gt=0)

    gemini_api_key: str | None = Field(default=None)
    gemini_model: str = Field(default="gemini-1.5-flash")
    gemini_endpoint: str = Field(default="https://generativelanguage.googleapis.com/v1beta/models")
    gemini_timeout_seconds: float = Field(default=60.0, gt=0)

    # Keep-alive
    keepalive_url: str | None = Field(
        default=None,
        description="If set, the service GETs this URL periodically (e.g. its own health route).",
    )
    keepalive_interval_seconds: float = Field(default=600.0, gt=0)

    @model_validator(mode="after")
    def default_public_base_url(self) -> Settings:
        if not self.public_base_url:
            self.public_base_url = f"http://localhost:{self.port}"
        self.public_base_url = self.public_base_url.rstrip("/")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
