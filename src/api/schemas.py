"""API-facing Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    message: str = "Server is running"


class OutboundCallRequest(BaseModel):
    to: str | None = Field(default=None, description="E.164 phone number, e.g. +1415...")


class OutboundCallResponse(BaseModel):
    message: str = "Call initiated"
    callSid: str
