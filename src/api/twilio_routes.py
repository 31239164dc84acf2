"""Twilio Voice integration.

This module provides:
- Inbound call webhook answering with TwiML that opens a bidirectional Media Stream.
- The Media Stream WebSocket, relayed to the ElevenLabs conversational agent.
- Outbound call trigger endpoints.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from xml.sax.saxutils import escape

from fastapi import APIRouter, Depends, Request, Response, WebSocket
from fastapi.responses import JSONResponse

from api.dependencies import get_agent_leg_factory, get_outbound_caller
from api.schemas import OutboundCallRequest, OutboundCallResponse
from config.settings import get_settings
from integrations.twilio_client import OutboundCaller
from relay.legs import AgentLeg, FastAPICarrierLeg
from relay.session import MediaRelaySession

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["twilio"])


def _twiml_response(xml: str) -> Response:
    # Twilio expects application/xml
    return Response(content=xml, media_type="application/xml")


def _twiml_connect_stream(*, stream_url: str) -> str:
    stream = escape(stream_url, {'"': "&quot;"})
    return (
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>"
        "<Response>"
        "<Connect>"
        f"<Stream url=\"{stream}\" />"
        "</Connect>"
        "</Response>"
    )


@router.api_route("/incoming-call-eleven", methods=["GET", "POST"])
async def incoming_call(request: Request) -> Response:
    host = request.headers.get("host") or request.url.netloc
    return _twiml_response(_twiml_connect_stream(stream_url=f"wss://{host}/media-stream"))


@router.websocket("/media-stream")
async def media_stream(
    websocket: WebSocket,
    agent_leg_factory: Callable[[], AgentLeg] = Depends(get_agent_leg_factory),
) -> None:
    await websocket.accept()
    LOGGER.info("Twilio connected to media stream")

    try:
        agent_leg = agent_leg_factory()
    except ValueError as exc:
        LOGGER.error("Cannot relay media stream: %s", exc)
        await websocket.close(code=1011, reason="agent-not-configured")
        return

    settings = get_settings()
    session = MediaRelaySession(
        FastAPICarrierLeg(websocket),
        agent_leg,
        frame_policy=settings.agent_frame_policy,
        buffer_max_frames=settings.agent_buffer_max_frames,
    )
    await session.run()


async def _place_call(caller: OutboundCaller, to_number: str) -> str:
    call_sid = await asyncio.to_thread(caller.place_call, to_number)
    LOGGER.info("Outbound call initiated | call_sid=%s", call_sid)
    return call_sid


@router.post("/make-outbound-call", response_model=OutboundCallResponse)
async def make_outbound_call(
    payload: OutboundCallRequest,
    caller: OutboundCaller = Depends(get_outbound_caller),
):
    if not payload.to:
        return JSONResponse(status_code=400, content={"error": "Phone number required"})

    try:
        call_sid = await _place_call(caller, payload.to)
    except Exception as exc:
        LOGGER.error("Twilio call error: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Failed to initiate call"})

    return OutboundCallResponse(callSid=call_sid)


@router.post("/call", response_model=OutboundCallResponse)
async def call(
    payload: OutboundCallRequest,
    caller: OutboundCaller = Depends(get_outbound_caller),
):
    """Frontend-facing alias of ``/make-outbound-call`` with a single error shape."""

    if not payload.to:
        return JSONResponse(status_code=500, content={"message": "Failed to initiate call"})

    try:
        call_sid = await _place_call(caller, payload.to)
    except Exception as exc:
        LOGGER.error("Twilio call error: %s", exc)
        return JSONResponse(status_code=500, content={"message": "Failed to initiate call"})

    return OutboundCallResponse(callSid=call_sid)
