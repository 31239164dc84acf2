"""Wire frames for both legs of the media relay.

Inbound text is decoded into small frozen dataclasses at the transport boundary so
the session never handles raw dicts. Outbound frames are plain dicts ready for
``send_json``.

Twilio Media Streams (carrier leg)::

    in:  {"event": "start", "start": {"streamSid": ...}}
         {"event": "media", "media": {"payload": <base64>}}
         {"event": "stop"}
    out: {"event": "media", "streamSid": ..., "media": {"payload": <base64>}}
         {"event": "clear", "streamSid": ...}

ElevenLabs Conversational AI (agent leg)::

    in:  {"type": "audio", "audio_event": {"audio_base_64": <base64>}}
         {"type": "interruption"}
         {"type": "ping", "ping_event": {"event_id": ...}}
    out: {"user_audio_chunk": <base64>}
         {"type": "pong", "event_id": ...}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from relay.errors import FrameDecodeError


@dataclass(frozen=True, slots=True)
class CarrierStart:
    stream_sid: str


@dataclass(frozen=True, slots=True)
class CarrierMedia:
    payload: str


@dataclass(frozen=True, slots=True)
class CarrierStop:
    pass


@dataclass(frozen=True, slots=True)
class CarrierUnknown:
    # Twilio also sends "connected", "mark", "dtmf"; none of them affect the relay.
    event: str


CarrierFrame = Union[CarrierStart, CarrierMedia, CarrierStop, CarrierUnknown]


@dataclass(frozen=True, slots=True)
class AgentAudio:
    audio_base_64: str


@dataclass(frozen=True, slots=True)
class AgentInterruption:
    pass


@dataclass(frozen=True, slots=True)
class AgentPing:
    # Echoed back verbatim; ElevenLabs sends integers but the id is opaque to us.
    event_id: str | int


@dataclass(frozen=True, slots=True)
class AgentUnknown:
    type: str


AgentFrame = Union[AgentAudio, AgentInterruption, AgentPing, AgentUnknown]


def _load_object(text: str | bytes) -> dict[str, Any]:
    try:
        message = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise FrameDecodeError(f"Invalid JSON frame: {exc}") from exc
    if not isinstance(message, dict):
        raise FrameDecodeError(f"Expected a JSON object, got {type(message).__name__}")
    return message


def _section(message: dict[str, Any], key: str) -> dict[str, Any]:
    value = message.get(key)
    return value if isinstance(value, dict) else {}


def decode_carrier_frame(text: str | bytes) -> CarrierFrame:
    """Parse one Twilio Media Streams message.

    Raises ``FrameDecodeError`` for non-JSON input and for ``start``/``media``
    events missing their required field.
    """

    message = _load_object(text)
    event = str(message.get("event") or "")

    if event == "start":
        stream_sid = _section(message, "start").get("streamSid")
        if not isinstance(stream_sid, str) or not stream_sid:
            raise FrameDecodeError("start event without streamSid")
        return CarrierStart(stream_sid=stream_sid)
    if event == "media":
        payload = _section(message, "media").get("payload")
        if not isinstance(payload, str):
            raise FrameDecodeError("media event without payload")
        return CarrierMedia(payload=payload)
    if event == "stop":
        return CarrierStop()
    return CarrierUnknown(event=event)


def decode_agent_frame(text: str | bytes) -> AgentFrame:
    """Parse one ElevenLabs conversation message.

    ``audio`` and ``ping`` messages without their payload field are treated as
    unknown and therefore ignored.
    """

    message = _load_object(text)
    frame_type = str(message.get("type") or "")

    if frame_type == "audio":
        audio = _section(message, "audio_event").get("audio_base_64")
        if isinstance(audio, str) and audio:
            return AgentAudio(audio_base_64=audio)
    elif frame_type == "interruption":
        return AgentInterruption()
    elif frame_type == "ping":
        event_id = _section(message, "ping_event").get("event_id")
        if event_id is not None and event_id != "":
            return AgentPing(event_id=event_id)
    return AgentUnknown(type=frame_type)


def carrier_media_frame(stream_sid: str | None, payload: str) -> dict[str, Any]:
    return {"event": "media", "streamSid": stream_sid, "media": {"payload": payload}}


def carrier_clear_frame(stream_sid: str | None) -> dict[str, Any]:
    return {"event": "clear", "streamSid": stream_sid}


def agent_audio_chunk_frame(payload: str) -> dict[str, Any]:
    return {"user_audio_chunk": payload}


def agent_pong_frame(event_id: str | int) -> dict[str, Any]:
    return {"type": "pong", "event_id": event_id}
