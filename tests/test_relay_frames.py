from __future__ import annotations

import json

import pytest

from relay.errors import FrameDecodeError
from relay.frames import (
    AgentAudio,
    AgentInterruption,
    AgentPing,
    AgentUnknown,
    CarrierMedia,
    CarrierStart,
    CarrierStop,
    CarrierUnknown,
    agent_audio_chunk_frame,
    agent_pong_frame,
    carrier_clear_frame,
    carrier_media_frame,
    decode_agent_frame,
    decode_carrier_frame,
)


def test_decode_carrier_start_media_stop():
    assert decode_carrier_frame(
        json.dumps({"event": "start", "start": {"streamSid": "MZ123", "callSid": "CA1"}})
    ) == CarrierStart(stream_sid="MZ123")
    assert decode_carrier_frame(
        json.dumps({"event": "media", "media": {"track": "inbound", "payload": "f39/fw=="}})
    ) == CarrierMedia(payload="f39/fw==")
    assert decode_carrier_frame('{"event": "stop"}') == CarrierStop()


def test_decode_carrier_other_events_are_unknown():
    assert decode_carrier_frame('{"event": "connected", "protocol": "Call"}') == CarrierUnknown(event="connected")
    assert decode_carrier_frame("{}") == CarrierUnknown(event="")


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        '"media"',
        '{"event": "start", "start": {}}',
        '{"event": "media"}',
        '{"event": "media", "media": {"payload": 42}}',
    ],
)
def test_decode_carrier_rejects_malformed(text: str):
    with pytest.raises(FrameDecodeError):
        decode_carrier_frame(text)


def test_decode_agent_known_types():
    assert decode_agent_frame(
        json.dumps({"type": "audio", "audio_event": {"audio_base_64": "AB", "event_id": 3}})
    ) == AgentAudio(audio_base_64="AB")
    assert decode_agent_frame('{"type": "interruption", "interruption_event": {}}') == AgentInterruption()
    assert decode_agent_frame('{"type": "ping", "ping_event": {"event_id": "x"}}') == AgentPing(event_id="x")


def test_decode_agent_keeps_numeric_ping_id():
    frame = decode_agent_frame('{"type": "ping", "ping_event": {"event_id": 7, "ping_ms": 50}}')
    assert frame == AgentPing(event_id=7)
    assert agent_pong_frame(frame.event_id) == {"type": "pong", "event_id": 7}


@pytest.mark.parametrize(
    "text, expected_type",
    [
        ('{"type": "audio", "audio_event": {}}', "audio"),
        ('{"type": "audio"}', "audio"),
        ('{"type": "ping", "ping_event": {}}', "ping"),
        ('{"type": "agent_response", "agent_response_event": {"agent_response": "hi"}}', "agent_response"),
        ('{"user_transcript": "x"}', ""),
    ],
)
def test_decode_agent_incomplete_or_unknown_is_ignored_variant(text: str, expected_type: str):
    assert decode_agent_frame(text) == AgentUnknown(type=expected_type)


def test_decode_agent_rejects_non_json():
    with pytest.raises(FrameDecodeError):
        decode_agent_frame(b"\x00\x01")


def test_outbound_frames_shape():
    assert carrier_media_frame("SID123", "AB") == {
        "event": "media",
        "streamSid": "SID123",
        "media": {"payload": "AB"},
    }
    assert carrier_clear_frame("SID123") == {"event": "clear", "streamSid": "SID123"}
    assert carrier_clear_frame(None) == {"event": "clear", "streamSid": None}
    assert agent_audio_chunk_frame("f39/fw==") == {"user_audio_chunk": "f39/fw=="}


def test_decode_agent_ping_with_zero_id_is_answered():
    frame = decode_agent_frame('{"type": "ping", "ping_event": {"event_id": 0}}')
    assert frame == AgentPing(event_id=0)
    assert agent_pong_frame(frame.event_id) == {"type": "pong", "event_id": 0}
