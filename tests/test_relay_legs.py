from __future__ import annotations

import asyncio
import json

from websockets.protocol import State

from integrations.elevenlabs import ElevenLabsConfig, conversation_url
from relay.legs import WebSocketAgentLeg


class FakeConnection:
    def __init__(self, messages=()) -> None:
        self.state = State.OPEN
        self.sent: list[str] = []
        self.close_calls = 0
        self._messages = list(messages)

    async def send(self, message: str) -> None:
        self.sent.append(message)

    async def close(self) -> None:
        self.close_calls += 1
        self.state = State.CLOSED

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self._messages:
            yield message


def test_agent_leg_connects_in_background():
    connection = FakeConnection()
    gate = asyncio.Event()
    urls: list[str] = []

    async def connector(url: str):
        urls.append(url)
        await gate.wait()
        return connection

    async def scenario():
        leg = WebSocketAgentLeg("wss://agent.test/convai?agent_id=a1", connector=connector)
        leg.open()
        await asyncio.sleep(0)
        assert not leg.is_open

        gate.set()
        assert await leg.wait_open()
        assert leg.is_open

        await leg.send_json({"user_audio_chunk": "AAAA"})
        await leg.close()
        await leg.close()
        assert not leg.is_open

    asyncio.run(scenario())

    assert urls == ["wss://agent.test/convai?agent_id=a1"]
    assert [json.loads(m) for m in connection.sent] == [{"user_audio_chunk": "AAAA"}]
    assert connection.close_calls == 1


def test_agent_leg_connect_failure_reports_not_open():
    async def connector(url: str):
        raise OSError("connection refused")

    async def scenario():
        leg = WebSocketAgentLeg("wss://agent.test/convai", connector=connector)
        leg.open()
        assert await leg.wait_open() is False
        assert not leg.is_open
        assert [m async for m in leg] == []
        await leg.close()

    asyncio.run(scenario())


def test_agent_leg_close_before_connect_cancels_attempt():
    async def connector(url: str):
        await asyncio.sleep(10)

    async def scenario():
        leg = WebSocketAgentLeg("wss://agent.test/convai", connector=connector)
        leg.open()
        await leg.close()
        assert await leg.wait_open() is False

    asyncio.run(scenario())


def test_agent_leg_wait_open_without_open_is_false():
    async def scenario():
        leg = WebSocketAgentLeg("wss://agent.test/convai")
        return await leg.wait_open()

    assert asyncio.run(scenario()) is False


def test_agent_leg_iterates_incoming_messages():
    connection = FakeConnection(['{"type": "ping"}', '{"type": "audio"}'])

    async def connector(url: str):
        return connection

    async def scenario():
        leg = WebSocketAgentLeg("wss://agent.test/convai", connector=connector)
        leg.open()
        await leg.wait_open()
        return [m async for m in leg]

    assert asyncio.run(scenario()) == ['{"type": "ping"}', '{"type": "audio"}']


def test_conversation_url_appends_agent_id():
    cfg = ElevenLabsConfig(agent_id="agent 1", convai_url="wss://api.elevenlabs.io/v1/convai/conversation")
    assert conversation_url(cfg) == "wss://api.elevenlabs.io/v1/convai/conversation?agent_id=agent+1"

    cfg = ElevenLabsConfig(agent_id="a1", convai_url="wss://example.test/ws?region=eu")
    assert conversation_url(cfg) == "wss://example.test/ws?region=eu&agent_id=a1"
