from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

# Must be set before anything calls get_settings().
os.environ["ELEVENLABS_AGENT_ID"] = "agent_test"
os.environ["BASE_URL"] = "https://relay.example.com"
os.environ["PREDICTION_SERVICE_URL"] = "http://prediction.test/predict"
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("KEEPALIVE_URL", None)


class FakeCarrierLeg:
    """Scripted Twilio side: yields ``script`` then stays open until closed."""

    def __init__(self, script=()) -> None:
        self.script = list(script)
        self.sent: list[dict] = []
        self.close_calls = 0
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def send_json(self, data: dict) -> None:
        if self.closed:
            raise RuntimeError("carrier socket closed")
        self.sent.append(data)

    async def close(self) -> None:
        self.close_calls += 1
        self._closed.set()

    def __aiter__(self):
        return self._messages()

    async def _messages(self):
        for text in self.script:
            yield text
        await self._closed.wait()


class FakeAgentLeg:
    """Scripted ElevenLabs side; optionally echoes caller audio back as agent audio."""

    def __init__(self, script=(), *, connects: bool = True, echo: bool = False) -> None:
        self.script = list(script)
        self.sent: list[dict] = []
        self.close_calls = 0
        self.opened = False
        self.connects = connects
        self.echo = echo
        self._closed = asyncio.Event()
        self._incoming: asyncio.Queue[str] = asyncio.Queue()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def is_open(self) -> bool:
        return self.opened and self.connects and not self.closed

    def open(self) -> None:
        self.opened = True

    async def wait_open(self) -> bool:
        return self.is_open

    async def send_json(self, data: dict) -> None:
        if not self.is_open:
            raise RuntimeError("agent socket not open")
        self.sent.append(data)
        if self.echo and "user_audio_chunk" in data:
            await self._incoming.put(
                json.dumps({"type": "audio", "audio_event": {"audio_base_64": data["user_audio_chunk"]}})
            )

    async def close(self) -> None:
        self.close_calls += 1
        self._closed.set()

    def __aiter__(self):
        return self._messages()

    async def _messages(self):
        for text in self.script:
            yield text
        while not self.closed:
            getter = asyncio.ensure_future(self._incoming.get())
            closer = asyncio.ensure_future(self._closed.wait())
            done, pending = await asyncio.wait({getter, closer}, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            if getter in done:
                yield getter.result()


@pytest.fixture()
def settings_env(monkeypatch: pytest.MonkeyPatch):
    """Apply env overrides and rebuild the cached Settings around a test."""

    from config.settings import get_settings

    def apply(**values: str):
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()
        return get_settings()

    get_settings.cache_clear()
    yield apply
    monkeypatch.undo()
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def app():
    import importlib

    return importlib.import_module("main").app


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
