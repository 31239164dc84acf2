"""Transport adapters for the two legs of a relay session.

The session only talks to the ``CarrierLeg`` / ``AgentLeg`` protocols; the concrete
classes wrap a Starlette WebSocket (Twilio dials us) and a ``websockets`` client
connection (we dial ElevenLabs).
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Protocol

import websockets
from starlette.websockets import WebSocket, WebSocketState
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

LOGGER = logging.getLogger(__name__)


class CarrierLeg(Protocol):
    async def send_json(self, data: dict[str, Any]) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...


class AgentLeg(Protocol):
    @property
    def is_open(self) -> bool: ...

    def open(self) -> None:
        """Start connecting in the background; must not block."""

    async def wait_open(self) -> bool:
        """Wait for the connection attempt and report whether it succeeded."""

    async def send_json(self, data: dict[str, Any]) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...


class FastAPICarrierLeg:
    """Carrier leg backed by the WebSocket Twilio opened against ``/media-stream``."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._closed = False

    async def send_json(self, data: dict[str, Any]) -> None:
        await self._websocket.send_text(json.dumps(data))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if (
            self._websocket.application_state == WebSocketState.DISCONNECTED
            or self._websocket.client_state == WebSocketState.DISCONNECTED
        ):
            return
        await self._websocket.close()

    def __aiter__(self) -> AsyncIterator[str | bytes]:
        return self._messages()

    async def _messages(self) -> AsyncIterator[str | bytes]:
        # Binary frames are yielded as-is so the decoder rejects them as one bad frame.
        while True:
            message = await self._websocket.receive()
            if message["type"] == "websocket.disconnect":
                return
            data = message.get("text")
            if data is None:
                data = message.get("bytes")
            if data is not None:
                yield data


Connector = Callable[[str], Awaitable[Any]]


class WebSocketAgentLeg:
    """Agent leg dialing the ElevenLabs conversation WebSocket.

    The connection is opened in a background task so the caller's media can start
    flowing immediately; until the handshake completes ``is_open`` is false.
    """

    def __init__(self, url: str, *, connector: Connector | None = None) -> None:
        self._url = url
        self._connector = connector or websockets.connect
        self._connection: Any = None
        self._connect_task: asyncio.Task | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self._connection is not None
            and self._connection.state is State.OPEN
        )

    def open(self) -> None:
        if self._connect_task is None and not self._closed:
            self._connect_task = asyncio.create_task(self._connect(), name="agent_leg_connect")

    async def _connect(self) -> None:
        self._connection = await self._connector(self._url)
        LOGGER.info("Connected to conversational agent")

    async def wait_open(self) -> bool:
        if self._connect_task is None:
            return False
        await asyncio.wait({self._connect_task})
        if self._connect_task.cancelled():
            return False
        exc = self._connect_task.exception()
        if exc is not None:
            LOGGER.error("Agent connection failed: %s", exc)
            return False
        return self.is_open

    async def send_json(self, data: dict[str, Any]) -> None:
        if self._connection is None:
            raise RuntimeError("Agent leg is not connected")
        await self._connection.send(json.dumps(data))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
        if self._connection is not None:
            await self._connection.close()
            LOGGER.info("Disconnected from conversational agent")

    def __aiter__(self) -> AsyncIterator[str]:
        return self._messages()

    async def _messages(self) -> AsyncIterator[str]:
        if self._connection is None:
            return
        try:
            async for message in self._connection:
                yield message
        except ConnectionClosed as exc:
            LOGGER.info("Agent connection closed: %s", exc)
