from __future__ import annotations

import asyncio
import enum
import logging
from collections import deque
from dataclasses import dataclass
from typing import Literal

from relay.errors import FrameDecodeError
from relay.frames import (
    AgentAudio,
    AgentFrame,
    AgentInterruption,
    AgentPing,
    CarrierFrame,
    CarrierMedia,
    CarrierStart,
    CarrierStop,
    agent_audio_chunk_frame,
    agent_pong_frame,
    carrier_clear_frame,
    carrier_media_frame,
    decode_agent_frame,
    decode_carrier_frame,
)
from relay.legs import AgentLeg, CarrierLeg

LOGGER = logging.getLogger(__name__)

LegName = Literal["carrier", "agent"]
FramePolicy = Literal["drop", "buffer"]


class RelayState(enum.Enum):
    INIT = "init"
    STREAMING = "streaming"
    TERMINATED = "terminated"


@dataclass(slots=True)
class _Inbound:
    source: LegName
    text: str | bytes


@dataclass(slots=True)
class _LegClosed:
    source: LegName


@dataclass(slots=True)
class _AgentReady:
    pass


class MediaRelaySession:
    """Bridges one Twilio media stream to one ElevenLabs conversation.

    Frames from both legs are funnelled into a single inbox and handled one at a
    time, so translation never runs concurrently and ``stream_sid`` needs no lock.
    Closing either leg terminates the session and closes the other.

    Caller audio that arrives while the agent leg is not open is dropped by default.
    With ``frame_policy="buffer"`` up to ``buffer_max_frames`` chunks are held
    (oldest discarded first) and flushed once the agent connection is ready.
    """

    def __init__(
        self,
        carrier: CarrierLeg,
        agent: AgentLeg,
        *,
        frame_policy: FramePolicy = "drop",
        buffer_max_frames: int = 50,
    ) -> None:
        self._carrier = carrier
        self._agent = agent
        self._frame_policy = frame_policy
        self._pending: deque[str] = deque(maxlen=buffer_max_frames)
        self._inbox: asyncio.Queue[_Inbound | _LegClosed | _AgentReady] = asyncio.Queue()
        self.state = RelayState.INIT
        self.stream_sid: str | None = None
        self.dropped_frames = 0

    def start(self) -> None:
        """Enter STREAMING and begin dialing the agent."""

        if self.state is not RelayState.INIT:
            return
        self.state = RelayState.STREAMING
        self._agent.open()

    async def run(self) -> None:
        """Relay frames until either leg closes."""

        self.start()
        readers = [
            asyncio.create_task(self._pump_carrier(), name="carrier_reader"),
            asyncio.create_task(self._pump_agent(), name="agent_reader"),
        ]
        try:
            while self.state is RelayState.STREAMING:
                event = await self._inbox.get()
                await self._dispatch(event)
        finally:
            for task in readers:
                task.cancel()
            await asyncio.gather(*readers, return_exceptions=True)
            await self.terminate()
            LOGGER.info(
                "Relay session ended | stream_sid=%s | dropped_frames=%d",
                self.stream_sid,
                self.dropped_frames,
            )

    async def _pump_carrier(self) -> None:
        try:
            async for text in self._carrier:
                await self._inbox.put(_Inbound("carrier", text))
        except Exception:
            LOGGER.exception("Carrier leg failed | stream_sid=%s", self.stream_sid)
        finally:
            await self._inbox.put(_LegClosed("carrier"))

    async def _pump_agent(self) -> None:
        try:
            if not await self._agent.wait_open():
                return
            await self._inbox.put(_AgentReady())
            async for text in self._agent:
                await self._inbox.put(_Inbound("agent", text))
        except Exception:
            LOGGER.exception("Agent leg failed | stream_sid=%s", self.stream_sid)
        finally:
            await self._inbox.put(_LegClosed("agent"))

    async def _dispatch(self, event: _Inbound | _LegClosed | _AgentReady) -> None:
        if isinstance(event, _LegClosed):
            LOGGER.info("%s leg closed | stream_sid=%s", event.source.capitalize(), self.stream_sid)
            await self.terminate()
        elif isinstance(event, _AgentReady):
            await self._flush_pending()
        elif event.source == "carrier":
            try:
                frame = decode_carrier_frame(event.text)
            except FrameDecodeError as exc:
                LOGGER.warning("Dropping carrier frame | stream_sid=%s | %s", self.stream_sid, exc)
                return
            await self.handle_carrier_frame(frame)
        else:
            try:
                frame = decode_agent_frame(event.text)
            except FrameDecodeError as exc:
                LOGGER.warning("Dropping agent frame | stream_sid=%s | %s", self.stream_sid, exc)
                return
            await self.handle_agent_frame(frame)

    async def handle_carrier_frame(self, frame: CarrierFrame) -> None:
        if self.state is not RelayState.STREAMING:
            return

        if isinstance(frame, CarrierStart):
            if self.stream_sid is None:
                self.stream_sid = frame.stream_sid
            LOGGER.info("Twilio stream started | stream_sid=%s", self.stream_sid)
        elif isinstance(frame, CarrierMedia):
            await self._forward_caller_audio(frame.payload)
        elif isinstance(frame, CarrierStop):
            LOGGER.info("Twilio stream stopped | stream_sid=%s", self.stream_sid)
            # Twilio closes its own socket after "stop"; that close ends the session.
            await self._close_leg("agent")

    async def handle_agent_frame(self, frame: AgentFrame) -> None:
        if isinstance(frame, AgentPing):
            # Keepalive belongs to the agent protocol and is answered in any state.
            if self._agent.is_open:
                await self._send_agent(agent_pong_frame(frame.event_id))
            return

        if self.state is not RelayState.STREAMING:
            return

        if isinstance(frame, AgentAudio):
            await self._send_carrier(carrier_media_frame(self.stream_sid, frame.audio_base_64))
        elif isinstance(frame, AgentInterruption):
            await self._send_carrier(carrier_clear_frame(self.stream_sid))
        else:
            LOGGER.debug("Unhandled agent frame type=%s", frame.type)

    async def _forward_caller_audio(self, payload: str) -> None:
        if self._agent.is_open:
            # Older held chunks go first, even if _AgentReady is still queued.
            await self._flush_pending()
            if self.state is not RelayState.STREAMING:
                return
            await self._send_agent(agent_audio_chunk_frame(payload))
            return

        if self._frame_policy == "buffer":
            if len(self._pending) == self._pending.maxlen:
                self.dropped_frames += 1
            self._pending.append(payload)
        else:
            self.dropped_frames += 1
            LOGGER.debug("Agent not ready, dropping caller audio | stream_sid=%s", self.stream_sid)

    async def _flush_pending(self) -> None:
        while self._pending and self._agent.is_open and self.state is RelayState.STREAMING:
            await self._send_agent(agent_audio_chunk_frame(self._pending.popleft()))

    async def _send_carrier(self, data: dict) -> None:
        try:
            await self._carrier.send_json(data)
        except Exception:
            LOGGER.exception("Send to carrier failed | stream_sid=%s", self.stream_sid)
            await self.terminate()

    async def _send_agent(self, data: dict) -> None:
        try:
            await self._agent.send_json(data)
        except Exception:
            LOGGER.exception("Send to agent failed | stream_sid=%s", self.stream_sid)
            await self.terminate()

    async def _close_leg(self, name: LegName) -> None:
        leg = self._carrier if name == "carrier" else self._agent
        try:
            await leg.close()
        except Exception as exc:
            LOGGER.debug("Ignoring error while closing %s leg: %s", name, exc)

    async def terminate(self) -> None:
        """Close both legs; safe to call any number of times."""

        if self.state is RelayState.TERMINATED:
            return
        self.state = RelayState.TERMINATED
        self._pending.clear()
        await self._close_leg("agent")
        await self._close_leg("carrier")
