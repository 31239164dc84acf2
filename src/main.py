"""Entry point for the Twilio to ElevenLabs voice relay and sensor analysis service."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router as api_router
from api.twilio_routes import router as twilio_router
from config.settings import get_settings
from integrations.keepalive import keepalive_loop


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    task = None
    if settings.keepalive_url:
        task = asyncio.create_task(
            keepalive_loop(settings.keepalive_url, settings.keepalive_interval_seconds),
            name="keepalive",
        )
    yield
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="Voice Relay",
    description="Relays Twilio call audio to an ElevenLabs agent and proxies sensor analysis.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)
app.include_router(twilio_router)


def run() -> None:
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
