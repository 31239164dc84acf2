from __future__ import annotations

import asyncio
import logging

import httpx

LOGGER = logging.getLogger(__name__)


async def ping_once(client: httpx.AsyncClient, url: str) -> bool:
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        LOGGER.warning("Keep-alive ping failed: %s", exc)
        return False
    LOGGER.debug("Keep-alive ping ok | status=%s", response.status_code)
    return True


async def keepalive_loop(
    url: str,
    interval_seconds: float,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """GET ``url`` every ``interval_seconds`` until cancelled."""

    LOGGER.info("Keep-alive enabled | url=%s | interval=%ss", url, interval_seconds)
    async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
        while True:
            await asyncio.sleep(interval_seconds)
            await ping_once(client, url)
