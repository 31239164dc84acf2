"""Exceptions raised by the media relay.

Safe to import from API layers; nothing here touches the network.
"""

from __future__ import annotations


class RelayError(Exception):
    default_detail: str = "Media relay error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class FrameDecodeError(RelayError):
    default_detail = "Frame could not be decoded."