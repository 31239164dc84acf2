"""Shared abstractions for generative text clients."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseLLMClient(ABC):
    """Abstract base class for text generation providers."""

    @abstractmethod
    async def complete(self, prompt: str, *, temperature: float | None = None) -> str:
        """Return a completion for the given prompt."""
