"""Abstract LLM provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..models import Message


class LLMProvider(ABC):
    """
    Abstract LLM provider. Implement this to plug in any backend.

    The chat orchestrator only depends on this interface.
    """

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Non-streaming chat. A leading system message becomes the system instruction."""
        ...
