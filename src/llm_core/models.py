from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class Message(BaseModel):
    """A single message in a conversation."""

    role: str  # "system" | "user" | "assistant"
    content: str = ""
    timestamp: int | None = None  # epoch ms

    def to_chat_dict(self) -> dict[str, Any]:
        """Format for LLM chat APIs."""
        return {"role": self.role, "content": self.content or ""}


__all__ = ["Message"]
