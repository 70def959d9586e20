"""Data models for chat sessions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.llm_core import Message


class SessionData(BaseModel):
    """Session payload stored in db/sessions/{session_id}.json."""

    session_id: str
    messages: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_messages(cls, session_id: str, messages: list[Message], metadata: dict[str, Any] | None = None) -> SessionData:
        """Build from Message list."""
        return cls(
            session_id=session_id,
            messages=[m.model_dump() for m in messages],
            metadata=metadata or {},
        )

    def to_messages(self) -> list[Message]:
        """Convert stored messages to Message list."""
        return [Message(**m) for m in self.messages]

    @property
    def user_id(self) -> str:
        return str(self.metadata.get("user_id") or "")

    @property
    def started_at(self) -> int:
        """Session start as epoch ms (0 if unknown)."""
        return int(self.metadata.get("started_at") or 0)
