from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .tokens import normalize_text


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


class SourceType(str, Enum):
    """Ingestion path a memory came from."""

    CHAT_LOG = "chat_log"
    JOURNAL = "journal"
    CLINICAL_NOTE = "clinical_note"
    BIO = "bio"
    EXPLICIT = "explicit"


Mood = Literal["happy", "calm", "neutral", "sad", "anxious", "frustrated"]


class Memory(BaseModel):
    """A remembered statement about one user.

    Content is validated on construction, so anything that reaches the store
    or the scorer is a real, non-empty string.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    content: str
    id: str = Field(default_factory=_new_id)
    tags: List[str] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)
    is_core: bool = False
    source_type: SourceType = SourceType.CHAT_LOG

    @field_validator("user_id")
    @classmethod
    def _user_id_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("user_id is required")
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _content_is_text(cls, value: object) -> str:
        if not isinstance(value, str):
            raise ValueError("content must be a string")
        value = value.strip()
        if not normalize_text(value).strip():
            raise ValueError("content is empty after normalization")
        return value


class MemoryHit(BaseModel):
    """A memory paired with the score it earned for one query."""

    memory: Memory
    score: float


class JournalEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    content: str
    id: str = Field(default_factory=_new_id)
    title: str = ""
    mood: Mood = "neutral"
    timestamp: int = Field(default_factory=now_ms)

    @field_validator("content")
    @classmethod
    def _content_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("content is required")
        return value


class ErasureResult(BaseModel):
    """Row counts removed by a data-erasure action."""

    memories: int = 0
    journals: int = 0
    sessions: int = 0

    @property
    def total(self) -> int:
        return self.memories + self.journals + self.sessions


__all__ = [
    "ErasureResult",
    "JournalEntry",
    "Memory",
    "MemoryHit",
    "Mood",
    "SourceType",
    "now_ms",
]
