from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import List, Optional, Sequence, Tuple

from ..config import MemoryStoreConfig
from ..embeddings.base import EmbeddingBase
from ..models import (
    ErasureResult,
    JournalEntry,
    Memory,
    MemoryHit,
    Mood,
    SourceType,
    now_ms,
)
from ..persistence.base import MemoryBackend
from ..persistence.sqlite import SQLiteMemoryBackend
from ..semantic import match_embeddings

logger = logging.getLogger(__name__)


def day_bounds(day: date, tz: Optional[tzinfo] = None) -> Tuple[int, int]:
    """Epoch-ms ``[start, end)`` of a calendar day; server-local time when ``tz`` is None."""
    if tz is None:
        start = datetime.combine(day, time.min).astimezone()
        end = datetime.combine(day + timedelta(days=1), time.min).astimezone()
    else:
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return int(start.timestamp() * 1000), int(end.timestamp() * 1000)


class MemoryStore:
    """High-level, user-scoped service over a pluggable backend.

    This implements:
    - add (validated on write, optionally embedded)
    - list
    - delete (forget one memory)
    - erase today / a date / everything
    - journals: add, list, recent
    - search_semantic (when an embedder is configured)

    There is no update: memories are append-only until deleted.
    """

    def __init__(
        self,
        config: Optional[MemoryStoreConfig] = None,
        backend: Optional[MemoryBackend] = None,
        embedder: Optional[EmbeddingBase] = None,
    ) -> None:
        self.config = config or MemoryStoreConfig()
        if backend is None:
            self.config.ensure_directories()
            backend = SQLiteMemoryBackend(self.config.sqlite_path)
        self._backend = backend
        self._embedder = embedder

    # ------------------------------------------------------------------
    # Memories
    # ------------------------------------------------------------------

    def add(
        self,
        user_id: str,
        content: str,
        *,
        is_core: bool = False,
        tags: Optional[Sequence[str]] = None,
        source_type: SourceType = SourceType.CHAT_LOG,
        created_at: Optional[int] = None,
    ) -> Memory:
        """Add a new memory for a user.

        Raises ValueError if ``user_id`` is missing or ``content`` is not
        meaningful text.
        """
        memory = Memory(
            user_id=user_id,
            content=content,
            is_core=is_core,
            tags=list(tags or []),
            source_type=source_type,
            created_at=created_at if created_at is not None else now_ms(),
        )
        vector = None
        if self._embedder is not None:
            vector = self._embedder.embed(memory.content, memory_action="add")
        return self._backend.insert_memory(memory, embedding=vector)

    def list(self, user_id: str) -> List[Memory]:
        return self._backend.list_memories(user_id)

    def delete(self, user_id: str, memory_id: str) -> bool:
        """Forget a single memory. Returns False if it did not exist for this user."""
        return self._backend.delete_memory(user_id, memory_id)

    def search_semantic(
        self,
        user_id: str,
        query: str,
        k: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> List[MemoryHit]:
        """Cosine-similarity search over stored embeddings. Empty without an embedder."""
        if self._embedder is None or not query:
            return []
        vector = self._embedder.embed(query, memory_action="search")
        if not vector:
            return []
        cfg = self.config.embedding
        return match_embeddings(
            vector,
            self._backend.list_embeddings(user_id),
            threshold=cfg.similarity_threshold if threshold is None else threshold,
            k=cfg.top_k if k is None else k,
        )

    # ------------------------------------------------------------------
    # Journals
    # ------------------------------------------------------------------

    def add_journal(
        self,
        user_id: str,
        content: str,
        *,
        title: str = "",
        mood: Mood = "neutral",
        timestamp: Optional[int] = None,
    ) -> JournalEntry:
        entry = JournalEntry(
            user_id=user_id,
            content=content,
            title=title,
            mood=mood,
            timestamp=timestamp if timestamp is not None else now_ms(),
        )
        return self._backend.insert_journal(entry)

    def list_journals(self, user_id: str, since_ms: Optional[int] = None) -> List[JournalEntry]:
        return self._backend.list_journals(user_id, since_ms=since_ms)

    # ------------------------------------------------------------------
    # Erasure
    # ------------------------------------------------------------------

    def erase_range(
        self,
        user_id: str,
        start_ms: Optional[int] = None,
        end_ms: Optional[int] = None,
    ) -> ErasureResult:
        result = ErasureResult(
            memories=self._backend.delete_memories(user_id, start_ms, end_ms),
            journals=self._backend.delete_journals(user_id, start_ms, end_ms),
        )
        logger.info(
            "Erased %d memories and %d journal entries for user %s",
            result.memories,
            result.journals,
            user_id,
        )
        return result

    def erase_date(self, user_id: str, day: date, tz: Optional[tzinfo] = None) -> ErasureResult:
        start, end = day_bounds(day, tz)
        return self.erase_range(user_id, start, end)

    def erase_today(
        self,
        user_id: str,
        *,
        now: Optional[int] = None,
        tz: Optional[tzinfo] = None,
    ) -> ErasureResult:
        """Erase everything created since the start of the current day."""
        current = datetime.fromtimestamp((now if now is not None else now_ms()) / 1000, tz)
        start, _ = day_bounds(current.date(), tz)
        return self.erase_range(user_id, start, None)

    def erase_all(self, user_id: str) -> ErasureResult:
        return self.erase_range(user_id)

    def close(self) -> None:
        self._backend.close()
