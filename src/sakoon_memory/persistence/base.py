from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from ..models import JournalEntry, Memory


class MemoryBackend(ABC):
    """Storage for memories and journal entries, partitioned by user.

    Every operation takes the owning ``user_id``; implementations must never
    return or delete rows belonging to another user. Time ranges are
    half-open ``[start_ms, end_ms)`` in epoch milliseconds.
    """

    # -- memories ------------------------------------------------------

    @abstractmethod
    def insert_memory(
        self, memory: Memory, embedding: Optional[Sequence[float]] = None
    ) -> Memory:
        ...

    @abstractmethod
    def list_memories(self, user_id: str) -> List[Memory]:
        """All memories for ``user_id`` in creation order."""
        ...

    @abstractmethod
    def list_embeddings(self, user_id: str) -> List[Tuple[Memory, List[float]]]:
        """Memories of ``user_id`` that have a stored embedding vector."""
        ...

    @abstractmethod
    def delete_memory(self, user_id: str, memory_id: str) -> bool:
        ...

    @abstractmethod
    def delete_memories(
        self,
        user_id: str,
        start_ms: Optional[int] = None,
        end_ms: Optional[int] = None,
    ) -> int:
        """Delete memories created in ``[start_ms, end_ms)``; no bounds deletes all."""
        ...

    # -- journals ------------------------------------------------------

    @abstractmethod
    def insert_journal(self, entry: JournalEntry) -> JournalEntry:
        ...

    @abstractmethod
    def list_journals(
        self, user_id: str, since_ms: Optional[int] = None
    ) -> List[JournalEntry]:
        ...

    @abstractmethod
    def delete_journals(
        self,
        user_id: str,
        start_ms: Optional[int] = None,
        end_ms: Optional[int] = None,
    ) -> int:
        ...

    def close(self) -> None:
        """Release any held resources."""


def in_range(ts: int, start_ms: Optional[int], end_ms: Optional[int]) -> bool:
    if start_ms is not None and ts < start_ms:
        return False
    if end_ms is not None and ts >= end_ms:
        return False
    return True


__all__ = ["MemoryBackend", "in_range"]
