from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import JournalEntry, Memory
from .base import MemoryBackend, in_range


class InMemoryBackend(MemoryBackend):
    """Process-local backend, used for tests and ephemeral deployments."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._memories: Dict[str, List[Memory]] = defaultdict(list)
        self._embeddings: Dict[str, List[float]] = {}
        self._journals: Dict[str, List[JournalEntry]] = defaultdict(list)

    def insert_memory(
        self, memory: Memory, embedding: Optional[Sequence[float]] = None
    ) -> Memory:
        with self._lock:
            self._memories[memory.user_id].append(memory)
            if embedding is not None:
                self._embeddings[memory.id] = list(embedding)
        return memory

    def list_memories(self, user_id: str) -> List[Memory]:
        with self._lock:
            return sorted(self._memories.get(user_id, []), key=lambda m: m.created_at)

    def list_embeddings(self, user_id: str) -> List[Tuple[Memory, List[float]]]:
        with self._lock:
            return [
                (m, self._embeddings[m.id])
                for m in self._memories.get(user_id, [])
                if m.id in self._embeddings
            ]

    def delete_memory(self, user_id: str, memory_id: str) -> bool:
        with self._lock:
            rows = self._memories.get(user_id, [])
            kept = [m for m in rows if m.id != memory_id]
            if len(kept) == len(rows):
                return False
            self._memories[user_id] = kept
            self._embeddings.pop(memory_id, None)
            return True

    def delete_memories(
        self,
        user_id: str,
        start_ms: Optional[int] = None,
        end_ms: Optional[int] = None,
    ) -> int:
        with self._lock:
            rows = self._memories.get(user_id, [])
            doomed = {m.id for m in rows if in_range(m.created_at, start_ms, end_ms)}
            for memory_id in doomed:
                self._embeddings.pop(memory_id, None)
            self._memories[user_id] = [m for m in rows if m.id not in doomed]
            return len(doomed)

    def insert_journal(self, entry: JournalEntry) -> JournalEntry:
        with self._lock:
            self._journals[entry.user_id].append(entry)
        return entry

    def list_journals(
        self, user_id: str, since_ms: Optional[int] = None
    ) -> List[JournalEntry]:
        with self._lock:
            rows = [
                e
                for e in self._journals.get(user_id, [])
                if since_ms is None or e.timestamp >= since_ms
            ]
        return sorted(rows, key=lambda e: e.timestamp)

    def delete_journals(
        self,
        user_id: str,
        start_ms: Optional[int] = None,
        end_ms: Optional[int] = None,
    ) -> int:
        with self._lock:
            rows = self._journals.get(user_id, [])
            kept = [e for e in rows if not in_range(e.timestamp, start_ms, end_ms)]
            self._journals[user_id] = kept
            return len(rows) - len(kept)


__all__ = ["InMemoryBackend"]
