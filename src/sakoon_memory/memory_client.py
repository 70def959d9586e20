"""Memory client: build context before the LLM call, submit the turn for ingestion after it."""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import MemoryStoreConfig
from .ingestion import MemoryIngestionWorker
from .journals import render_journal_context
from .models import Memory, MemoryHit, SourceType, now_ms
from .scoring import MS_PER_DAY
from .selector import rank_memories, render_context
from .semantic import render_semantic_context
from .service.memory_store import MemoryStore

logger = logging.getLogger(__name__)

_client: Optional["MemoryClient"] = None


def get_memory_client() -> "MemoryClient":
    """Lazy singleton memory client backed by the configured SQLite store."""
    global _client
    if _client is None:
        config = MemoryStoreConfig()
        embedder = None
        if config.embedding.enabled:
            from .embeddings.gemini import GeminiEmbedding

            embedder = GeminiEmbedding(config.embedding)
        store = MemoryStore(config=config, embedder=embedder)
        _client = MemoryClient(store=store)
    return _client


def set_memory_client(client: Optional["MemoryClient"]) -> None:
    global _client
    _client = client


class MemoryClient:
    """Facade for per-turn memory: get context (before LLM) and remember the turn (after)."""

    def __init__(
        self,
        store: MemoryStore,
        worker: Optional[MemoryIngestionWorker] = None,
    ) -> None:
        self.store = store
        self.worker = worker

    @property
    def config(self) -> MemoryStoreConfig:
        return self.store.config

    def attach_worker(self, worker: Optional[MemoryIngestionWorker]) -> None:
        self.worker = worker

    def load_memories(self, user_id: str) -> List[Memory]:
        """All memories for a user, or an empty list if none or the store is unavailable."""
        if not user_id:
            return []
        try:
            return self.store.list(user_id)
        except Exception as e:
            logger.warning("Could not load memories for user %s: %s", user_id, e)
            return []

    def recall(
        self,
        user_id: str,
        query: str,
        conversation_window: str = "",
        *,
        now: Optional[int] = None,
    ) -> List[MemoryHit]:
        """Ranked keyword hits for this turn (already thresholded and truncated)."""
        return rank_memories(
            self.load_memories(user_id),
            query,
            conversation_window,
            now=now,
            config=self.config.retrieval,
        )

    def get_context(
        self,
        user_id: str,
        query: str,
        conversation_window: str = "",
        *,
        mode: str = "keyword",
        include_journals: bool = True,
        now: Optional[int] = None,
    ) -> str:
        """
        Sync: return a single string to inject into the prompt, "" when nothing is relevant.

        mode: "keyword" (ranked recollections), "semantic" (embedding
        similarity) or "hybrid" (both blocks).
        """
        if not user_id:
            return ""
        now = now if now is not None else now_ms()
        parts: List[str] = []

        if mode in ("keyword", "hybrid"):
            hits = self.recall(user_id, query, conversation_window, now=now)
            block = render_context(hits, self.config.retrieval)
            if block:
                parts.append(block)

        if mode in ("semantic", "hybrid"):
            try:
                semantic = render_semantic_context(
                    self.store.search_semantic(user_id, query)
                )
            except Exception as e:
                logger.warning("Semantic recall failed for user %s: %s", user_id, e)
                semantic = None
            if semantic:
                parts.append(semantic)

        if include_journals:
            journals = self._journal_context(user_id, now)
            if journals:
                parts.append(journals)

        return "\n\n".join(parts)

    def _journal_context(self, user_id: str, now: int) -> Optional[str]:
        lookback = self.config.retrieval.journal_lookback_days
        try:
            entries = self.store.list_journals(
                user_id, since_ms=int(now - lookback * MS_PER_DAY)
            )
        except Exception as e:
            logger.warning("Could not load journals for user %s: %s", user_id, e)
            return None
        return render_journal_context(entries, now=now, config=self.config.retrieval)

    def remember_message(
        self,
        user_id: str,
        text: str,
        source_type: SourceType = SourceType.CHAT_LOG,
    ) -> bool:
        """
        Hand a statement to the background worker. Returns whether it was queued.
        Without a running worker nothing is stored.
        """
        if self.worker is None:
            return False
        return self.worker.submit_message(user_id, text, source_type=source_type)


__all__ = [
    "MemoryClient",
    "get_memory_client",
    "set_memory_client",
]
