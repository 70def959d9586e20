"""Select and render the memories worth injecting into the next prompt."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .config import DEFAULT_RETRIEVAL_CONFIG, RetrievalConfig
from .models import Memory, MemoryHit, now_ms
from .scoring import breakdown_from_tokens
from .tokens import tokenize

logger = logging.getLogger(__name__)


def _is_well_formed(candidate: object) -> bool:
    if not isinstance(candidate, Memory):
        return False
    return isinstance(candidate.content, str) and isinstance(candidate.created_at, int)


def rank_memories(
    memories: Iterable[Memory],
    query: str,
    conversation_window: str = "",
    *,
    now: Optional[int] = None,
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> List[MemoryHit]:
    """Score, filter, sort and truncate ``memories``.

    Ties keep their input order. Candidates that are not well-formed
    memories are skipped.
    """
    candidates = list(memories or [])
    if not candidates:
        return []

    now = now if now is not None else now_ms()
    query_tokens = tokenize(query or "")
    context_tokens = tokenize(conversation_window or "")

    hits: List[MemoryHit] = []
    for candidate in candidates:
        if not _is_well_formed(candidate):
            logger.debug("Skipping malformed memory candidate: %r", candidate)
            continue
        score = breakdown_from_tokens(
            candidate, query_tokens, context_tokens, now, config
        ).total
        if score >= config.score_threshold:
            hits.append(MemoryHit(memory=candidate, score=score))

    # sorted() is stable, so equal scores keep their original relative order.
    hits = sorted(hits, key=lambda h: h.score, reverse=True)
    return hits[: config.max_results]


def render_context(
    hits: List[MemoryHit],
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> Optional[str]:
    if not hits:
        return None
    lines = [f"- {h.memory.content}" for h in hits]
    return config.header + "\n" + "\n".join(lines)


def select_context(
    memories: Iterable[Memory],
    query: str,
    conversation_window: str = "",
    *,
    now: Optional[int] = None,
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> Optional[str]:
    """Return the rendered memory block for this turn, or ``None`` if nothing is relevant."""
    hits = rank_memories(
        memories, query, conversation_window, now=now, config=config
    )
    return render_context(hits, config)


__all__ = ["rank_memories", "render_context", "select_context"]
