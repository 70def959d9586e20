"""Relevance scoring of a remembered statement against the current turn."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Set

from .config import DEFAULT_RETRIEVAL_CONFIG, RetrievalConfig
from .models import Memory, now_ms
from .tokens import normalize_text, tokenize

MS_PER_DAY = 86_400_000


@dataclass(frozen=True)
class ScoreBreakdown:
    """Individual contributions that add up to a memory's relevance score."""

    exact: float = 0.0
    partial: float = 0.0
    context: float = 0.0
    recency: float = 0.0
    core: float = 0.0

    @property
    def total(self) -> float:
        return self.exact + self.partial + self.context + self.recency + self.core


def recency_bonus(
    created_at: int,
    now: int,
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> float:
    """Linear decay from ``recency_max_points`` at age 0 to zero at the horizon."""
    days_old = max(0.0, (now - created_at) / MS_PER_DAY)
    fraction_left = 1.0 - days_old / config.recency_horizon_days
    return max(0.0, config.recency_max_points * fraction_left)


def breakdown_from_tokens(
    memory: Memory,
    query_tokens: Set[str],
    context_tokens: Set[str],
    now: int,
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> ScoreBreakdown:
    """Score ``memory`` against already tokenized query and conversation window."""
    memory_text = normalize_text(memory.content)
    memory_tokens = tokenize(memory.content)

    exact = 0.0
    partial = 0.0
    for token in query_tokens:
        if token in memory_tokens:
            exact += config.exact_match_points
        elif token in memory_text:
            partial += config.partial_match_points

    context = config.context_match_points * len(context_tokens & memory_tokens)

    return ScoreBreakdown(
        exact=exact,
        partial=partial,
        context=context,
        recency=recency_bonus(memory.created_at, now, config),
        core=config.core_boost if memory.is_core else 0.0,
    )


def score_breakdown(
    memory: Memory,
    query: str,
    conversation_window: str = "",
    *,
    now: Optional[int] = None,
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> ScoreBreakdown:
    return breakdown_from_tokens(
        memory,
        tokenize(query or ""),
        tokenize(conversation_window or ""),
        now if now is not None else now_ms(),
        config,
    )


def score_memory(
    memory: Memory,
    query: str,
    conversation_window: str = "",
    *,
    now: Optional[int] = None,
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> float:
    """Return the relevance score of ``memory`` for this turn (always >= 0)."""
    return score_breakdown(
        memory, query, conversation_window, now=now, config=config
    ).total


__all__ = [
    "MS_PER_DAY",
    "ScoreBreakdown",
    "breakdown_from_tokens",
    "recency_bonus",
    "score_breakdown",
    "score_memory",
]
