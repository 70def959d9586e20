"""Vector-similarity recall over stored memory embeddings."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from .models import Memory, MemoryHit

SEMANTIC_PREFIX = "System: You know this about the user: "


def cosine_similarities(query: Sequence[float], vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """Cosine similarity of ``query`` against each row of ``vectors``; zero-norm rows score 0."""
    if not vectors:
        return np.zeros(0, dtype="float32")
    q = np.asarray(query, dtype="float32")
    m = np.asarray(vectors, dtype="float32")
    norms = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    dots = m @ q
    return np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)


def match_embeddings(
    query_vector: Sequence[float],
    candidates: List[Tuple[Memory, List[float]]],
    *,
    threshold: float = 0.65,
    k: int = 5,
) -> List[MemoryHit]:
    """Best ``k`` candidates with similarity >= ``threshold``, most similar first."""
    if not candidates or k <= 0:
        return []
    dim = len(query_vector)
    usable = [(m, v) for m, v in candidates if len(v) == dim]
    if not usable:
        return []
    scores = cosine_similarities(query_vector, [v for _, v in usable])
    order = np.argsort(-scores, kind="stable")
    hits: List[MemoryHit] = []
    for idx in order:
        score = float(scores[idx])
        if score < threshold:
            break
        hits.append(MemoryHit(memory=usable[idx][0], score=score))
        if len(hits) >= k:
            break
    return hits


def render_semantic_context(hits: List[MemoryHit]) -> Optional[str]:
    if not hits:
        return None
    return SEMANTIC_PREFIX + ", ".join(f"[{h.memory.content}]" for h in hits)


__all__ = [
    "SEMANTIC_PREFIX",
    "cosine_similarities",
    "match_embeddings",
    "render_semantic_context",
]
