"""Token normalization shared by the scorer and the content validator."""

from __future__ import annotations

import re
from typing import FrozenSet, Set

STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "the", "and", "is", "it", "to", "in", "my", "i", "am", "a", "of",
        "for", "with", "that", "but", "on", "at", "this", "was", "have", "me",
        "so", "be", "not", "or", "an", "as", "if", "by", "are", "you", "can",
        "do", "we",
    }
)

MIN_TOKEN_LENGTH = 3

_NON_WORD = re.compile(r"[^\w\s]")


def normalize_text(text: object) -> str:
    """Lowercase ``text`` and strip everything that is not a word character or whitespace.

    Anything that is not a string normalizes to the empty string.
    """
    if not isinstance(text, str) or not text:
        return ""
    return _NON_WORD.sub("", text.lower())


def tokenize(text: object) -> Set[str]:
    """Return the set of significant lowercase tokens in ``text``.

    Tokens shorter than three characters and stop words are discarded.
    """
    return {
        word
        for word in normalize_text(text).split()
        if len(word) >= MIN_TOKEN_LENGTH and word not in STOP_WORDS
    }


__all__ = ["STOP_WORDS", "normalize_text", "tokenize"]
