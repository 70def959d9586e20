"""Keyword screening for crisis language in user messages and model replies."""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel


class CrisisType(str, Enum):
    SELF_HARM = "self_harm"
    HARM_TO_OTHERS = "harm_to_others"
    EMOTIONAL_DISTRESS = "emotional_distress"


class CrisisResource(BaseModel):
    """A help line shown to the user when a turn is stopped."""

    name: str
    phone: str
    description: str = ""


SELF_HARM_KEYWORDS = (
    "kill myself",
    "want to die",
    "suicide",
    "end my life",
    "hurt myself",
    "cut myself",
    "no reason to live",
    "better off dead",
    "take my own life",
    "done living",
    "i can't go on",
)

HARM_TO_OTHERS_KEYWORDS = (
    "kill him",
    "kill her",
    "kill them",
    "hurt someone",
    "murder",
    "beat him",
    "beat her",
)

DISTRESS_KEYWORDS = (
    "hopeless",
    "depressed",
    "falling apart",
    "cannot control",
    "mentally unstable",
)

# Types that stop the turn; distress is only reported.
BLOCKING_CRISIS_TYPES = frozenset({CrisisType.SELF_HARM, CrisisType.HARM_TO_OTHERS})

DEFAULT_CRISIS_RESOURCES: List[CrisisResource] = [
    CrisisResource(name="Emergency Services", phone="911 (or local)", description="Immediate danger"),
    CrisisResource(name="Suicide & Crisis Lifeline", phone="988", description="24/7 confidential support"),
    CrisisResource(name="Crisis Text Line", phone="Text HOME to 741741", description="Free 24/7 support"),
]

CRISIS_REPLY = (
    "It sounds like you are carrying something really heavy right now, and you "
    "don't have to face it alone. Please reach out to one of the support lines "
    "below, or to someone you trust, right away."
)


def _pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{alternatives})\b")


_PATTERNS = (
    (CrisisType.SELF_HARM, _pattern(SELF_HARM_KEYWORDS)),
    (CrisisType.HARM_TO_OTHERS, _pattern(HARM_TO_OTHERS_KEYWORDS)),
    (CrisisType.EMOTIONAL_DISTRESS, _pattern(DISTRESS_KEYWORDS)),
)


def detect_crisis_type(text: object) -> Optional[CrisisType]:
    """Most severe crisis category whose keywords appear in ``text``, or None."""
    if not isinstance(text, str) or not text:
        return None
    # curly apostrophes from mobile keyboards
    lowered = text.lower().replace("’", "'")
    for crisis_type, pattern in _PATTERNS:
        if pattern.search(lowered):
            return crisis_type
    return None


def check_for_crisis(text: object) -> bool:
    """Whether ``text`` should stop the conversation and surface crisis resources."""
    return detect_crisis_type(text) in BLOCKING_CRISIS_TYPES


__all__ = [
    "BLOCKING_CRISIS_TYPES",
    "CRISIS_REPLY",
    "CrisisResource",
    "CrisisType",
    "DEFAULT_CRISIS_RESOURCES",
    "check_for_crisis",
    "detect_crisis_type",
]
