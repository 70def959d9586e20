"""Loading the default system prompt and composing the per-turn system instruction."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import DEFAULT_SYSTEM_PROMPT_PATH

_cached_prompt: Optional[str] = None

RECALL_PROTOCOL = """RECALL PROTOCOL:
The following is retrieved context about the user from previous conversations or journals.
- Use this information to make the conversation feel continuous and personal.
- If a specific name, event, or feeling is mentioned in [LONG-TERM MEMORY], reference it gently if relevant.
- If [RECENT JOURNAL ENTRIES] are provided, acknowledge their recent mood or reflections without being intrusive.

RETRIEVED CONTEXT:
"""


def _read_file(path: Path) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return ""
    return text.strip()


def get_default_system_prompt() -> str:
    """Return the default system prompt text, cached after first read.

    If the prompt file does not exist or cannot be read, returns an empty string.
    """
    global _cached_prompt
    if _cached_prompt is None:
        _cached_prompt = _read_file(DEFAULT_SYSTEM_PROMPT_PATH)
    return _cached_prompt or ""


def build_system_instruction(base_prompt: str, memory_context: str = "") -> str:
    """Append the recall section to ``base_prompt`` when there is memory context."""
    base_prompt = (base_prompt or "").strip()
    if not memory_context:
        return base_prompt
    return f"{base_prompt}\n\n{RECALL_PROTOCOL}{memory_context}".strip()
