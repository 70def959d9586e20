from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .config import DEFAULT_RETRIEVAL_CONFIG, RetrievalConfig
from .models import JournalEntry, now_ms
from .scoring import MS_PER_DAY

JOURNAL_HEADER = "[RECENT JOURNAL ENTRIES]:"


def recent_entries(
    entries: Iterable[JournalEntry],
    *,
    now: Optional[int] = None,
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> List[JournalEntry]:
    now = now if now is not None else now_ms()
    cutoff = now - config.journal_lookback_days * MS_PER_DAY
    return [e for e in entries if cutoff < e.timestamp <= now]


def render_journal_context(
    entries: Iterable[JournalEntry],
    *,
    now: Optional[int] = None,
    config: RetrievalConfig = DEFAULT_RETRIEVAL_CONFIG,
) -> Optional[str]:
    """Render journal entries from the lookback window, or ``None`` if there are none."""
    recent = recent_entries(entries, now=now, config=config)
    if not recent:
        return None
    lines = []
    for entry in recent:
        day = datetime.fromtimestamp(entry.timestamp / 1000).date().isoformat()
        lines.append(f"- Journal Entry ({day}): {entry.content} [Mood: {entry.mood}]")
    return JOURNAL_HEADER + "\n" + "\n".join(lines)


__all__ = ["JOURNAL_HEADER", "recent_entries", "render_journal_context"]
