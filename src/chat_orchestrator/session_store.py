"""Session load/save to db/sessions/*.json."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from src.llm_core import Message
from src.sakoon_memory.models import now_ms

from .config import SESSIONS_DIR
from .models import SessionData

logger = logging.getLogger(__name__)


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sessions_dir() -> Path:
    SESSIONS_DIR.mkdir(parents=True, exist_ok=True)
    return SESSIONS_DIR


def _session_path(session_id: str) -> Path:
    return _sessions_dir() / f"{session_id}.json"


def create_session(user_id: str, model: str | None = None) -> tuple[str, SessionData]:
    """Create a new session with a new UUID. Returns (session_id, SessionData)."""
    session_id = str(uuid.uuid4())
    now = _iso_now()
    metadata: dict[str, Any] = {
        "created_at": now,
        "updated_at": now,
        "started_at": now_ms(),
        "user_id": user_id,
        "model": model,
    }
    data = SessionData(session_id=session_id, messages=[], metadata=metadata)
    save_session(data)
    return session_id, data


def get_session(session_id: str) -> SessionData | None:
    """Load session by id; returns None if file does not exist."""
    path = _session_path(session_id)
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    return SessionData(**raw)


def load_session(session_id: str) -> tuple[list[Message], dict[str, Any]]:
    """Load session and return (messages, metadata). Returns empty list and metadata if not found."""
    data = get_session(session_id)
    if data is None:
        return [], {"created_at": _iso_now(), "updated_at": _iso_now(), "started_at": now_ms(), "user_id": ""}
    return data.to_messages(), data.metadata


def save_session(data: SessionData) -> None:
    """Persist session to db/sessions/{session_id}.json."""
    path = _session_path(data.session_id)
    meta = dict(data.metadata)
    meta["updated_at"] = _iso_now()
    meta["message_count"] = len(data.messages)
    payload = {
        "session_id": data.session_id,
        "messages": data.messages,
        "metadata": meta,
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)


def _iter_sessions() -> Iterator[tuple[Path, SessionData]]:
    for path in sorted(_sessions_dir().glob("*.json")):
        try:
            with open(path, encoding="utf-8") as f:
                yield path, SessionData(**json.load(f))
        except (OSError, ValueError) as e:
            logger.warning("Skipping unreadable session file %s: %s", path.name, e)


def list_sessions(user_id: str) -> list[SessionData]:
    """All sessions owned by ``user_id``, oldest first."""
    sessions = [data for _, data in _iter_sessions() if data.user_id == user_id]
    return sorted(sessions, key=lambda s: s.started_at)


def delete_sessions(
    user_id: str,
    start_ms: int | None = None,
    end_ms: int | None = None,
) -> int:
    """Delete sessions of ``user_id`` started in ``[start_ms, end_ms)``. No bounds deletes all."""
    count = 0
    for path, data in _iter_sessions():
        if data.user_id != user_id:
            continue
        started = data.started_at
        if start_ms is not None and started < start_ms:
            continue
        if end_ms is not None and started >= end_ms:
            continue
        path.unlink(missing_ok=True)
        count += 1
    return count
