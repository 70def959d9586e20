from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from ..models import JournalEntry, Memory, SourceType
from .base import MemoryBackend


def _range_clause(column: str, start_ms: Optional[int], end_ms: Optional[int]) -> Tuple[str, List[Any]]:
    clause = ""
    params: List[Any] = []
    if start_ms is not None:
        clause += f" AND {column} >= ?"
        params.append(start_ms)
    if end_ms is not None:
        clause += f" AND {column} < ?"
        params.append(end_ms)
    return clause, params


class SQLiteMemoryBackend(MemoryBackend):
    """SQLite-backed store for memories and journal entries.

    Two tables, both keyed by a UUID string and indexed by ``user_id``:
    - ``memories``: content, tags JSON, created_at (epoch ms), is_core,
      source_type and an optional embedding vector as JSON
    - ``journals``: title, content, mood, timestamp (epoch ms)
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = str(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = sqlite3.connect(
            self.db_path, check_same_thread=False
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._create_schema()

    def _create_schema(self) -> None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS memories (
                    memory_id      TEXT PRIMARY KEY,
                    user_id        TEXT NOT NULL,
                    content        TEXT NOT NULL,
                    tags_json      TEXT NOT NULL DEFAULT '[]',
                    created_at     INTEGER NOT NULL,
                    is_core        INTEGER NOT NULL DEFAULT 0,
                    source_type    TEXT NOT NULL DEFAULT 'chat_log',
                    embedding_json TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_memories_user_created
                ON memories (user_id, created_at)
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS journals (
                    journal_id TEXT PRIMARY KEY,
                    user_id    TEXT NOT NULL,
                    title      TEXT NOT NULL DEFAULT '',
                    content    TEXT NOT NULL,
                    mood       TEXT NOT NULL DEFAULT 'neutral',
                    timestamp  INTEGER NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_journals_user_ts
                ON journals (user_id, timestamp)
                """
            )
            self._conn.commit()

    @staticmethod
    def _row_to_memory(row: sqlite3.Row) -> Memory:
        return Memory(
            id=row["memory_id"],
            user_id=row["user_id"],
            content=row["content"],
            tags=json.loads(row["tags_json"] or "[]"),
            created_at=row["created_at"],
            is_core=bool(row["is_core"]),
            source_type=SourceType(row["source_type"]),
        )

    @staticmethod
    def _row_to_journal(row: sqlite3.Row) -> JournalEntry:
        return JournalEntry(
            id=row["journal_id"],
            user_id=row["user_id"],
            title=row["title"],
            content=row["content"],
            mood=row["mood"],
            timestamp=row["timestamp"],
        )

    # ------------------------------------------------------------------
    # Memories
    # ------------------------------------------------------------------

    def insert_memory(
        self, memory: Memory, embedding: Optional[Sequence[float]] = None
    ) -> Memory:
        embedding_json = json.dumps(list(embedding)) if embedding is not None else None
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO memories (
                    memory_id, user_id, content, tags_json,
                    created_at, is_core, source_type, embedding_json
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    memory.id,
                    memory.user_id,
                    memory.content,
                    json.dumps(memory.tags),
                    memory.created_at,
                    int(memory.is_core),
                    memory.source_type.value,
                    embedding_json,
                ),
            )
            self._conn.commit()
        return memory

    def list_memories(self, user_id: str) -> List[Memory]:
        with self._lock:
            cur = self._conn.execute(
                """
                SELECT * FROM memories
                WHERE user_id = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (user_id,),
            )
            rows = cur.fetchall()
        return [self._row_to_memory(r) for r in rows]

    def list_embeddings(self, user_id: str) -> List[Tuple[Memory, List[float]]]:
        with self._lock:
            cur = self._conn.execute(
                """
                SELECT * FROM memories
                WHERE user_id = ? AND embedding_json IS NOT NULL
                ORDER BY created_at ASC, rowid ASC
                """,
                (user_id,),
            )
            rows = cur.fetchall()
        return [
            (self._row_to_memory(r), json.loads(r["embedding_json"])) for r in rows
        ]

    def delete_memory(self, user_id: str, memory_id: str) -> bool:
        with self._lock:
            cur = self._conn.execute(
                "DELETE FROM memories WHERE memory_id = ? AND user_id = ?",
                (memory_id, user_id),
            )
            self._conn.commit()
            return cur.rowcount > 0

    def delete_memories(
        self,
        user_id: str,
        start_ms: Optional[int] = None,
        end_ms: Optional[int] = None,
    ) -> int:
        clause, params = _range_clause("created_at", start_ms, end_ms)
        with self._lock:
            cur = self._conn.execute(
                f"DELETE FROM memories WHERE user_id = ?{clause}",
                [user_id, *params],
            )
            self._conn.commit()
            return cur.rowcount

    # ------------------------------------------------------------------
    # Journals
    # ------------------------------------------------------------------

    def insert_journal(self, entry: JournalEntry) -> JournalEntry:
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO journals (journal_id, user_id, title, content, mood, timestamp)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.user_id,
                    entry.title,
                    entry.content,
                    entry.mood,
                    entry.timestamp,
                ),
            )
            self._conn.commit()
        return entry

    def list_journals(
        self, user_id: str, since_ms: Optional[int] = None
    ) -> List[JournalEntry]:
        clause, params = _range_clause("timestamp", since_ms, None)
        with self._lock:
            cur = self._conn.execute(
                f"""
                SELECT * FROM journals
                WHERE user_id = ?{clause}
                ORDER BY timestamp ASC, rowid ASC
                """,
                [user_id, *params],
            )
            rows = cur.fetchall()
        return [self._row_to_journal(r) for r in rows]

    def delete_journals(
        self,
        user_id: str,
        start_ms: Optional[int] = None,
        end_ms: Optional[int] = None,
    ) -> int:
        clause, params = _range_clause("timestamp", start_ms, end_ms)
        with self._lock:
            cur = self._conn.execute(
                f"DELETE FROM journals WHERE user_id = ?{clause}",
                [user_id, *params],
            )
            self._conn.commit()
            return cur.rowcount

    def close(self) -> None:
        if getattr(self, "_conn", None) is None:
            return
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def __del__(self) -> None:
        self.close()


__all__ = ["SQLiteMemoryBackend"]
