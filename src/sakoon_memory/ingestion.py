"""Background ingestion of memorable statements.

Writes never block the reply path: callers submit an ``IngestionJob`` and a
single worker task drains the queue into the store. Reads do not wait for
in-flight jobs, so a statement submitted during one turn is not guaranteed
to be retrievable on the very next turn.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError

from .config import IngestionConfig
from .models import SourceType
from .service.memory_store import MemoryStore

logger = logging.getLogger(__name__)


def is_significant(text: str, min_length: int = 15) -> bool:
    """Whether a chat message is long enough to be worth remembering."""
    if not isinstance(text, str):
        return False
    return len(text.strip()) > min_length


@dataclass
class IngestionJob:
    user_id: str
    content: str
    source_type: SourceType = SourceType.CHAT_LOG
    is_core: bool = False
    tags: List[str] = field(default_factory=list)


class MemoryIngestionWorker:
    """Consumes ``IngestionJob``s from an ``asyncio.Queue`` and persists them."""

    def __init__(
        self,
        store: MemoryStore,
        config: Optional[IngestionConfig] = None,
    ) -> None:
        self._store = store
        self.config = config or IngestionConfig()
        self._queue: asyncio.Queue[IngestionJob] = asyncio.Queue(
            maxsize=self.config.max_queue_size
        )
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="memory-ingestion")
        logger.info("Memory ingestion worker started")

    async def stop(self, drain: bool = True) -> None:
        """Stop the worker, by default after processing everything already queued."""
        if self._task is None:
            return
        if drain:
            await self._queue.join()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Memory ingestion worker stopped")

    async def join(self) -> None:
        """Wait until every submitted job has been processed."""
        await self._queue.join()

    def submit(self, job: IngestionJob) -> bool:
        """Queue a job without waiting. Returns False when the queue is full."""
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning("Memory ingestion queue full; dropping job for user %s", job.user_id)
            return False
        return True

    def submit_message(
        self,
        user_id: str,
        text: str,
        source_type: SourceType = SourceType.CHAT_LOG,
    ) -> bool:
        """Queue a chat message if it passes the significance rule."""
        if not user_id or not is_significant(text, self.config.min_significant_length):
            return False
        return self.submit(IngestionJob(user_id=user_id, content=text, source_type=source_type))

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.process(job)
            finally:
                self._queue.task_done()

    async def process(self, job: IngestionJob) -> bool:
        try:
            await asyncio.to_thread(
                self._store.add,
                job.user_id,
                job.content,
                is_core=job.is_core,
                tags=job.tags,
                source_type=job.source_type,
            )
        except (ValidationError, ValueError) as e:
            logger.debug("Skipping unmemorable content for user %s: %s", job.user_id, e)
            return False
        except Exception:
            logger.exception("Memory consolidation failed for user %s", job.user_id)
            return False
        logger.info("Memory consolidated for user %s", job.user_id)
        return True


__all__ = ["IngestionJob", "MemoryIngestionWorker", "is_significant"]
