"""Tests for the background memory ingestion worker."""
from __future__ import annotations

import unittest
from unittest.mock import MagicMock

from src.sakoon_memory.config import IngestionConfig
from src.sakoon_memory.ingestion import IngestionJob, MemoryIngestionWorker, is_significant
from src.sakoon_memory.models import SourceType
from src.sakoon_memory.persistence import InMemoryBackend
from src.sakoon_memory.service.memory_store import MemoryStore


class TestSignificance(unittest.TestCase):
    def test_short_messages_are_not_significant(self) -> None:
        self.assertFalse(is_significant("ok thanks"))
        # 15 characters after trimming
        self.assertFalse(is_significant("   exactly fifteen  "))

    def test_long_messages_are_significant(self) -> None:
        self.assertTrue(is_significant("My exams start on Monday"))

    def test_non_text_is_not_significant(self) -> None:
        self.assertFalse(is_significant(None))  # type: ignore[arg-type]

    def test_threshold_is_configurable(self) -> None:
        self.assertTrue(is_significant("hey", min_length=2))


class TestMemoryIngestionWorker(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = MemoryStore(backend=InMemoryBackend())

    async def test_submitted_message_is_stored(self) -> None:
        worker = MemoryIngestionWorker(self.store)
        worker.start()
        try:
            self.assertTrue(worker.submit_message("u1", "I have been sleeping badly all week"))
            await worker.join()
        finally:
            await worker.stop()

        memories = self.store.list("u1")
        self.assertEqual([m.content for m in memories], ["I have been sleeping badly all week"])
        self.assertEqual(memories[0].source_type, SourceType.CHAT_LOG)

    async def test_insignificant_message_is_not_queued(self) -> None:
        worker = MemoryIngestionWorker(self.store)
        self.assertFalse(worker.submit_message("u1", "lol"))
        self.assertFalse(worker.submit_message("", "A long enough message for memory"))
        self.assertEqual(worker.pending, 0)

    async def test_full_queue_drops_job(self) -> None:
        worker = MemoryIngestionWorker(self.store, IngestionConfig(max_queue_size=1))
        self.assertTrue(worker.submit(IngestionJob(user_id="u1", content="first job here")))
        with self.assertLogs("src.sakoon_memory.ingestion", level="WARNING"):
            self.assertFalse(worker.submit(IngestionJob(user_id="u1", content="second job")))
        self.assertEqual(worker.pending, 1)

    async def test_stop_drains_pending_jobs(self) -> None:
        worker = MemoryIngestionWorker(self.store)
        worker.submit_message("u1", "Journal says I felt hopeful today", SourceType.JOURNAL)
        worker.start()
        self.assertTrue(worker.running)
        await worker.stop()
        self.assertFalse(worker.running)
        (memory,) = self.store.list("u1")
        self.assertEqual(memory.source_type, SourceType.JOURNAL)

    async def test_punctuation_only_content_is_skipped(self) -> None:
        worker = MemoryIngestionWorker(self.store)
        ok = await worker.process(IngestionJob(user_id="u1", content="?!?!?!?!?!?!?!?!?!"))
        self.assertFalse(ok)
        self.assertEqual(self.store.list("u1"), [])

    async def test_store_failure_is_logged_not_raised(self) -> None:
        store = MagicMock()
        store.add.side_effect = RuntimeError("disk full")
        worker = MemoryIngestionWorker(store)
        with self.assertLogs("src.sakoon_memory.ingestion", level="ERROR"):
            ok = await worker.process(IngestionJob(user_id="u1", content="Something to remember"))
        self.assertFalse(ok)

    async def test_worker_keeps_running_after_failed_job(self) -> None:
        worker = MemoryIngestionWorker(self.store)
        worker.start()
        try:
            worker.submit(IngestionJob(user_id="u1", content="..."))
            worker.submit_message("u1", "Started a new job at the bakery")
            await worker.join()
            self.assertTrue(worker.running)
        finally:
            await worker.stop()
        self.assertEqual(len(self.store.list("u1")), 1)


if __name__ == "__main__":
    unittest.main()
