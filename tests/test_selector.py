"""Unit tests for ranking and rendering the memory context block."""
from __future__ import annotations

import unittest

from src.sakoon_memory.config import CONTEXT_HEADER, RetrievalConfig
from src.sakoon_memory.models import Memory
from src.sakoon_memory.scoring import MS_PER_DAY
from src.sakoon_memory.selector import rank_memories, select_context

NOW = 1_750_000_000_000


def _memory(content: str, days_old: float = 0.0, is_core: bool = False) -> Memory:
    return Memory(
        user_id="u1",
        content=content,
        created_at=int(NOW - days_old * MS_PER_DAY),
        is_core=is_core,
    )


class TestSelectContext(unittest.TestCase):
    def test_empty_memories_returns_none(self) -> None:
        self.assertIsNone(select_context([], "anything", "at all", now=NOW))

    def test_nothing_relevant_returns_none(self) -> None:
        memories = [_memory("Went hiking last summer", days_old=30)]
        self.assertIsNone(select_context(memories, "exam anxiety", "", now=NOW))

    def test_worked_example(self) -> None:
        exams = _memory("I feel anxious before exams", days_old=1)
        name = _memory("My name is Sara", days_old=40, is_core=True)

        hits = rank_memories([name, exams], "exam anxiety", "", now=NOW)

        self.assertEqual([h.memory.content for h in hits], [exams.content, name.content])
        # partial "exam" (4) + recency (4)
        self.assertAlmostEqual(hits[0].score, 8.0)
        self.assertAlmostEqual(hits[1].score, 6.0)

        block = select_context([name, exams], "exam anxiety", "", now=NOW)
        self.assertEqual(
            block,
            CONTEXT_HEADER
            + "\n- I feel anxious before exams\n- My name is Sara",
        )

    def test_threshold_excludes_old_unrelated_non_core(self) -> None:
        stale = _memory("Went hiking last summer", days_old=5)
        self.assertEqual(rank_memories([stale], "exam", "", now=NOW), [])

    def test_brand_new_unrelated_memory_scores_exactly_threshold(self) -> None:
        fresh = _memory("Went hiking last summer", days_old=0)
        hits = rank_memories([fresh], "exam", "", now=NOW)
        self.assertEqual(len(hits), 1)
        self.assertAlmostEqual(hits[0].score, 5.0)

    def test_core_memory_always_clears_threshold(self) -> None:
        for days in (0, 3, 30, 400):
            core = _memory("My name is Sara", days_old=days, is_core=True)
            hits = rank_memories([core], "unrelated", "", now=NOW)
            self.assertEqual(len(hits), 1, days)
            self.assertGreaterEqual(hits[0].score, 6.0)

    def test_output_is_bounded(self) -> None:
        memories = [_memory(f"I worry about exams number {i}") for i in range(500)]
        hits = rank_memories(memories, "worry exams", "", now=NOW)
        self.assertEqual(len(hits), 6)
        block = select_context(memories, "worry exams", "", now=NOW)
        self.assertEqual(len([l for l in block.splitlines() if l.startswith("- ")]), 6)

    def test_ties_keep_input_order(self) -> None:
        memories = [_memory(f"Coffee helps morning {i}", days_old=10) for i in range(4)]
        hits = rank_memories(memories, "coffee", "", now=NOW)
        self.assertEqual([h.memory.id for h in hits], [m.id for m in memories])

    def test_sorted_by_score_descending(self) -> None:
        weak = _memory("Coffee helps", days_old=10)
        strong = _memory("Coffee helps my morning anxiety", days_old=10)
        hits = rank_memories([weak, strong], "coffee morning anxiety", "", now=NOW)
        self.assertEqual([h.memory.id for h in hits], [strong.id, weak.id])

    def test_deterministic_for_fixed_now(self) -> None:
        memories = [
            _memory("Sister visits every Sunday", days_old=2),
            _memory("Exams start next week", days_old=1),
            _memory("My name is Sara", days_old=50, is_core=True),
        ]
        first = select_context(memories, "exams sister", "sunday plans", now=NOW)
        second = select_context(memories, "exams sister", "sunday plans", now=NOW)
        self.assertEqual(first, second)

    def test_malformed_candidates_are_skipped(self) -> None:
        good = _memory("Exams start next week", days_old=1)
        broken = Memory.model_construct(user_id="u1", content={"text": "x"}, created_at=NOW)
        hits = rank_memories([broken, None, "raw text", good], "exams", "", now=NOW)
        self.assertEqual([h.memory.id for h in hits], [good.id])

    def test_non_text_query_and_window_count_as_empty(self) -> None:
        core = _memory("My name is Sara", days_old=40, is_core=True)
        plain = _memory("Exams start next week", days_old=40)
        for query, window in ((42, ""), (None, 3.5), (["exams"], {"sara": 1})):
            block = select_context([core, plain], query, window, now=NOW)
            self.assertEqual(block, CONTEXT_HEADER + "\n- My name is Sara", (query, window))

    def test_configurable_threshold_and_cap(self) -> None:
        cfg = RetrievalConfig(score_threshold=11, max_results=1, header="Known:")
        memories = [
            _memory("Exams start next week", days_old=10),
            _memory("Exams make me anxious", days_old=0),
        ]
        block = select_context(memories, "exams", "", now=NOW, config=cfg)
        self.assertEqual(block, "Known:\n- Exams make me anxious")

    def test_does_not_mutate_input(self) -> None:
        memories = [_memory("Exams start next week", days_old=1)]
        before = [m.model_dump() for m in memories]
        select_context(memories, "exams", "", now=NOW)
        self.assertEqual([m.model_dump() for m in memories], before)


if __name__ == "__main__":
    unittest.main()
