"""Tests for the chat turn loop and JSON session storage (LLM provider faked)."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from typing import Any
from unittest.mock import patch

from src.chat_orchestrator.config import EMPTY_REPLY, FALLBACK_REPLY
from src.chat_orchestrator.crisis import CRISIS_REPLY, CrisisType, check_for_crisis, detect_crisis_type
from src.chat_orchestrator.loop import TurnOptions, conversation_window, run_turn
from src.chat_orchestrator.session_store import (
    create_session,
    delete_sessions,
    get_session,
    list_sessions,
    save_session,
)
from src.chat_orchestrator.system_prompt_loader import RECALL_PROTOCOL, build_system_instruction
from src.llm_core import LLMProvider, Message
from src.sakoon_memory.config import CONTEXT_HEADER
from src.sakoon_memory.memory_client import MemoryClient
from src.sakoon_memory.persistence import InMemoryBackend
from src.sakoon_memory.service.memory_store import MemoryStore


class FakeProvider(LLMProvider):
    def __init__(self, reply: str = "That sounds hard. I'm here.", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[list[Message], str | None]] = []

    async def chat(self, messages: list[Message], *, model: str | None = None, **kwargs: Any) -> str:
        self.calls.append((list(messages), model))
        if self.error is not None:
            raise self.error
        return self.reply


class SessionDirMixin:
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        patcher = patch(
            "src.chat_orchestrator.session_store.SESSIONS_DIR", Path(self._tmp.name) / "sessions"
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)


class TestConversationWindow(unittest.TestCase):
    def test_last_user_turns_only(self) -> None:
        history = []
        for i in range(7):
            history.append(Message(role="user", content=f"user {i}"))
            history.append(Message(role="assistant", content=f"reply {i}"))
        self.assertEqual(
            conversation_window(history, turns=5), "user 2 user 3 user 4 user 5 user 6"
        )

    def test_zero_turns(self) -> None:
        self.assertEqual(conversation_window([Message(role="user", content="hi")], 0), "")


class TestSystemInstruction(unittest.TestCase):
    def test_no_memory_leaves_prompt_untouched(self) -> None:
        self.assertEqual(build_system_instruction("  Be kind.  ", ""), "Be kind.")

    def test_memory_context_is_appended(self) -> None:
        out = build_system_instruction("Be kind.", "CTX")
        self.assertTrue(out.startswith("Be kind.\n\n" + RECALL_PROTOCOL))
        self.assertTrue(out.endswith("CTX"))


class TestSessionStore(SessionDirMixin, unittest.TestCase):
    def test_create_and_get(self) -> None:
        session_id, _ = create_session("u1", model="gemini:gemini-2.5-flash")
        loaded = get_session(session_id)
        self.assertIsNotNone(loaded)
        self.assertEqual(loaded.user_id, "u1")
        self.assertGreater(loaded.started_at, 0)
        self.assertIsNone(get_session("missing"))

    def test_delete_sessions_by_range_and_user(self) -> None:
        old_id, old = create_session("u1")
        old.metadata["started_at"] = 1_000
        save_session(old)
        new_id, new = create_session("u1")
        new.metadata["started_at"] = 5_000
        save_session(new)
        other_id, _ = create_session("u2")

        self.assertEqual(delete_sessions("u1", start_ms=2_000), 1)
        self.assertIsNone(get_session(new_id))
        self.assertIsNotNone(get_session(old_id))

        self.assertEqual(delete_sessions("u1"), 1)
        self.assertEqual(list_sessions("u1"), [])
        self.assertEqual([s.session_id for s in list_sessions("u2")], [other_id])

    def test_unreadable_file_is_skipped(self) -> None:
        create_session("u1")
        broken = Path(self._tmp.name) / "sessions" / "broken.json"
        broken.write_text("{not json", encoding="utf-8")
        with self.assertLogs("src.chat_orchestrator.session_store", level="WARNING"):
            self.assertEqual(len(list_sessions("u1")), 1)


class TestRunTurn(SessionDirMixin, unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client = MemoryClient(MemoryStore(backend=InMemoryBackend()))
        self.provider = FakeProvider()

    def _options(self, **overrides: Any) -> TurnOptions:
        values: dict[str, Any] = {"system_prompt": "You are Sakoon.", "llm_provider": self.provider}
        values.update(overrides)
        return TurnOptions(**values)

    async def test_new_session_turn(self) -> None:
        session_id, reply, messages, _ = await run_turn(
            "u1", "Hello there", options=self._options(), memory_client=self.client
        )

        self.assertEqual(reply, "That sounds hard. I'm here.")
        self.assertEqual([m.role for m in messages], ["user", "assistant"])
        prompt, model = self.provider.calls[0]
        self.assertEqual(model, "gemini-2.5-flash")
        self.assertEqual(prompt[0], Message(role="system", content="You are Sakoon."))
        self.assertEqual(prompt[-1].content, "Hello there")

        saved = get_session(session_id)
        self.assertEqual(len(saved.messages), 2)
        self.assertEqual(saved.user_id, "u1")

    async def test_memory_context_reaches_system_prompt(self) -> None:
        self.client.store.add("u1", "Exams start next Monday")

        await run_turn("u1", "exams are scary", options=self._options(), memory_client=self.client)

        system = self.provider.calls[0][0][0]
        self.assertEqual(system.role, "system")
        self.assertIn(RECALL_PROTOCOL, system.content)
        self.assertIn(CONTEXT_HEADER + "\n- Exams start next Monday", system.content)

    async def test_previous_user_turns_form_the_window(self) -> None:
        self.client.store.add("u1", "Sister visits every Sunday", created_at=0)
        opts = self._options()
        session_id, _, _, _ = await run_turn(
            "u1", "lunch with my sister on sunday", options=opts, memory_client=self.client
        )
        await run_turn(
            "u1", "what should I cook", session_id=session_id, options=opts, memory_client=self.client
        )

        # second turn only matches through the window: sister + sunday
        second_prompt = self.provider.calls[1][0]
        self.assertIn("Sister visits every Sunday", second_prompt[0].content)
        self.assertEqual([m.role for m in second_prompt[1:]], ["user", "assistant", "user"])

    async def test_history_is_truncated(self) -> None:
        opts = self._options(history_messages=2, memory_enabled=False)
        session_id, _, _, _ = await run_turn("u1", "first message", options=opts)
        await run_turn("u1", "second message", session_id=session_id, options=opts)
        _, _, messages, _ = await run_turn("u1", "third message", session_id=session_id, options=opts)

        prompt = self.provider.calls[2][0]
        self.assertEqual([m.content for m in prompt[1:-1]], ["second message", self.provider.reply])
        self.assertEqual(len(messages), 6)

    async def test_provider_failure_uses_fallback_reply(self) -> None:
        self.provider.error = RuntimeError("quota exceeded")
        session_id, reply, _, _ = await run_turn(
            "u1", "Are you there?", options=self._options(), memory_client=self.client
        )
        self.assertEqual(reply, FALLBACK_REPLY)
        self.assertEqual(len(get_session(session_id).messages), 2)

    async def test_blank_reply_becomes_listening(self) -> None:
        self.provider.reply = "   "
        _, reply, _, _ = await run_turn("u1", "...", options=self._options(), memory_client=self.client)
        self.assertEqual(reply, EMPTY_REPLY)

    async def test_user_message_is_handed_to_memory(self) -> None:
        with patch.object(self.client, "remember_message", return_value=True) as remember:
            await run_turn(
                "u1", "I started therapy this week", options=self._options(), memory_client=self.client
            )
        remember.assert_called_once_with("u1", "I started therapy this week")

    async def test_memory_disabled_skips_recall_and_ingestion(self) -> None:
        with patch.object(self.client, "get_context") as get_context, patch.object(
            self.client, "remember_message"
        ) as remember:
            await run_turn(
                "u1",
                "Please do not remember this",
                options=self._options(memory_enabled=False),
                memory_client=self.client,
            )
        get_context.assert_not_called()
        remember.assert_not_called()

    async def test_memory_failure_does_not_block_reply(self) -> None:
        with patch.object(self.client, "get_context", side_effect=RuntimeError("boom")):
            _, reply, _, _ = await run_turn(
                "u1", "Still want an answer", options=self._options(), memory_client=self.client
            )
        self.assertEqual(reply, self.provider.reply)
        self.assertEqual(self.provider.calls[0][0][0].content, "You are Sakoon.")

    async def test_zero_history_sends_no_previous_messages(self) -> None:
        opts = self._options(history_messages=0, memory_enabled=False)
        session_id, _, _, _ = await run_turn("u1", "first message", options=opts)
        await run_turn("u1", "second message", session_id=session_id, options=opts)

        prompt = self.provider.calls[1][0]
        self.assertEqual([m.role for m in prompt], ["system", "user"])
        self.assertEqual(prompt[-1].content, "second message")

    async def test_zero_history_still_recalls_through_window(self) -> None:
        self.client.store.add("u1", "Sister visits every Sunday", created_at=0)
        opts = self._options(history_messages=0)
        session_id, _, _, _ = await run_turn(
            "u1", "lunch with my sister on sunday", options=opts, memory_client=self.client
        )
        await run_turn(
            "u1", "what should I cook", session_id=session_id, options=opts, memory_client=self.client
        )
        self.assertIn("Sister visits every Sunday", self.provider.calls[1][0][0].content)

    async def test_crisis_message_stops_turn_before_llm(self) -> None:
        with patch.object(self.client, "remember_message") as remember:
            result = await run_turn(
                "u1",
                "Honestly I want to die, nothing helps anymore",
                options=self._options(),
                memory_client=self.client,
            )
        self.assertEqual(self.provider.calls, [])
        self.assertEqual(result.crisis, CrisisType.SELF_HARM)
        self.assertEqual(result.reply, CRISIS_REPLY)
        self.assertEqual([m.role for m in result.messages], ["user", "assistant"])
        self.assertEqual(len(get_session(result.session_id).messages), 2)
        remember.assert_not_called()

    async def test_crisis_reply_is_replaced(self) -> None:
        self.provider.reply = "Maybe you should hurt someone who wronged you."
        result = await run_turn(
            "u1", "My coworker was rude to me today", options=self._options(), memory_client=self.client
        )
        self.assertEqual(len(self.provider.calls), 1)
        self.assertEqual(result.crisis, CrisisType.HARM_TO_OTHERS)
        self.assertEqual(result.reply, CRISIS_REPLY)
        self.assertNotIn(self.provider.reply, [m.content for m in result.messages])

    async def test_distress_alone_does_not_stop_turn(self) -> None:
        result = await run_turn(
            "u1", "I feel hopeless about my exams", options=self._options(), memory_client=self.client
        )
        self.assertIsNone(result.crisis)
        self.assertEqual(result.reply, self.provider.reply)


class TestCrisisScreening(unittest.TestCase):
    def test_self_harm_phrases(self) -> None:
        for text in ("I want to KILL MYSELF", "thinking about suicide", "I can’t go on like this"):
            self.assertEqual(detect_crisis_type(text), CrisisType.SELF_HARM, text)
            self.assertTrue(check_for_crisis(text), text)

    def test_harm_to_others(self) -> None:
        self.assertEqual(detect_crisis_type("I could kill him"), CrisisType.HARM_TO_OTHERS)

    def test_self_harm_outranks_other_categories(self) -> None:
        self.assertEqual(
            detect_crisis_type("I'm depressed and want to end my life"), CrisisType.SELF_HARM
        )

    def test_distress_is_reported_but_not_blocking(self) -> None:
        self.assertEqual(detect_crisis_type("so depressed lately"), CrisisType.EMOTIONAL_DISTRESS)
        self.assertFalse(check_for_crisis("so depressed lately"))

    def test_whole_words_only(self) -> None:
        self.assertIsNone(detect_crisis_type("The murderous plot twist in that novel"))
        self.assertIsNone(detect_crisis_type("Skill him? No, I said I skilled up"))

    def test_ordinary_and_non_text_input(self) -> None:
        self.assertIsNone(detect_crisis_type("I had a lovely walk today"))
        self.assertIsNone(detect_crisis_type(None))
        self.assertFalse(check_for_crisis(42))


if __name__ == "__main__":
    unittest.main()
