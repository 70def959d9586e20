"""One companion chat turn: recall, generate, persist, remember."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import NamedTuple

from src.llm_core import Message, chat
from src.llm_core.providers import LLMProvider
from src.sakoon_memory.memory_client import MemoryClient
from src.sakoon_memory.models import now_ms

from .config import DEFAULT_HISTORY_MESSAGES, DEFAULT_MODEL, EMPTY_REPLY, FALLBACK_REPLY
from .crisis import BLOCKING_CRISIS_TYPES, CRISIS_REPLY, CrisisType, detect_crisis_type
from .models import SessionData
from .session_store import create_session, load_session, save_session
from .system_prompt_loader import build_system_instruction, get_default_system_prompt

logger = logging.getLogger(__name__)


@dataclass
class TurnOptions:
    """Options for a single chat turn."""

    model: str = DEFAULT_MODEL
    history_messages: int = DEFAULT_HISTORY_MESSAGES
    system_prompt: str | None = None
    memory_enabled: bool = True
    memory_mode: str = "keyword"
    llm_provider: LLMProvider | None = None


class TurnResult(NamedTuple):
    """Outcome of one turn; ``crisis`` is set when the turn was stopped."""

    session_id: str
    reply: str
    messages: list[Message]
    crisis: CrisisType | None = None


def conversation_window(history: list[Message], turns: int = 5) -> str:
    """Join the text of the last ``turns`` user messages."""
    if turns <= 0:
        return ""
    user_texts = [m.content for m in history if m.role == "user" and m.content]
    return " ".join(user_texts[-turns:])


async def _memory_context(
    memory_client: MemoryClient,
    user_id: str,
    query: str,
    window: str,
    mode: str,
) -> str:
    try:
        return await asyncio.to_thread(
            memory_client.get_context,
            user_id,
            query,
            window,
            mode=mode,
        )
    except Exception as e:
        logger.warning("Memory context unavailable for user %s: %s", user_id, e)
        return ""
async def run_turn(
    user_id: str,
    user_message: str,
    session_id: str | None = None,
    options: TurnOptions | None = None,
    memory_client: MemoryClient | None = None,
) -> TurnResult:
    """
    Run one turn: load (or create) the session, build memory context from the
    message and the recent user turns, ask the LLM, persist the session and
    hand the user message to background memory ingestion.

    Crisis language in the user message stops the turn before the LLM call;
    crisis language in the reply replaces it. Either way the reply is
    ``CRISIS_REPLY`` and ``crisis`` carries the detected type.
    """
    opts = options or TurnOptions()

    if session_id:
        messages, metadata = load_session(session_id)
        if not metadata.get("user_id"):
            metadata["user_id"] = user_id
    else:
        session_id, data = create_session(user_id, model=opts.model)
        messages = data.to_messages()
        metadata = dict(data.metadata)

    conversation = [m for m in messages if m.role != "system"]
    history = conversation[-opts.history_messages:] if opts.history_messages > 0 else []
    user_msg = Message(role="user", content=user_message, timestamp=now_ms())

    crisis = detect_crisis_type(user_message)
    if crisis in BLOCKING_CRISIS_TYPES:
        logger.warning("Crisis language (%s) in message from user %s", crisis.value, user_id)
        reply = CRISIS_REPLY
    else:
        crisis = None
        reply = await _generate_reply(
            user_id, user_message, user_msg, conversation, history, opts, memory_client
        )
        reply_crisis = detect_crisis_type(reply)
        if reply_crisis in BLOCKING_CRISIS_TYPES:
            logger.warning("Crisis language (%s) in reply to user %s", reply_crisis.value, user_id)
            crisis = reply_crisis
            reply = CRISIS_REPLY

    messages.append(user_msg)
    messages.append(Message(role="assistant", content=reply, timestamp=now_ms()))

    metadata["model"] = opts.model
    save_session(SessionData.from_messages(session_id, messages, metadata))

    if opts.memory_enabled and memory_client is not None and crisis is None:
        memory_client.remember_message(user_id, user_message)

    return TurnResult(session_id, reply, messages, crisis)


async def _generate_reply(
    user_id: str,
    user_message: str,
    user_msg: Message,
    conversation: list[Message],
    history: list[Message],
    opts: TurnOptions,
    memory_client: MemoryClient | None,
) -> str:
    memory_context = ""
    if opts.memory_enabled and memory_client is not None:
        window = conversation_window(
            conversation, memory_client.config.retrieval.conversation_window_turns
        )
        memory_context = await _memory_context(
            memory_client, user_id, user_message, window, opts.memory_mode
        )

    system_instruction = build_system_instruction(
        opts.system_prompt or get_default_system_prompt(), memory_context
    )
    prompt: list[Message] = []
    if system_instruction:
        prompt.append(Message(role="system", content=system_instruction))
    prompt.extend(history)
    prompt.append(user_msg)

    try:
        reply = await chat(prompt, model=opts.model, provider=opts.llm_provider)
    except Exception as e:
        logger.error("LLM call failed for user %s: %s", user_id, e)
        return FALLBACK_REPLY
    return reply.strip() or EMPTY_REPLY
