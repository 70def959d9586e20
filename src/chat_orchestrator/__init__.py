"""Chat orchestrator: memory-aware companion turns with JSON session storage."""

from .crisis import CrisisResource, CrisisType, check_for_crisis, detect_crisis_type
from .loop import TurnOptions, TurnResult, conversation_window, run_turn
from .models import SessionData
from .session_store import (
    create_session,
    delete_sessions,
    get_session,
    list_sessions,
    load_session,
    save_session,
)
from .system_prompt_loader import build_system_instruction, get_default_system_prompt

__all__ = [
    "run_turn",
    "TurnOptions",
    "TurnResult",
    "CrisisResource",
    "CrisisType",
    "check_for_crisis",
    "detect_crisis_type",
    "conversation_window",
    "SessionData",
    "create_session",
    "delete_sessions",
    "get_session",
    "list_sessions",
    "load_session",
    "save_session",
    "build_system_instruction",
    "get_default_system_prompt",
]
