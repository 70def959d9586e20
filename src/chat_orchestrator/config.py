"""Orchestrator configuration: paths and defaults."""

from __future__ import annotations

from pathlib import Path

from main_config import (
    DEFAULT_SYSTEM_PROMPT_PATH as _DEFAULT_SYSTEM_PROMPT_PATH,
    SESSIONS_DIR as _SESSIONS_DIR,
)

# Path objects for use in this package (main_config uses os.path strings)
SESSIONS_DIR = Path(_SESSIONS_DIR)
DEFAULT_SYSTEM_PROMPT_PATH = Path(_DEFAULT_SYSTEM_PROMPT_PATH)

DEFAULT_MODEL = "gemini:gemini-2.5-flash"
DEFAULT_HISTORY_MESSAGES = 10
FALLBACK_REPLY = "I'm having a moment of connection trouble, but I'm here."
EMPTY_REPLY = "I'm listening."
