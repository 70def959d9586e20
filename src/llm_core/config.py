from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LLMCoreConfig:
    """Configuration for shared LLM usage."""

    model: str = "gemini:gemini-2.5-flash"


DEFAULT_LLM_CORE_CONFIG = LLMCoreConfig()
