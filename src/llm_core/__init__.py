"""Shared LLM models and providers used across the backend."""

from .config import LLMCoreConfig, DEFAULT_LLM_CORE_CONFIG
from .core import chat
from .models import Message
from .providers import GeminiProvider, LLMProvider

__all__ = [
    "Message",
    "LLMCoreConfig",
    "DEFAULT_LLM_CORE_CONFIG",
    "GeminiProvider",
    "LLMProvider",
    "chat",
]
