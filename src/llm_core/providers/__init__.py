"""LLM providers: pluggable backends for shared LLM usage."""

from .base import LLMProvider
from .gemini_provider import GeminiProvider

__all__ = [
    "LLMProvider",
    "GeminiProvider",
]
