"""FastAPI dependencies resolved from application state."""

from __future__ import annotations

from fastapi import HTTPException, Request

from src.llm_core.providers import LLMProvider
from src.sakoon_memory.memory_client import MemoryClient


def get_memory_client(request: Request) -> MemoryClient:
    """Dependency to get the MemoryClient from the application state."""
    client = getattr(request.app.state, "memory_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Memory store is not available.")
    return client


def get_llm_provider(request: Request) -> LLMProvider | None:
    """Dependency to get an explicit LLM provider; None resolves one from the model string."""
    return getattr(request.app.state, "llm_provider", None)
