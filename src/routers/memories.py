"""Memory router: inspect, add, forget and erase long-term memories."""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, ValidationError

from src.chat_orchestrator.session_store import delete_sessions
from src.sakoon_memory.memory_client import MemoryClient
from src.sakoon_memory.models import ErasureResult, Memory, MemoryHit, SourceType
from src.sakoon_memory.selector import render_context
from src.sakoon_memory.service.memory_store import day_bounds

from .dependencies import get_memory_client

router = APIRouter(prefix="/memories", tags=["memories"])


class MemoryCreate(BaseModel):
    """Request body for POST /memories/{user_id}."""

    content: str = Field(..., description="Statement to remember")
    is_core: bool = Field(False, description="Permanently important; resists recency decay")
    tags: List[str] = Field(default_factory=list)
    source_type: SourceType = SourceType.EXPLICIT


class RecallRequest(BaseModel):
    """Request body for POST /memories/{user_id}/recall."""

    query: str = ""
    conversation_window: str = ""


class RecallResponse(BaseModel):
    hits: List[MemoryHit]
    context: Optional[str] = None


@router.get("/{user_id}", response_model=List[Memory])
async def list_memories(
    user_id: str,
    memory_client: MemoryClient = Depends(get_memory_client),
) -> List[Memory]:
    return await asyncio.to_thread(memory_client.store.list, user_id)


@router.post("/{user_id}", response_model=Memory, status_code=status.HTTP_201_CREATED)
async def add_memory(
    user_id: str,
    body: MemoryCreate,
    memory_client: MemoryClient = Depends(get_memory_client),
) -> Memory:
    """Store a statement immediately (not through the background queue)."""
    try:
        return await asyncio.to_thread(
            memory_client.store.add,
            user_id,
            body.content,
            is_core=body.is_core,
            tags=body.tags,
            source_type=body.source_type,
        )
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.delete("/{user_id}/{memory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def forget_memory(
    user_id: str,
    memory_id: str,
    memory_client: MemoryClient = Depends(get_memory_client),
) -> None:
    deleted = await asyncio.to_thread(memory_client.store.delete, user_id, memory_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Memory not found")


@router.post("/{user_id}/recall", response_model=RecallResponse)
async def recall(
    user_id: str,
    body: RecallRequest,
    memory_client: MemoryClient = Depends(get_memory_client),
) -> RecallResponse:
    """Preview which memories would be injected for a query."""
    hits = await asyncio.to_thread(
        memory_client.recall, user_id, body.query, body.conversation_window
    )
    return RecallResponse(hits=hits, context=render_context(hits, memory_client.config.retrieval))


@router.delete("/{user_id}", response_model=ErasureResult)
async def erase(
    user_id: str,
    scope: Literal["today", "date", "all"] = Query(..., description="What to erase"),
    date: Optional[dt.date] = Query(None, description="Calendar day (YYYY-MM-DD) for scope=date"),
    memory_client: MemoryClient = Depends(get_memory_client),
) -> ErasureResult:
    """Erase memories, journal entries and chat sessions for today, a date, or everything."""
    store = memory_client.store
    if scope == "date":
        if date is None:
            raise HTTPException(status_code=422, detail="date is required when scope=date")
        start, end = day_bounds(date)
        result = await asyncio.to_thread(store.erase_date, user_id, date)
    elif scope == "today":
        start, end = day_bounds(dt.date.today())[0], None
        result = await asyncio.to_thread(store.erase_today, user_id)
    else:
        start, end = None, None
        result = await asyncio.to_thread(store.erase_all, user_id)

    result.sessions = await asyncio.to_thread(delete_sessions, user_id, start, end)
    return result
