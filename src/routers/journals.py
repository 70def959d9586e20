"""Journal router: write and read journal entries."""

from __future__ import annotations

import asyncio
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from src.sakoon_memory.memory_client import MemoryClient
from src.sakoon_memory.models import JournalEntry, Mood, SourceType

from .dependencies import get_memory_client

router = APIRouter(prefix="/journals", tags=["journals"])


class JournalCreate(BaseModel):
    """Request body for POST /journals/{user_id}."""

    content: str = Field(..., min_length=1)
    title: str = ""
    mood: Mood = "neutral"


@router.get("/{user_id}", response_model=List[JournalEntry])
async def list_journals(
    user_id: str,
    memory_client: MemoryClient = Depends(get_memory_client),
) -> List[JournalEntry]:
    return await asyncio.to_thread(memory_client.store.list_journals, user_id)


@router.post("/{user_id}", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
async def add_journal(
    user_id: str,
    body: JournalCreate,
    memory_client: MemoryClient = Depends(get_memory_client),
) -> JournalEntry:
    """Save an entry and queue its content for memory ingestion."""
    try:
        entry = await asyncio.to_thread(
            memory_client.store.add_journal,
            user_id,
            body.content,
            title=body.title,
            mood=body.mood,
        )
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    memory_client.remember_message(user_id, entry.content, source_type=SourceType.JOURNAL)
    return entry
