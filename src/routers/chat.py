"""Chat router: one companion turn per request."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.chat_orchestrator.config import DEFAULT_MODEL
from src.chat_orchestrator.crisis import DEFAULT_CRISIS_RESOURCES, CrisisResource, CrisisType
from src.chat_orchestrator.loop import TurnOptions, run_turn
from src.chat_orchestrator.session_store import get_session
from src.llm_core.providers import LLMProvider
from src.sakoon_memory.memory_client import MemoryClient

from .dependencies import get_llm_provider, get_memory_client

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    user_id: str = Field(..., min_length=1, description="User identifier")
    message: str = Field(..., min_length=1, description="User message")
    session_id: str | None = Field(None, description="Optional session id to continue")
    system_prompt: str | None = Field(None, description="Optional system prompt")
    memory_enabled: bool = Field(True, description="Use and extend long-term memory for this turn")
    memory_mode: Literal["keyword", "semantic", "hybrid"] = "keyword"
    model: str = Field(
        DEFAULT_MODEL,
        description="LLM model in 'provider:model' format (e.g. 'gemini:gemini-2.5-flash').",
    )


class ChatResponse(BaseModel):
    """Response for POST /chat."""

    session_id: str
    reply: str
    message_count: int = 0
    crisis: bool = False
    crisis_type: CrisisType | None = None
    resources: list[CrisisResource] = Field(default_factory=list)


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    memory_client: MemoryClient = Depends(get_memory_client),
    llm_provider: LLMProvider | None = Depends(get_llm_provider),
) -> ChatResponse:
    """Run one turn and return the assistant reply. Memory context is injected before the LLM call; the user message is queued for memory ingestion afterwards."""
    if request.session_id:
        existing = get_session(request.session_id)
        if existing is None or (existing.user_id and existing.user_id != request.user_id):
            raise HTTPException(status_code=404, detail="Session not found")

    opts = TurnOptions(
        model=request.model,
        system_prompt=request.system_prompt,
        memory_enabled=request.memory_enabled,
        memory_mode=request.memory_mode,
        llm_provider=llm_provider,
    )
    try:
        result = await run_turn(
            user_id=request.user_id,
            user_message=request.message,
            session_id=request.session_id,
            options=opts,
            memory_client=memory_client,
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return ChatResponse(
        session_id=result.session_id,
        reply=result.reply,
        message_count=len(result.messages),
        crisis=result.crisis is not None,
        crisis_type=result.crisis,
        resources=DEFAULT_CRISIS_RESOURCES if result.crisis is not None else [],
    )
