"""Run the FastAPI app for the Sakoon companion backend."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from src.routers import chat_router, journals_router, memories_router
from src.sakoon_memory.ingestion import MemoryIngestionWorker
from src.sakoon_memory.memory_client import get_memory_client

logging.basicConfig(
    level=os.getenv("SAKOON_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = getattr(app.state, "memory_client", None) or get_memory_client()
    worker = MemoryIngestionWorker(client.store, client.config.ingestion)
    client.attach_worker(worker)
    worker.start()
    app.state.memory_client = client
    try:
        yield
    finally:
        await worker.stop()
        client.attach_worker(None)


app = FastAPI(title="Sakoon Companion", version="0.1.0", lifespan=lifespan)
app.include_router(chat_router)
app.include_router(memories_router)
app.include_router(journals_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
