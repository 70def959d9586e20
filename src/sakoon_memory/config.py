from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

# Align with main_config: memory data under DB_DIR/memory/
try:
    from main_config import MEMORY_DB_PATH as _MEMORY_DB_PATH_STR

    MEMORY_DB_PATH = Path(_MEMORY_DB_PATH_STR)
except ImportError:
    # Fallback: <repo>/db/memory relative to this file
    MEMORY_DB_PATH = (
        Path(__file__).resolve().parent.parent.parent / "db" / "memory" / "memories.db"
    )

CONTEXT_HEADER = (
    "[LONG-TERM MEMORY] These are prioritized recollections about the user:"
)


class RetrievalConfig(BaseModel):
    """Tuning for keyword-based memory selection."""

    conversation_window_turns: int = Field(
        default=5,
        ge=0,
        description="How many previous user turns form the conversation window.",
    )
    score_threshold: float = Field(
        default=5.0,
        description="Minimum score (inclusive) for a memory to be selected.",
    )
    max_results: int = Field(
        default=6,
        ge=0,
        description="Maximum number of memories rendered into the context block.",
    )
    exact_match_points: float = 10.0
    partial_match_points: float = 4.0
    context_match_points: float = 3.0
    recency_max_points: float = Field(
        default=5.0,
        description="Bonus for a memory created just now; decays linearly.",
    )
    recency_horizon_days: float = Field(
        default=5.0,
        gt=0,
        description="Age in days at which the recency bonus reaches zero.",
    )
    core_boost: float = 6.0
    header: str = CONTEXT_HEADER
    journal_lookback_days: float = Field(
        default=3.0,
        description="Journal entries younger than this are added to the prompt context.",
    )


class EmbeddingConfig(BaseModel):
    """Configuration for the Gemini embedding backend used by semantic recall."""

    enabled: bool = False
    model: str = Field(
        default="text-embedding-004",
        description="Embedding model name served by the Gemini API.",
    )
    similarity_threshold: float = 0.65
    top_k: int = 5


class IngestionConfig(BaseModel):
    """Configuration for background memory ingestion."""

    min_significant_length: int = Field(
        default=15,
        description="User messages must be longer than this (after trimming) to be remembered.",
    )
    max_queue_size: int = 1000


class MemoryStoreConfig(BaseModel):
    """Top-level configuration for the memory store."""

    sqlite_path: Path = Field(
        default=MEMORY_DB_PATH,
        description="Path to the SQLite database file for memories and journals.",
    )
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)

    def ensure_directories(self) -> None:
        """Create required directories if they do not exist."""
        self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)


DEFAULT_RETRIEVAL_CONFIG = RetrievalConfig()
