from .memory_client import MemoryClient, get_memory_client
from .models import JournalEntry, Memory, MemoryHit, SourceType
from .scoring import score_memory
from .selector import rank_memories, select_context
from .service.memory_store import MemoryStore
from .tokens import tokenize

__all__ = [
    "JournalEntry",
    "Memory",
    "MemoryClient",
    "MemoryHit",
    "MemoryStore",
    "SourceType",
    "get_memory_client",
    "rank_memories",
    "score_memory",
    "select_context",
    "tokenize",
]
