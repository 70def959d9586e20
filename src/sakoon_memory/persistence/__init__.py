from .base import MemoryBackend
from .in_memory import InMemoryBackend
from .sqlite import SQLiteMemoryBackend

__all__ = ["MemoryBackend", "InMemoryBackend", "SQLiteMemoryBackend"]
