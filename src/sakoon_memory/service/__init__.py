from .memory_store import MemoryStore, day_bounds

__all__ = ["MemoryStore", "day_bounds"]
