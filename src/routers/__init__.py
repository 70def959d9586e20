from .chat import router as chat_router
from .journals import router as journals_router
from .memories import router as memories_router

__all__ = ["chat_router", "journals_router", "memories_router"]
