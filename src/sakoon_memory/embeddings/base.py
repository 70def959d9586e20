from abc import ABC, abstractmethod
from typing import Literal, Optional

from ..config import EmbeddingConfig


class EmbeddingBase(ABC):
    """Base class for embedding backends used by semantic recall."""

    def __init__(self, config: Optional[EmbeddingConfig] = None) -> None:
        self.config = config or EmbeddingConfig()

    @abstractmethod
    def embed(
        self,
        text: str,
        memory_action: Optional[Literal["add", "search"]] = None,
    ) -> Optional[list[float]]:
        """Return an embedding vector for the given text, or None if it cannot be embedded."""
        raise NotImplementedError
