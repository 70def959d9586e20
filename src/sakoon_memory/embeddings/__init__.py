from .base import EmbeddingBase
from .gemini import GeminiEmbedding

__all__ = ["EmbeddingBase", "GeminiEmbedding"]
