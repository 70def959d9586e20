from __future__ import annotations

import logging
import os
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from google import genai

from ..config import EmbeddingConfig
from .base import EmbeddingBase

load_dotenv()

logger = logging.getLogger(__name__)


class GeminiEmbedding(EmbeddingBase):
    """Embedding backend that calls the Gemini embedding API.

    - Defaults the model to `text-embedding-004` (768 dimensions).
    - Blank input is never sent; it yields None.
    - API failures are logged and yield None so the caller can store the
      memory without a vector.
    """

    def __init__(
        self,
        config: Optional[EmbeddingConfig] = None,
        api_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        super().__init__(config)
        self.api_key = api_key or os.getenv("GOOGLE_API_KEY") or os.getenv(
            "GEMINI_API_KEY",
            "",
        )
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def embed(
        self,
        text: str,
        memory_action: Optional[Literal["add", "search"]] = None,
    ) -> Optional[list[float]]:
        if not isinstance(text, str) or not text.strip():
            return None
        try:
            response = self._get_client().models.embed_content(
                model=self.config.model,
                contents=text.strip(),
            )
        except Exception as e:
            logger.warning("Embedding generation failed (%s): %s", memory_action, e)
            return None
        embeddings = getattr(response, "embeddings", None) or []
        if not embeddings or not embeddings[0].values:
            return None
        return list(embeddings[0].values)
