"""Google Gemini LLM provider implementation."""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv
from google import genai
from google.genai import types as genai_types

from ..models import Message
from .base import LLMProvider

load_dotenv()


class GeminiProvider(LLMProvider):
    """Gemini provider using the google-genai SDK."""

    def __init__(
        self,
        default_model: str = "gemini-2.5-flash",
        api_key: str | None = None,
    ) -> None:
        self.default_model = default_model
        self.api_key = api_key or os.getenv("GOOGLE_API_KEY") or os.getenv(
            "GEMINI_API_KEY",
            "",
        )
        self._client: Any | None = None

    def _get_client(self) -> Any:
        if not self._client:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @staticmethod
    def _to_gemini_contents(
        messages: list[Message],
    ) -> tuple[list[genai_types.Content], str | None]:
        """Convert internal Message objects into Gemini contents and system instruction."""
        contents: list[genai_types.Content] = []
        system_instruction: str | None = None

        for m in messages:
            if m.role == "system":
                system_instruction = (m.content or "").strip() or system_instruction
                continue
            role = "model" if m.role in ("assistant", "model") else "user"
            if m.content:
                contents.append(
                    genai_types.Content(role=role, parts=[genai_types.Part(text=m.content)])
                )

        return contents, system_instruction

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Non-streaming chat using Gemini generate_content."""
        client = self._get_client()
        contents, system_instruction = self._to_gemini_contents(messages)

        config_args: dict[str, Any] = {}
        if system_instruction:
            config_args["system_instruction"] = system_instruction
        if kwargs.get("temperature") is not None:
            config_args["temperature"] = kwargs["temperature"]
        if kwargs.get("max_tokens") is not None:
            config_args["max_output_tokens"] = kwargs["max_tokens"]

        resp = await client.aio.models.generate_content(
            model=model or self.default_model,
            contents=contents,
            config=genai_types.GenerateContentConfig(**config_args),
        )
        return resp.text or ""
