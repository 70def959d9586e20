from __future__ import annotations

from typing import Any, Tuple

from .config import DEFAULT_LLM_CORE_CONFIG, LLMCoreConfig
from .models import Message
from .providers import GeminiProvider, LLMProvider

_provider_cache: dict[str, LLMProvider] = {}


def _get_provider_for_model(model: str | None, config: LLMCoreConfig) -> Tuple[LLMProvider, str]:
    """
    Resolve provider and underlying model name from a model string.

    Expected formats:
    - "provider:model_name" (e.g. "gemini:gemini-2.5-flash")
    - "model_name" (no colon) → treated as a Gemini model.
    """
    effective_model = model or config.model
    if ":" in effective_model:
        provider_name, raw_model = effective_model.split(":", 1)
        provider_name = provider_name.strip().lower()
        model_name = raw_model.strip()
    else:
        provider_name = "gemini"
        model_name = effective_model.strip()

    if provider_name not in ("gemini", "google"):
        raise ValueError(f"Unsupported LLM provider: {provider_name}")
    if not model_name:
        raise ValueError(f"Model name missing in {effective_model!r}")

    if "gemini" not in _provider_cache:
        _provider_cache["gemini"] = GeminiProvider(default_model=model_name)
    return _provider_cache["gemini"], model_name


async def chat(
    messages: list[Message],
    *,
    model: str | None = None,
    config: LLMCoreConfig | None = None,
    provider: LLMProvider | None = None,
    **kwargs: Any,
) -> str:
    """Non-streaming chat helper. Uses explicit provider if given, otherwise infers from model."""
    cfg = config or DEFAULT_LLM_CORE_CONFIG
    if provider is not None:
        if model and ":" in model:
            model = model.split(":", 1)[1].strip() or None
        return await provider.chat(messages, model=model, **kwargs)
    resolved, resolved_model = _get_provider_for_model(model, cfg)
    return await resolved.chat(messages, model=resolved_model, **kwargs)
