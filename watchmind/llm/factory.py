from __future__ import annotations

from watchmind.config import Settings, llm_backend
from watchmind.errors import SettingsError

from .base import LLMClient
from .mock import MockLLM
from .openai_compat import OpenAICompatLLM


def build_llm(settings: Settings, backend: str | None = None) -> LLMClient:
    """Build a client for the current settings; called per request so edits take effect."""
    backend = backend or llm_backend()
    if backend == "mock":
        return MockLLM()
    if backend == "openai":
        return OpenAICompatLLM(api_key=settings.api_key, base_url=settings.base_url)
    raise SettingsError(f"Unknown WATCHMIND_LLM_BACKEND={backend!r}, expected: openai|mock")
