from .base import ChatMessage, LLMClient
from .factory import build_llm
from .openai_compat import OpenAICompatLLM

__all__ = ["ChatMessage", "LLMClient", "OpenAICompatLLM", "build_llm"]
