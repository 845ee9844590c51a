from __future__ import annotations

from collections.abc import Sequence

from .base import ChatMessage


class MockLLM:
    """Deterministic mock backend: useful to try the UI without a remote endpoint."""

    def __init__(self) -> None:
        self.calls: list[list[ChatMessage]] = []

    def chat(self, messages: Sequence[ChatMessage], *, model: str) -> str:
        self.calls.append(list(messages))
        last_user = next((m.content for m in reversed(messages) if m.role == "user"), "")
        return f"[mock:{model}] {last_user}"
