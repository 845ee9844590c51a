from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str

    def to_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class LLMClient(Protocol):
    def chat(self, messages: Sequence[ChatMessage], *, model: str) -> str:
        """Return the assistant reply, or raise ChatRequestError."""
        raise NotImplementedError
