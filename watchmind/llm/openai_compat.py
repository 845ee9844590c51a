from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from watchmind.errors import ProtocolFailure, TransportFailure

from .base import ChatMessage


class OpenAICompatLLM:
    """
    Minimal OpenAI-compatible ChatCompletions client via raw HTTP.
    Works with OpenAI or any OpenAI-compatible gateway if you point base_url accordingly.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout_s: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.transport = transport

    def build_payload(self, messages: Sequence[ChatMessage], *, model: str) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [m.to_payload() for m in messages],
        }

    def chat(self, messages: Sequence[ChatMessage], *, model: str) -> str:
        url = f"{self.base_url}/chat/completions"
        payload = self.build_payload(messages, model=model)
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self.transport) as client:
                r = client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise TransportFailure(str(e) or type(e).__name__) from e

        if not r.is_success:
            raise ProtocolFailure(f"HTTP {r.status_code}", status_code=r.status_code)
        if not r.content:
            raise ProtocolFailure("Empty response", status_code=r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            raise ProtocolFailure("Malformed response", status_code=r.status_code) from e
        return extract_reply(data, status_code=r.status_code)


def extract_reply(data: Any, *, status_code: int | None = None) -> str:
    # OpenAI returns: choices[0].message.content
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ProtocolFailure("Malformed response", status_code=status_code) from e
    if not isinstance(content, str):
        raise ProtocolFailure("Malformed response", status_code=status_code)
    return content.strip()
