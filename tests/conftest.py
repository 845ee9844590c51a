"""Pytest configuration and shared fixtures."""
import json

import httpx
import pytest

from watchmind.config import Settings
from watchmind.llm import ChatMessage, OpenAICompatLLM


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the developer's own keys, .env and prefs out of the tests."""
    for key in (
        "WATCHMIND_API_KEY",
        "OPENAI_API_KEY",
        "WATCHMIND_BASE_URL",
        "WATCHMIND_MODEL",
        "WATCHMIND_LLM_BACKEND",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("WATCHMIND_PREFS_PATH", str(tmp_path / "prefs.json"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings():
    """Settings with a usable key."""
    return Settings(api_key="sk-test", base_url="https://llm.example/v1/", model="gpt-test")


@pytest.fixture
def transcript():
    """A short conversation already in progress."""
    return (ChatMessage("user", "A"), ChatMessage("assistant", "B"))


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def make_llm(settings):
    """Build an OpenAICompatLLM whose HTTP traffic is served by `handler`."""

    def _make(handler):
        transport = RecordingTransport(handler)
        llm = OpenAICompatLLM(api_key=settings.api_key, base_url=settings.base_url, transport=transport)
        return llm, transport

    return _make


@pytest.fixture
def read_log():
    """Parse a JSONL run log into a list of events."""

    def _read(path):
        if not path.exists():
            return []
        return [json.loads(ln) for ln in path.read_text(encoding="utf-8").splitlines() if ln.strip()]

    return _read
