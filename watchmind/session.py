from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from watchmind.config import Settings, save_settings
from watchmind.errors import ChatRequestError, EmptyInput, MissingCredential, SettingsError
from watchmind.llm import ChatMessage, LLMClient, build_llm
from watchmind.schema import SessionState, Status


@dataclass(frozen=True)
class ChatOutcome:
    reply: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.reply is not None


def new_session(settings: Settings) -> SessionState:
    return SessionState(settings=settings)


def update_input(state: SessionState, text: str) -> SessionState:
    return state.model_copy(update={"pending_input": text})


def update_settings(
    state: SessionState,
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    model: str | None = None,
) -> SessionState:
    settings = state.settings.with_updates(api_key=api_key, base_url=base_url, model=model)
    return state.model_copy(update={"settings": settings})


def check_turn(text: str, api_key: str) -> str:
    """Return the trimmed turn text, or raise EmptyInput / MissingCredential."""
    trimmed = text.strip()
    if not trimmed:
        raise EmptyInput("Nothing to send")
    if not api_key.strip():
        raise MissingCredential("API key is not set")
    return trimmed


def append_user_turn(state: SessionState, text: str | None = None) -> SessionState:
    if text is None:
        text = state.pending_input
    try:
        trimmed = check_turn(text, state.settings.api_key)
    except EmptyInput:
        return state
    except MissingCredential as e:
        return state.model_copy(update={"status": Status.ERROR, "status_detail": str(e)})

    return state.model_copy(
        update={
            "messages": (*state.messages, ChatMessage("user", trimmed)),
            "pending_input": "",
            "status": Status.SENDING,
            "status_detail": "",
        }
    )


def request_reply(messages: Sequence[ChatMessage], model: str, llm: LLMClient) -> ChatOutcome:
    """Run one chat-completion call; network-originated errors become a diagnostic."""
    try:
        reply = llm.chat(list(messages), model=model)
    except ChatRequestError as e:
        return ChatOutcome(error=str(e) or type(e).__name__)
    return ChatOutcome(reply=reply)


def apply_outcome(state: SessionState, outcome: ChatOutcome) -> SessionState:
    # Messages and status change in one copy so readers never see them out of step.
    if outcome.ok:
        return state.model_copy(
            update={
                "messages": (*state.messages, ChatMessage("assistant", outcome.reply or "")),
                "status": Status.IDLE,
                "status_detail": "",
            }
        )
    return state.model_copy(update={"status": Status.ERROR, "status_detail": outcome.error or "Unknown error"})


def synchronize(state: SessionState, llm: LLMClient) -> SessionState:
    return apply_outcome(state, request_reply(state.messages, state.settings.model, llm))


class ChatSession:
    """
    Owns the current SessionState and runs at most one chat call on a worker thread.

    Every change goes through one transition applied under a lock and stored
    with a single assignment, so a render loop on another thread always reads
    a consistent snapshot and keystrokes made during a call are not lost.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        llm_factory: Callable[[Settings], LLMClient] = build_llm,
        prefs_path: Path | None = None,
        on_change: Callable[[SessionState], None] | None = None,
    ) -> None:
        self._state = new_session(settings)
        self._llm_factory = llm_factory
        self._prefs_path = prefs_path
        self._on_change = on_change
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="watchmind-chat")
        self._pending: Future[ChatOutcome] | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def _apply(self, transition: Callable[[SessionState], SessionState]) -> SessionState:
        with self._lock:
            state = transition(self._state)
            self._state = state
        if self._on_change is not None:
            self._on_change(state)
        return state

    def update_input(self, text: str) -> SessionState:
        return self._apply(lambda s: update_input(s, text))

    def update_settings(self, **changes: str | None) -> SessionState:
        return self._apply(lambda s: update_settings(s, **changes))

    def save_settings(self) -> Path:
        path = save_settings(self._state.settings, self._prefs_path)
        if not self.busy:
            self._apply(lambda s: s.model_copy(update={"status": Status.IDLE, "status_detail": ""}))
        return path

    def send(self, text: str | None = None) -> Future[ChatOutcome] | None:
        """Append a user turn and start the remote call; None when nothing was started."""
        # The busy check and the hand-off to the worker happen under one lock hold,
        # so concurrent callers cannot both start a call.
        with self._lock:
            if self.busy:
                return None
            state = self._apply(lambda s: append_user_turn(s, text))
            if state.status is not Status.SENDING:
                return None

            try:
                llm = self._llm_factory(state.settings)
            except SettingsError as e:
                self._apply(lambda s: apply_outcome(s, ChatOutcome(error=str(e))))
                return None
            fut = self._executor.submit(self._exchange, state.messages, state.settings.model, llm)
            self._pending = fut
            return fut

    def _exchange(self, messages: tuple[ChatMessage, ...], model: str, llm: LLMClient) -> ChatOutcome:
        try:
            outcome = request_reply(messages, model, llm)
        except Exception as e:
            # Anything unexpected still ends the turn in Error; the session stays usable.
            outcome = ChatOutcome(error=f"{type(e).__name__}: {e}")
        self._apply(lambda s: apply_outcome(s, outcome))
        return outcome

    def wait(self, timeout: float | None = None) -> SessionState:
        if self._pending is not None:
            self._pending.result(timeout=timeout)
        return self._state

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "ChatSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
