from __future__ import annotations


class WatchMindError(Exception):
    """Base class for every error raised by watchmind."""


class EmptyInput(WatchMindError):
    pass


class MissingCredential(WatchMindError):
    pass


class SettingsError(WatchMindError):
    pass


class ChatRequestError(WatchMindError):
    """A chat-completion call did not produce a reply."""


class TransportFailure(ChatRequestError):
    pass


class ProtocolFailure(ChatRequestError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
