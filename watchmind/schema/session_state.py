from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from watchmind.config import Settings
from watchmind.llm.base import ChatMessage


class Status(str, Enum):
    IDLE = "Idle"
    SENDING = "Sending"
    ERROR = "Error"


class SessionState(BaseModel):
    """Immutable snapshot of one conversation; transitions return a new value."""

    model_config = ConfigDict(frozen=True)

    settings: Settings = Field(default_factory=Settings)

    # Transcript in conversation order
    messages: tuple[ChatMessage, ...] = ()

    pending_input: str = ""
    status: Status = Status.IDLE
    status_detail: str = ""  # short diagnostic shown next to Error

    @computed_field  # type: ignore[prop-decorator]
    @property
    def can_send(self) -> bool:
        return bool(self.settings.api_key.strip()) and bool(self.pending_input.strip())

    @property
    def status_text(self) -> str:
        if self.status is Status.ERROR and self.status_detail:
            return f"{self.status.value}: {self.status_detail}"
        return self.status.value
