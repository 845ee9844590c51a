from .session_state import SessionState, Status

__all__ = ["SessionState", "Status"]
