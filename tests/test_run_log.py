"""Tests for the JSONL run log."""
from watchmind.llm import ChatMessage
from watchmind.schema import SessionState, Status
from watchmind.utils.run_log import append_snapshot, init_run_log, make_run_id


class TestRunLog:
    """Snapshots are appended as one JSON object per line."""

    def test_append_and_read_back(self, tmp_path, settings, read_log):
        paths = init_run_log(tmp_path / "logs", make_run_id())
        state = SessionState(settings=settings, messages=(ChatMessage("user", "hi"),), status=Status.SENDING)

        append_snapshot(paths, state, extra={"event": "send"})
        append_snapshot(paths, state.model_copy(update={"status": Status.IDLE}), extra={"event": "reply"})

        events = read_log(paths.jsonl_path)
        assert [e["event"] for e in events] == ["send", "reply"]
        assert events[0]["run_id"] == paths.run_id
        assert events[0]["state"]["status"] == "Sending"
        assert events[0]["last_message"] == {"role": "user", "content": "hi"}
        assert paths.jsonl_path.name.startswith("chat_")

    def test_api_key_is_never_written(self, tmp_path, settings, read_log):
        paths = init_run_log(tmp_path, "run")
        append_snapshot(paths, SessionState(settings=settings))

        text = paths.jsonl_path.read_text(encoding="utf-8")
        assert settings.api_key not in text
        assert read_log(paths.jsonl_path)[0]["state"]["has_api_key"] is True
