from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from watchmind.schema import SessionState


@dataclass(frozen=True)
class RunLogPaths:
    run_id: str
    jsonl_path: Path


def make_run_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def init_run_log(log_dir: Path, run_id: str) -> RunLogPaths:
    log_dir.mkdir(parents=True, exist_ok=True)
    return RunLogPaths(run_id=run_id, jsonl_path=log_dir / f"chat_{run_id}.jsonl")


def snapshot(state: SessionState) -> dict[str, Any]:
    """JSON-safe view of a session; the API key never leaves memory."""
    return {
        "base_url": state.settings.base_url,
        "model": state.settings.model,
        "has_api_key": bool(state.settings.api_key.strip()),
        "status": state.status.value,
        "status_detail": state.status_detail,
        "messages": [m.to_payload() for m in state.messages],
    }


def append_snapshot(
    paths: RunLogPaths,
    state: SessionState,
    *,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "run_id": paths.run_id,
        "state": snapshot(state),
    }
    if state.messages:
        payload["last_message"] = state.messages[-1].to_payload()
    if extra:
        payload.update(extra)
    with paths.jsonl_path.open("a", encoding="utf-8", newline="\n") as f:
        f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    return payload
