from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

from watchmind.errors import SettingsError

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"

PREF_KEYS = ("api_key", "base_url", "model")


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL

    def with_updates(self, **changes: str | None) -> "Settings":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def masked_key(self) -> str:
        if not self.api_key:
            return "<unset>"
        return self.api_key[:3] + "…" + self.api_key[-4:] if len(self.api_key) > 8 else "****"


def _getenv(key: str, default: str | None = None) -> str | None:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    return v


def prefs_path() -> Path:
    raw = _getenv("WATCHMIND_PREFS_PATH")
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".watchmind" / "prefs.json"


def llm_backend() -> str:
    load_dotenv(override=False)
    return (_getenv("WATCHMIND_LLM_BACKEND", "openai") or "openai").strip().lower()


def read_prefs(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise SettingsError(f"Cannot read prefs file {path}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"Prefs file {path} must hold a JSON object")
    # Only the three known string keys are honoured; anything else is ignored.
    return {k: v for k, v in data.items() if k in PREF_KEYS and isinstance(v, str)}


def load_settings(path: Path | None = None) -> Settings:
    """
    Resolve settings for a new session.

    Stored prefs win, then environment (a local `.env` is loaded first), then defaults.
    """
    load_dotenv(override=False)
    stored = read_prefs(path or prefs_path())

    api_key = stored.get("api_key")
    if api_key is None:
        api_key = _getenv("WATCHMIND_API_KEY") or _getenv("OPENAI_API_KEY", "") or ""
    base_url = stored.get("base_url")
    if base_url is None:
        base_url = _getenv("WATCHMIND_BASE_URL", DEFAULT_BASE_URL) or DEFAULT_BASE_URL
    model = stored.get("model")
    if model is None:
        model = _getenv("WATCHMIND_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL

    return Settings(api_key=api_key, base_url=base_url, model=model)


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    p = path or prefs_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(json.dumps(asdict(settings), ensure_ascii=False, indent=2), encoding="utf-8", newline="\n")
    tmp.replace(p)
    return p
