from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from watchmind.config import load_settings
from watchmind.errors import SettingsError
from watchmind.schema import SessionState, Status
from watchmind.session import ChatSession
from watchmind.utils.run_log import RunLogPaths, append_snapshot, init_run_log, make_run_id


def _print_turn(console: Console, state: SessionState) -> None:
    if state.status is Status.ERROR:
        console.print(f"[bold red]{escape(state.status_text)}[/bold red]")
        return
    last = state.messages[-1] if state.messages else None
    if last is not None and last.role == "assistant":
        console.print(f"[bold green]Assistant[/bold green]: {escape(last.content)}")


def chat_loop(session: ChatSession, console: Console, log_paths: RunLogPaths | None = None, *, read=input) -> int:
    console.print("Type a message, [bold]/settings[/bold] to show settings, [bold]/quit[/bold] to exit.")
    while True:
        try:
            line = read("You: ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            return 0
        cmd = line.strip()
        if cmd in ("/quit", "/exit"):
            return 0
        if cmd == "/settings":
            s = session.state.settings
            console.print(escape(f"base_url={s.base_url} model={s.model} api_key={s.masked_key()}"))
            continue

        if not cmd:
            continue

        before = session.state
        fut = session.send(line)
        if fut is None:
            # Only report an Error this send produced, not one left over from an earlier turn.
            if session.state is not before and session.state.status is Status.ERROR:
                _print_turn(console, session.state)
            continue
        if log_paths is not None:
            append_snapshot(log_paths, session.state, extra={"event": "send"})
        with console.status("Sending…"):
            state = session.wait()
        if log_paths is not None:
            event = "error" if state.status is Status.ERROR else "reply"
            append_snapshot(log_paths, state, extra={"event": event})
        _print_turn(console, state)


def main() -> int:
    parser = argparse.ArgumentParser(prog="watchmind")
    parser.add_argument("--api-key", default=None, help="Bearer token for the chat endpoint")
    parser.add_argument("--base-url", default=None, help="OpenAI-compatible base URL, e.g. https://api.openai.com/v1")
    parser.add_argument("--model", default=None, help="Model name sent with every request")
    parser.add_argument("--prefs", type=Path, default=None, help="Prefs file (default: ~/.watchmind/prefs.json)")
    parser.add_argument("--save", action="store_true", help="Persist the resulting settings before chatting")
    parser.add_argument("--log-dir", type=Path, default=Path("logs"), help="Where chat_*.jsonl run logs go")
    parser.add_argument("--no-log", action="store_true", help="Do not write a run log")
    args = parser.parse_args()

    console = Console()
    try:
        settings = load_settings(args.prefs)
    except SettingsError as e:
        console.print(f"[bold red]{e}[/bold red]")
        return 2
    settings = settings.with_updates(api_key=args.api_key, base_url=args.base_url, model=args.model)

    log_paths = None if args.no_log else init_run_log(args.log_dir, make_run_id())

    with ChatSession(settings, prefs_path=args.prefs) as session:
        if args.save:
            path = session.save_settings()
            console.print(f"[bold]saved[/bold]: {path}")
        console.rule("WatchMind")
        console.print(f"[bold]model[/bold]: {settings.model}  [bold]endpoint[/bold]: {settings.base_url}")
        if log_paths is not None:
            append_snapshot(log_paths, session.state, extra={"event": "start"})
            console.print(f"[bold]run_log[/bold]: {log_paths.jsonl_path}")
        if not settings.api_key.strip():
            console.print("[yellow]No API key configured; pass --api-key or set WATCHMIND_API_KEY.[/yellow]")
        return chat_loop(session, console, log_paths)


if __name__ == "__main__":
    sys.exit(main())
