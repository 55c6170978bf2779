# src/keh_studio/connectors/console_connector.py

from __future__ import annotations

import asyncio
import inspect
import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except Exception:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _flush_feedback(state: AppState) -> None:
    """Print pending banners once, then dismiss them."""
    fb = state.feedback
    if fb.success_message:
        _print_ts(f"[OK] {fb.success_message}")
    if fb.error_message:
        _print_ts(f"[ERROR] {fb.error_message}")
    if fb.quota_error is not None:
        q = fb.quota_error
        _print_ts(f"[QUOTA] {q.message}")
        if q.details_text:
            _print_ts(f"        {q.details_text}")
        if q.action_hint:
            _print_ts(f"        {q.action_hint}")
    fb.dismiss()


def _announce_new_notifications(state: AppState, seen: set[str]) -> None:
    # Oldest first so the console reads chronologically.
    for n in reversed(state.notifications.list()):
        if n.id in seen:
            continue
        seen.add(n.id)
        if not n.read:
            _print_ts(f"[{n.type.value.upper()}] {n.title}: {n.message}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (user=%s).", state.store.get("currentUserId"))
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    app_name = str(getattr(getattr(state, "settings", None), "app_name", "keh"))
    seen = {n.id for n in state.notifications.list()}

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, f"{app_name}> ")).strip()
            _rewrite_prev_line(f"[{_ts_local()}] {app_name}> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        _announce_new_notifications(state, seen)

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = command_registry.handle(state, user_input, emit=emit)
            if inspect.isawaitable(response):
                response = await response
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list them."

        _print_ts(str(response))
        _flush_feedback(state)
        _announce_new_notifications(state, seen)

    logger.info("Console connector finished.")
