# src/keh_studio/cli/commands.py

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, cast

from ..core import records, session
from ..core.feedback import simulated_quota_error
from ..core.state import AppState
from ..security.elevation import ChallengeOutcome, SwitchResult

CommandEmitter = Callable[[str], None]
CommandReply = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandReply]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandReply]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /notes, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> CommandReply | None:
        """
        Handle a string like "/command args".
        Returns a reply (string or awaitable string) or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_value(raw: str) -> Any:
    """Interpret a console value as JSON when possible (numbers, true/false, null), else a string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _dotted_to_partial(path: str, value: Any) -> dict[str, Any] | None:
    """Turn colors.primaryAccent into {"colors": {"primaryAccent": value}}. None when the path names no key."""
    keys = [k for k in path.split(".") if k]
    if not keys:
        return None
    partial: dict[str, Any] = {}
    node = partial
    for key in keys[:-1]:
        node = node.setdefault(key, {})
    node[keys[-1]] = value
    return partial


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    user = session.current_user(state)
    settings = state.reconciler.current()
    return (
        "Status:\n"
        f"  Logged in: {'YES' if session.is_logged_in(state) else 'NO'}\n"
        f"  User: {user.get('name')} ({user.get('role')})\n"
        f"  Theme: {settings.get('themeMode')}\n"
        f"  Unread notifications: {state.notifications.unread_count()}\n"
        f"  Deadline monitor: {'running' if state.monitor.is_running else 'stopped'}"
    )


def cmd_login(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /login <userId>"
    intent = session.login(state, args[0])
    return f"Logged in as {args[0]}. Opening {intent.target_view}."


def cmd_logout(state: AppState, args: list[str]) -> str:
    session.logout(state)
    return "Logged out."


def cmd_notes(state: AppState, args: list[str]) -> str:
    items = state.notifications.list()
    if not items:
        return "No notifications."
    lines = [f"Notifications ({state.notifications.unread_count()} unread):"]
    for n in items[:20]:
        mark = " " if n.read else "*"
        lines.append(f" {mark} [{n.type.value}] {n.id} {n.title}: {n.message}")
    return "\n".join(lines)


def cmd_read(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /read <notificationId>"
    return "Marked as read." if state.notifications.mark_read(args[0]) else "No such notification."


def cmd_open(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /open <notificationId>"
    intent = state.notifications.view(args[0])
    if intent is None:
        return "Nothing to open for this notification."
    return f"-> {intent.target_view} {intent.target_record_id or ''}".rstrip()


def cmd_clear(state: AppState, args: list[str]) -> str:
    state.notifications.clear_all()
    return "Notifications cleared."


def cmd_switch(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /switch <userId>"
    result = session.switch_user(state, args[0])
    if result == SwitchResult.UNKNOWN_USER:
        return f"Unknown user: {args[0]}"
    if result == SwitchResult.CHALLENGE_REQUIRED:
        return "Admin PIN required. Use /pin <digits>, /confirm or /cancel."
    return f"Switched to {args[0]}."


async def cmd_pin(state: AppState, args: list[str]) -> str:
    if not state.gate.challenge.is_open:
        return "No PIN challenge is open."
    outcome = ChallengeOutcome.PENDING
    for ch in "".join(args):
        outcome = await state.gate.submit_digit(ch)
        if outcome != ChallengeOutcome.PENDING:
            break
    if outcome == ChallengeOutcome.VERIFIED:
        return "PIN accepted."
    if outcome == ChallengeOutcome.REJECTED:
        return state.gate.challenge.error_message or "Incorrect PIN"
    return f"PIN: {'*' * len(state.gate.challenge.input_digits)}"


def cmd_confirm(state: AppState, args: list[str]) -> str:
    outcome = state.gate.verify()
    if outcome == ChallengeOutcome.VERIFIED:
        return "PIN accepted."
    if outcome == ChallengeOutcome.REJECTED:
        return state.gate.challenge.error_message or "Incorrect PIN"
    return "No PIN challenge is open."


def cmd_cancel(state: AppState, args: list[str]) -> str:
    state.gate.cancel()
    return "Cancelled."


def cmd_theme(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Theme mode: {state.reconciler.current().get('themeMode')}. Use /theme light|dark."
    state.reconciler.update({"themeMode": args[0].lower()})
    return f"Theme mode set to {args[0].lower()}."


def cmd_set(state: AppState, args: list[str]) -> str:
    """
    /set colors.primaryAccent #ff0000
    /set layout.borderRadius 8
    """
    if len(args) < 2:
        return "Usage: /set <dotted.key> <value>"
    partial = _dotted_to_partial(args[0], _parse_value(" ".join(args[1:])))
    if partial is None:
        return "Usage: /set <dotted.key> <value>"
    state.reconciler.update(partial)
    return f"{args[0]} updated."


def cmd_themes(state: AppState, args: list[str]) -> str:
    sub = args[0].lower() if args else "list"
    if sub == "list":
        presets = state.reconciler.list_themes()
        if not presets:
            return "No saved themes."
        return "\n".join(f"  {t.id} {t.name} ({t.settings.get('themeMode', '?')})" for t in presets)
    if sub == "save" and len(args) > 1:
        preset = state.reconciler.save_theme(" ".join(args[1:]))
        return f"Saved theme {preset.id}."
    if sub == "delete" and len(args) > 1:
        return "Theme deleted." if state.reconciler.delete_theme(args[1]) else "No such theme."
    if sub == "apply" and len(args) > 1:
        return "Theme applied." if state.reconciler.apply_theme(args[1]) is not None else "No such theme."
    return "Usage: /themes list | save <name> | delete <id> | apply <id>"


def cmd_backup(state: AppState, args: list[str]) -> str:
    try:
        path = state.backups.export(args[0] if args else None)
    except Exception:
        return "Backup failed (see log)."
    return f"Backup written to {path}"


async def cmd_restore(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /restore <path>"
    result = await session.restore_file_async(state, " ".join(args))
    if result is None:
        return "Restore dropped: session changed."
    if not result.ok:
        return f"Restore failed: {result.error}"
    return f"Restored from backup version {result.from_version}."


def cmd_refresh(state: AppState, args: list[str]) -> str:
    session.refresh(state)
    return "Reloaded from storage."


def cmd_event(state: AppState, args: list[str]) -> str:
    sub = args[0].lower() if args else "list"
    if sub == "add" and len(args) > 1:
        event = records.add_event(state, name=" ".join(args[1:]))
        return f"Event {event['eventId']} created."
    if sub == "list":
        events = state.store.get("events") or []
        if not events:
            return "No events."
        return "\n".join(
            f"  {e.get('eventId')} {e.get('name')} [{e.get('status')}] tasks={len(e.get('tasks') or [])}"
            for e in events
        )
    if sub == "status" and len(args) > 2:
        ok = records.update_event(state, args[1], status=" ".join(args[2:]))
        return "Status updated." if ok else "No such event."
    if sub == "delete" and len(args) > 1:
        return "Event deleted." if records.delete_event(state, args[1]) else "No such event."
    return "Usage: /event list | add <name> | status <eventId> <status> | delete <eventId>"


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task add <eventId> <hoursFromNow> <description>
    /task done <eventId> <index>
    """
    if len(args) >= 4 and args[0].lower() == "add":
        try:
            hours = float(args[2])
        except ValueError:
            return "Hours must be a number."
        task = records.add_task(state, args[1], " ".join(args[3:]), state.clock() + timedelta(hours=hours))
        return "Task added." if task is not None else "No such event."
    if len(args) == 3 and args[0].lower() == "done":
        try:
            index = int(args[2])
        except ValueError:
            return "Index must be an integer."
        return "Task completed." if records.complete_task(state, args[1], index) else "No such task."
    return "Usage: /task add <eventId> <hours> <description> | /task done <eventId> <index>"


def cmd_rfq(state: AppState, args: list[str]) -> str:
    if len(args) > 1 and args[0].lower() == "add":
        rfq = records.add_rfq(state, client_name=" ".join(args[1:]))
        return f"RFQ {rfq['rfqId']} added."
    return "Usage: /rfq add <client name>"


def cmd_tick(state: AppState, args: list[str]) -> str:
    emitted = state.monitor.tick()
    return f"Deadline check done: {len(emitted)} new notification(s)."


def cmd_quota(state: AppState, args: list[str]) -> str:
    """Preview the quota-exceeded dialog."""
    state.feedback.error(simulated_quota_error())
    return "Quota error simulated."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session, theme and feed status.")
registry.register("login", cmd_login, help_text="Log in: /login <userId>.")
registry.register("logout", cmd_logout, help_text="Log out and stop the deadline monitor.")
registry.register("notes", cmd_notes, help_text="List notifications (newest first).", aliases=["n"])
registry.register("read", cmd_read, help_text="Mark a notification as read: /read <id>.")
registry.register("open", cmd_open, help_text="Follow a notification link: /open <id>.")
registry.register("clear", cmd_clear, help_text="Clear all notifications.")
registry.register("switch", cmd_switch, help_text="Switch identity: /switch <userId>.")
registry.register("pin", cmd_pin, help_text="Type PIN digits for an open challenge: /pin 1234.")
registry.register("confirm", cmd_confirm, help_text="Verify the PIN typed so far.")
registry.register("cancel", cmd_cancel, help_text="Cancel the PIN challenge.")
registry.register("theme", cmd_theme, help_text="Switch theme mode: /theme light | /theme dark.")
registry.register("set", cmd_set, help_text="Update one setting: /set <dotted.key> <value>.")
registry.register("themes", cmd_themes, help_text="Theme presets: list | save | delete | apply.")
registry.register("backup", cmd_backup, help_text="Export a backup file: /backup [dir].")
registry.register("restore", cmd_restore, help_text="Restore from a backup file: /restore <path>.")
registry.register("refresh", cmd_refresh, help_text="Reload state from storage.")
registry.register("event", cmd_event, help_text="Events: list | add | status | delete.")
registry.register("task", cmd_task, help_text="Event tasks: add | done.")
registry.register("rfq", cmd_rfq, help_text="RFQs: /rfq add <client name>.")
registry.register("tick", cmd_tick, help_text="Run one deadline check now.")
registry.register("quota", cmd_quota, help_text="Simulate an AI quota error (preview).")
