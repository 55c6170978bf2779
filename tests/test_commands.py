# tests/test_commands.py

from __future__ import annotations

import inspect

import pytest

from keh_studio.cli.commands import CommandRegistry, registry


async def _run(state, line: str) -> str | None:
    reply = registry.handle(state, line)
    if inspect.isawaitable(reply):
        reply = await reply
    return reply


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    notes: list[str] = []
    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/BEE y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_help_lists_registered_commands(state) -> None:
    text = registry.handle(state, "/help")
    assert isinstance(text, str)
    for name in ("/status", "/switch", "/backup", "/restore", "/themes"):
        assert name in text


@pytest.mark.asyncio
async def test_switch_and_pin_flow(state) -> None:
    await _run(state, "/switch u2")
    assert state.store.get("currentUserId") == "u2"

    assert "PIN required" in (await _run(state, "/switch u1") or "")
    assert await _run(state, "/pin 0000") == "Incorrect PIN"
    assert await _run(state, "/pin 1234") == "PIN accepted."
    assert state.store.get("currentUserId") == "u1"
    assert "No PIN challenge" in (await _run(state, "/pin 1") or "")


@pytest.mark.asyncio
async def test_event_task_and_tick(state) -> None:
    reply = await _run(state, "/event add Annual Gala")
    assert reply is not None and reply.startswith("Event e")
    event_id = state.store.get("events")[0]["eventId"]

    assert await _run(state, f"/task add {event_id} -1 Book venue") == "Task added."
    assert await _run(state, "/tick") == "Deadline check done: 1 new notification(s)."
    assert state.notifications.list()[0].title == "Task Overdue"
    assert await _run(state, f"/task done {event_id} 0") == "Task completed."


@pytest.mark.asyncio
async def test_notes_read_open_clear(state) -> None:
    await _run(state, "/event add Gala")
    n = state.notifications.list()[0]

    assert n.id in (await _run(state, "/notes") or "")
    assert await _run(state, f"/open {n.id}") == f"-> EventDetail {n.link.split(':', 1)[1]}"
    assert await _run(state, f"/read {n.id}") == "Marked as read."
    assert state.notifications.unread_count() == 0
    assert await _run(state, "/clear") == "Notifications cleared."
    assert await _run(state, "/notes") == "No notifications."


@pytest.mark.asyncio
async def test_theme_and_set(state) -> None:
    assert await _run(state, "/theme light") == "Theme mode set to light."
    assert await _run(state, "/set layout.borderRadius 8") == "layout.borderRadius updated."

    settings = state.reconciler.current()
    assert settings["themeMode"] == "light"
    assert settings["layout"]["borderRadius"] == 8
    assert settings["colors"]["background"] == "#f8fafc"


@pytest.mark.asyncio
async def test_backup_and_restore_commands(state, tmp_path) -> None:
    reply = await _run(state, f"/backup {tmp_path}")
    assert reply is not None and reply.startswith("Backup written to ")
    path = reply.removeprefix("Backup written to ")

    state.store.update_fields(currentUserId="u2")
    assert await _run(state, f"/restore {path}") == "Restored from backup version 3."
    assert state.store.get("currentUserId") == "u1"


@pytest.mark.asyncio
async def test_quota_preview_routes_to_quota_slot(state) -> None:
    await _run(state, "/quota")
    assert state.feedback.quota_error is not None
    assert state.feedback.quota_error.is_hard_limit is True
    assert state.feedback.error_message is None


def test_set_with_empty_key_path_returns_usage(state) -> None:
    before = state.reconciler.current()
    assert registry.handle(state, "/set . 1") == "Usage: /set <dotted.key> <value>"
    assert registry.handle(state, "/set ... 1") == "Usage: /set <dotted.key> <value>"
    assert state.reconciler.current() == before
