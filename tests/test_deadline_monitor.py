# tests/test_deadline_monitor.py

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from keh_studio.core.clock import format_iso
from keh_studio.notifications.engine import NotificationEngine
from keh_studio.notifications.models import NotificationType
from keh_studio.notifications.monitor import (
    SYNTHETIC_EVENTS,
    DeadlineKind,
    DeadlineMonitor,
    classify_deadline,
    find_deadline_alerts,
)

from .fakes import FakeRandom


def _seed_event(store, clock, *, hours: float, status: str = "Planning", completed: bool = False) -> None:
    event = {
        "eventId": "e1",
        "name": "Gala",
        "status": status,
        "tasks": [
            {
                "description": "Book venue",
                "dueDate": format_iso(clock() + timedelta(hours=hours)),
                "isCompleted": completed,
            }
        ],
    }
    store.mutate(lambda doc: {**doc, "events": [event]})


def _monitor(store, clock, sound, rng=None, **kwargs) -> tuple[DeadlineMonitor, NotificationEngine]:
    engine = NotificationEngine(store, sound=sound, clock=clock)
    monitor = DeadlineMonitor(
        store,
        engine,
        interval_seconds=0.01,
        synthetic_events_enabled=kwargs.pop("synthetic", False),
        rng=rng or FakeRandom(),
        clock=clock,
        **kwargs,
    )
    return monitor, engine


def test_classify_deadline_boundaries() -> None:
    assert classify_deadline(-0.01) == DeadlineKind.OVERDUE
    assert classify_deadline(0) == DeadlineKind.DUE_SOON
    assert classify_deadline(23.99) == DeadlineKind.DUE_SOON
    assert classify_deadline(24) is None


def test_due_soon_task_is_reported_once(store, clock, sound) -> None:
    _seed_event(store, clock, hours=2)
    monitor, engine = _monitor(store, clock, sound)

    emitted = monitor.tick()
    assert len(emitted) == 1
    n = emitted[0]
    assert n.title == "Task Due Soon"
    assert n.message == 'Task "Book venue" for Gala is due in less than 24 hours.'
    assert n.type == NotificationType.WARNING
    assert n.link == "event:e1"

    # Level-triggered, but the feed entry marks it as already notified.
    clock.advance(3600)
    assert monitor.tick() == []
    assert len(engine.list()) == 1


def test_overdue_task_is_an_error(store, clock, sound) -> None:
    _seed_event(store, clock, hours=-1)
    monitor, _ = _monitor(store, clock, sound)

    emitted = monitor.tick()
    assert [n.title for n in emitted] == ["Task Overdue"]
    assert emitted[0].message == 'Task "Book venue" for Gala is overdue!'
    assert emitted[0].type == NotificationType.ERROR
    assert sound.cues() == ["error"]


@pytest.mark.parametrize("status", ["Completed", "Canceled"])
def test_terminal_events_are_skipped(store, clock, sound, status) -> None:
    _seed_event(store, clock, hours=-5, status=status)
    monitor, _ = _monitor(store, clock, sound)
    assert monitor.tick() == []


def test_completed_and_far_tasks_are_skipped(store, clock, sound) -> None:
    _seed_event(store, clock, hours=-5, completed=True)
    monitor, _ = _monitor(store, clock, sound)
    assert monitor.tick() == []

    _seed_event(store, clock, hours=48)
    assert monitor.tick() == []


def test_task_is_reported_again_after_feed_is_cleared(store, clock, sound) -> None:
    _seed_event(store, clock, hours=-1)
    monitor, engine = _monitor(store, clock, sound)

    assert len(monitor.tick()) == 1
    engine.clear_all()
    clock.advance(60)
    assert len(monitor.tick()) == 1


def test_unparsable_due_date_is_ignored(store, clock) -> None:
    doc = {
        "events": [
            {"eventId": "e1", "name": "X", "status": "Planning", "tasks": [{"description": "d", "dueDate": "soon"}]}
        ]
    }
    assert find_deadline_alerts(doc, clock()) == []


def test_synthetic_event_fires_below_probability(store, clock, sound) -> None:
    monitor, engine = _monitor(store, clock, sound, rng=FakeRandom(value=0.05, pick=1), synthetic=True)

    emitted = monitor.tick()
    assert [n.title for n in emitted] == [SYNTHETIC_EVENTS[1].title]
    assert engine.list()[0].type == NotificationType.SUCCESS


def test_synthetic_event_skipped_above_probability(store, clock, sound) -> None:
    monitor, _ = _monitor(store, clock, sound, rng=FakeRandom(value=0.5), synthetic=True)
    assert monitor.tick() == []


def test_start_without_running_loop_is_a_noop(store, clock, sound) -> None:
    monitor, _ = _monitor(store, clock, sound)
    assert monitor.start() is None
    assert monitor.is_running is False


@pytest.mark.asyncio
async def test_run_loop_ticks_until_stopped(store, clock, sound) -> None:
    _seed_event(store, clock, hours=1)
    monitor, engine = _monitor(store, clock, sound)

    task = monitor.start()
    assert task is not None
    assert monitor.start() is task
    assert monitor.is_running

    await asyncio.sleep(0.05)
    monitor.stop()
    assert monitor.is_running is False

    with pytest.raises(asyncio.CancelledError):
        await task

    assert [n.title for n in engine.list()] == ["Task Due Soon"]


@pytest.mark.asyncio
async def test_failing_tick_does_not_kill_the_loop(store, clock, sound, monkeypatch) -> None:
    monitor, _ = _monitor(store, clock, sound)
    calls = {"n": 0}

    def boom() -> list:
        calls["n"] += 1
        raise RuntimeError("tick failed")

    monkeypatch.setattr(monitor, "tick", boom)
    task = monitor.start()
    await asyncio.sleep(0.05)
    monitor.stop()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert calls["n"] >= 2
