# src/keh_studio/notifications/monitor.py

"""
Deadline monitor.

A small polling loop that, every interval_seconds:
- scans tasks of every active event (status not Completed/Canceled),
- emits "Task Overdue" / "Task Due Soon" notifications,
- occasionally emits a synthetic business event to keep the feed alive.

The check is level-triggered: every tick re-evaluates the whole state. The
only record of "already notified" is a matching entry in the notification
feed, so once that entry falls off the capped feed the task may be reported
again.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from ..core.clock import parse_iso, utc_now
from ..core.ports import AppDocument, Clock, RandomSource
from ..storage.adapter import StateStoreAdapter
from .engine import NotificationEngine
from .models import Notification, NotificationType, event_link

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"Completed", "Canceled"})
DUE_SOON_HOURS = 24.0


class DeadlineKind(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"


@dataclass(slots=True, frozen=True)
class DeadlineAlert:
    record_id: str
    record_name: str
    description: str
    hours_left: float
    kind: DeadlineKind

    @property
    def link(self) -> str:
        return event_link(self.record_id)

    @property
    def title(self) -> str:
        return "Task Overdue" if self.kind == DeadlineKind.OVERDUE else "Task Due Soon"

    @property
    def message(self) -> str:
        if self.kind == DeadlineKind.OVERDUE:
            return f'Task "{self.description}" for {self.record_name} is overdue!'
        return f'Task "{self.description}" for {self.record_name} is due in less than 24 hours.'

    @property
    def type(self) -> NotificationType:
        return NotificationType.ERROR if self.kind == DeadlineKind.OVERDUE else NotificationType.WARNING


@dataclass(slots=True, frozen=True)
class SyntheticEvent:
    title: str
    message: str
    type: NotificationType


SYNTHETIC_EVENTS: tuple[SyntheticEvent, ...] = (
    SyntheticEvent(
        "New RFQ Received",
        "A new request for quote from TechCorp Inc. has arrived.",
        NotificationType.INFO,
    ),
    SyntheticEvent(
        "Payment Confirmed",
        "Payment of SAR 15,000 received for 'Aramco Annual Gala'.",
        NotificationType.SUCCESS,
    ),
    SyntheticEvent(
        "System Update",
        "System maintenance scheduled for Sunday at 2:00 AM.",
        NotificationType.INFO,
    ),
)


def classify_deadline(hours_left: float) -> DeadlineKind | None:
    if hours_left < 0:
        return DeadlineKind.OVERDUE
    if hours_left < DUE_SOON_HOURS:
        return DeadlineKind.DUE_SOON
    return None


def iter_open_tasks(document: Mapping[str, Any]) -> Iterator[tuple[Mapping[str, Any], Mapping[str, Any]]]:
    """Yield (event, task) for unfinished tasks with a due date on active events."""
    for event in document.get("events") or []:
        if not isinstance(event, Mapping) or event.get("status") in TERMINAL_STATUSES:
            continue
        for task in event.get("tasks") or []:
            if not isinstance(task, Mapping):
                continue
            if task.get("isCompleted") or not task.get("dueDate"):
                continue
            yield event, task


def already_notified(notifications: list[Notification], record_id: str, description: str) -> bool:
    link = event_link(record_id)
    return any(n.link == link and description in n.message for n in notifications)


def find_deadline_alerts(
    document: Mapping[str, Any],
    now: datetime,
    notifications: list[Notification] | None = None,
) -> list[DeadlineAlert]:
    """Pure scan: every alert the state warrants right now, minus those already in the feed."""
    notifications = notifications or []
    alerts: list[DeadlineAlert] = []
    for event, task in iter_open_tasks(document):
        due = parse_iso(task.get("dueDate"))
        if due is None:
            logger.debug("Skipping task with unparsable dueDate=%r", task.get("dueDate"))
            continue

        record_id = str(event.get("eventId", ""))
        description = str(task.get("description", ""))
        if already_notified(notifications, record_id, description):
            continue

        hours_left = (due - now).total_seconds() / 3600.0
        kind = classify_deadline(hours_left)
        if kind is None:
            continue
        alerts.append(
            DeadlineAlert(
                record_id=record_id,
                record_name=str(event.get("name", "")),
                description=description,
                hours_left=hours_left,
                kind=kind,
            )
        )
    return alerts


class DeadlineMonitor:
    """
    Recurring deadline scan with an explicit start/stop pair.

    start() needs a running event loop; stop() cancels the loop task. The
    session owns both calls (login/logout).
    """

    def __init__(
        self,
        store: StateStoreAdapter,
        engine: NotificationEngine,
        *,
        interval_seconds: float = 60.0,
        synthetic_events_enabled: bool = True,
        synthetic_probability: float = 0.10,
        rng: RandomSource | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._engine = engine
        self._interval = max(0.01, float(interval_seconds))
        self._synthetic_enabled = bool(synthetic_events_enabled)
        self._synthetic_probability = float(synthetic_probability)
        self._rng = rng or random.Random()
        self._clock = clock
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def maybe_emit_synthetic(self) -> Notification | None:
        if not self._synthetic_enabled or self._rng.random() >= self._synthetic_probability:
            return None
        event: SyntheticEvent = self._rng.choice(SYNTHETIC_EVENTS)
        return self._engine.add(event.title, event.message, event.type)

    def check_deadlines(self) -> list[Notification]:
        document: AppDocument = self._store.read()
        now = self._clock()
        emitted: list[Notification] = []

        # Re-read the feed per alert: an emission earlier in this tick counts as "already notified".
        for alert in find_deadline_alerts(document, now, self._engine.list()):
            if already_notified(self._engine.list(), alert.record_id, alert.description):
                continue
            added = self._engine.add(alert.title, alert.message, alert.type, link=alert.link)
            if added is not None:
                emitted.append(added)
        return emitted

    def tick(self) -> list[Notification]:
        """One scan. Returns the notifications actually added."""
        emitted: list[Notification] = []
        synthetic = self.maybe_emit_synthetic()
        if synthetic is not None:
            emitted.append(synthetic)
        emitted.extend(self.check_deadlines())
        if emitted:
            logger.info("Deadline monitor emitted %d notification(s)", len(emitted))
        return emitted

    async def run(self) -> None:
        """
        Poll forever: sleep one interval, then tick.

        A failing tick is logged and the loop keeps going.
        To stop the monitor, cancel the coroutine/task (or call stop()).
        """
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.tick()
            except Exception:
                logger.exception("Deadline monitor tick failed")

    def start(self) -> asyncio.Task[None] | None:
        if self.is_running:
            return self._task
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Deadline monitor not started: no running event loop")
            return None
        self._task = loop.create_task(self.run(), name="deadline-monitor")
        logger.info("Deadline monitor started (interval=%.1fs)", self._interval)
        return self._task

    def stop(self) -> None:
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
            logger.info("Deadline monitor stopped")
        self._task = None
