# src/keh_studio/core/records.py

"""
Event and RFQ mutations used by the presentation layer.

Only identifiers and timestamps are stamped here; field validation belongs
to the forms that call these helpers.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..notifications.models import NotificationType, event_link
from .clock import epoch_millis, format_iso
from .ports import AppDocument
from .state import AppState

logger = logging.getLogger(__name__)


def add_event(state: AppState, *, name: str, status: str = "Planning", **fields: Any) -> dict[str, Any]:
    """Create an event, announce it, and return the stored record."""
    event: dict[str, Any] = {
        **fields,
        "name": name,
        "status": status,
        "eventId": f"e{epoch_millis(state.clock())}{uuid.uuid4().hex[:4]}",
        "cost_tracker": list(fields.get("cost_tracker") or []),
        "aiInteractionHistory": list(fields.get("aiInteractionHistory") or []),
        "tasks": list(fields.get("tasks") or []),
        "commissionPaid": False,
    }
    state.store.mutate(lambda doc: {**doc, "events": [event, *(doc.get("events") or [])]})
    logger.info("Event created id=%s name=%r", event["eventId"], name)

    state.feedback.success(f'Event "{name}" created successfully!')
    state.notifications.add(
        "Event Created",
        f"Event '{name}' was successfully created.",
        NotificationType.SUCCESS,
        link=event_link(event["eventId"]),
    )
    return event


def _map_event(state: AppState, event_id: str, fn: Callable[[dict[str, Any]], dict[str, Any] | None]) -> bool:
    """Replace one event with fn(event) in a single mutation. fn returning None leaves it as is."""
    changed = False

    def _apply(doc: AppDocument) -> AppDocument:
        nonlocal changed
        events = []
        for e in doc.get("events") or []:
            if isinstance(e, dict) and e.get("eventId") == event_id:
                updated = fn(e)
                if updated is not None:
                    changed = True
                    e = updated
            events.append(e)
        return {**doc, "events": events}

    state.store.mutate(_apply)
    return changed


def update_event(state: AppState, event_id: str, **data: Any) -> bool:
    return _map_event(state, event_id, lambda e: {**e, **data})


def delete_event(state: AppState, event_id: str) -> bool:
    before = len(state.store.get("events") or [])
    committed = state.store.mutate(
        lambda doc: {
            **doc,
            "events": [e for e in doc.get("events") or [] if not (isinstance(e, dict) and e.get("eventId") == event_id)],
        }
    )
    removed = len(committed.get("events") or []) != before
    if removed:
        state.feedback.success("Event permanently deleted.")
    return removed


def add_task(
    state: AppState,
    event_id: str,
    description: str,
    due_date: datetime | str | None = None,
) -> dict[str, Any] | None:
    """Append a task to an event. Returns None when the event does not exist."""
    due = format_iso(due_date) if isinstance(due_date, datetime) else due_date
    task: dict[str, Any] = {"description": description, "dueDate": due, "isCompleted": False}
    if not _map_event(state, event_id, lambda e: {**e, "tasks": [*(e.get("tasks") or []), task]}):
        return None
    return task


def complete_task(state: AppState, event_id: str, index: int) -> bool:
    def _complete(event: dict[str, Any]) -> dict[str, Any] | None:
        tasks = list(event.get("tasks") or [])
        if not 0 <= index < len(tasks):
            return None
        tasks[index] = {**tasks[index], "isCompleted": True}
        return {**event, "tasks": tasks}

    return _map_event(state, event_id, _complete)


def add_rfq(state: AppState, *, client_name: str, **fields: Any) -> dict[str, Any]:
    now = state.clock()
    rfq: dict[str, Any] = {
        **fields,
        "clientName": client_name,
        "rfqId": f"rfq{epoch_millis(now)}{uuid.uuid4().hex[:4]}",
        "createdDate": format_iso(now),
        "status": "New",
    }
    state.store.mutate(lambda doc: {**doc, "rfqs": [rfq, *(doc.get("rfqs") or [])]})
    state.notifications.add(
        "New RFQ Added",
        f"An RFQ for {client_name} has been added.",
        NotificationType.INFO,
    )
    return rfq
