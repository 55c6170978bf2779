# src/keh_studio/notifications/engine.py

"""
Notification feed.

Invariants kept on every add:
- newest first, at most `cap` entries (older ones fall off silently),
- no two entries share (title, message) within `dedup_window_seconds`.

The duplicate check runs inside the same mutation that prepends, so two
rapid calls (e.g. the monitor and the synthetic generator in one tick)
cannot both pass it.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any

from ..audio.cues import SoundCue, play_cue
from ..core.clock import epoch_millis, format_iso, parse_iso, utc_now
from ..core.ports import AppDocument, Clock, SoundPlayer
from ..storage.adapter import StateStoreAdapter
from .models import EVENT_LINK_RE, NavigationIntent, Notification, NotificationType

logger = logging.getLogger(__name__)

DEFAULT_CAP = 50
DEFAULT_DEDUP_WINDOW_SECONDS = 5.0
ALERT_VOLUME = 0.2

EVENT_DETAIL_VIEW = "EventDetail"


def new_notification_id(clock: Clock = utc_now) -> str:
    return f"notif-{epoch_millis(clock())}-{uuid.uuid4().hex[:9]}"


class NotificationEngine:
    def __init__(
        self,
        store: StateStoreAdapter,
        *,
        sound: SoundPlayer | None = None,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] | None = None,
        cap: int = DEFAULT_CAP,
        dedup_window_seconds: float = DEFAULT_DEDUP_WINDOW_SECONDS,
    ) -> None:
        self._store = store
        self._sound = sound
        self._clock = clock
        self._id_factory = id_factory or (lambda: new_notification_id(self._clock))
        self._cap = max(1, int(cap))
        self._window = float(dedup_window_seconds)

    @staticmethod
    def _raw_list(doc: AppDocument) -> list[dict[str, Any]]:
        raw = doc.get("notifications") or []
        return [n for n in raw if isinstance(n, dict)]

    def _is_duplicate(self, existing: list[dict[str, Any]], candidate: Notification) -> bool:
        now = candidate.created_at
        if now is None:
            return False
        for raw in existing:
            if raw.get("title") != candidate.title or raw.get("message") != candidate.message:
                continue
            ts = parse_iso(raw.get("timestamp"))
            if ts is not None and (now - ts).total_seconds() < self._window:
                return True
        return False

    def add(
        self,
        title: str,
        message: str,
        type: NotificationType | str = NotificationType.INFO,
        link: str | None = None,
    ) -> Notification | None:
        """Record a notification. Returns None when it was suppressed as a duplicate."""
        candidate = Notification(
            id=self._id_factory(),
            title=title,
            message=message,
            type=NotificationType.from_raw(type),
            timestamp=format_iso(self._clock()),
            read=False,
            link=link,
        )
        accepted = False

        def _apply(doc: AppDocument) -> AppDocument:
            nonlocal accepted
            existing = self._raw_list(doc)
            if self._is_duplicate(existing, candidate):
                return doc
            accepted = True
            return {**doc, "notifications": [candidate.to_dict(), *existing][: self._cap]}

        self._store.mutate(_apply)

        if not accepted:
            logger.debug("Duplicate notification suppressed title=%r", title)
            return None

        logger.info("Notification added id=%s type=%s title=%r", candidate.id, candidate.type.value, title)
        if candidate.type.is_alarming:
            play_cue(self._sound, SoundCue.ERROR, volume=ALERT_VOLUME)
        return candidate

    def list(self) -> list[Notification]:
        return [Notification.from_dict(n) for n in self._raw_list(self._store.read())]

    def get(self, notification_id: str) -> Notification | None:
        return next((n for n in self.list() if n.id == notification_id), None)

    def unread_count(self) -> int:
        return sum(1 for n in self.list() if not n.read)

    def mark_read(self, notification_id: str) -> bool:
        """Idempotent; returns True when a matching entry exists."""
        found = False

        def _apply(doc: AppDocument) -> AppDocument:
            nonlocal found
            updated = []
            for n in self._raw_list(doc):
                if n.get("id") == notification_id:
                    found = True
                    n = {**n, "read": True}
                updated.append(n)
            return {**doc, "notifications": updated}

        self._store.mutate(_apply)
        return found

    def clear_all(self) -> None:
        self._store.mutate(lambda doc: {**doc, "notifications": []})
        logger.info("Notifications cleared")

    def view(self, notification_id: str) -> NavigationIntent | None:
        """Resolve an entry's link into a navigation intent (event links only)."""
        notification = self.get(notification_id)
        if notification is None or not notification.link:
            return None
        m = EVENT_LINK_RE.match(notification.link)
        if not m:
            return None
        return NavigationIntent(target_view=EVENT_DETAIL_VIEW, target_record_id=m.group("record_id"))
