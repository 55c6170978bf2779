# src/keh_studio/notifications/models.py

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.clock import parse_iso

EVENT_LINK_RE = re.compile(r"^event:(?P<record_id>.+)$")


class NotificationType(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def from_raw(cls, raw: object) -> NotificationType:
        try:
            return cls(str(raw))
        except ValueError:
            return cls.INFO

    @property
    def is_alarming(self) -> bool:
        return self in (NotificationType.WARNING, NotificationType.ERROR)


def event_link(record_id: str) -> str:
    return f"event:{record_id}"


@dataclass(frozen=True, slots=True)
class Notification:
    id: str
    title: str
    message: str
    type: NotificationType
    timestamp: str
    read: bool = False
    link: str | None = None

    @property
    def created_at(self) -> datetime | None:
        return parse_iso(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "timestamp": self.timestamp,
            "read": self.read,
        }
        if self.link is not None:
            out["link"] = self.link
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Notification:
        link = raw.get("link")
        return cls(
            id=str(raw.get("id", "")),
            title=str(raw.get("title", "")),
            message=str(raw.get("message", "")),
            type=NotificationType.from_raw(raw.get("type")),
            timestamp=str(raw.get("timestamp", "")),
            read=bool(raw.get("read", False)),
            link=str(link) if link is not None else None,
        )


@dataclass(frozen=True, slots=True)
class NavigationIntent:
    """Where the presentation layer should go next."""

    target_view: str
    target_record_id: str | None = None
