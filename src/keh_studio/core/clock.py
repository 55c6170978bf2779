# src/keh_studio/core/clock.py

"""UTC timestamps in the format the state document stores them."""

from __future__ import annotations

from datetime import UTC, datetime

from dateutil import parser as date_parser


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_iso(dt: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix (naive input is taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: object) -> datetime | None:
    """
    Parse an ISO date or datetime string into an aware UTC datetime.

    Date-only values ("2024-05-01") mean midnight UTC. Returns None for
    anything that is not a parseable string.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        dt = date_parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def epoch_millis(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)
