# src/keh_studio/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/migration/audio swappable and makes testing easier.
"""

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Protocol

AppDocument = dict[str, Any]
# The whole application state tree as a JSON-compatible mapping.

StateUpdate = AppDocument | Callable[[AppDocument], AppDocument]

Clock = Callable[[], datetime]
# Returns an aware datetime (UTC).


class PersistentStore(Protocol):
    """
    Canonical holder of the state tree.

    - read() returns a copy; mutating it has no effect on the store.
    - write() is atomic and immediately visible to subsequent reads.
    - reload() re-reads the backing medium, discarding anything not committed.
    """

    def read(self) -> AppDocument: ...
    def write(self, update: StateUpdate) -> AppDocument: ...
    def reload(self) -> AppDocument: ...


class Migrator(Protocol):
    """Upgrade a serialized document from `from_version` to the current version."""

    def __call__(self, document: Mapping[str, Any], from_version: int) -> AppDocument: ...


class SoundPlayer(Protocol):
    """Best-effort audio cue sink. May raise; callers swallow the failure."""

    def play(self, cue: str, *, volume: float = 1.0) -> None: ...


class RandomSource(Protocol):
    def random(self) -> float: ...
    def choice(self, seq: Any) -> Any: ...
