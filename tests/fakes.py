# tests/fakes.py

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any


class FakeClock:
    """
    Manually advanced clock.

    Callable like core.clock.utc_now, so it can be passed anywhere a Clock is expected.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@dataclass(slots=True)
class PlayedCue:
    cue: str
    volume: float


@dataclass(slots=True)
class FakeSoundPlayer:
    """
    Records every cue instead of playing it.

    With fail=True, play() raises to check that callers treat audio as best-effort.
    """

    played: list[PlayedCue] = field(default_factory=list)
    fail: bool = False

    def play(self, cue: str, *, volume: float = 1.0) -> None:
        if self.fail:
            raise RuntimeError("audio device unavailable")
        self.played.append(PlayedCue(cue=cue, volume=volume))

    def cues(self) -> list[str]:
        return [p.cue for p in self.played]


class FakeRandom:
    """Deterministic RandomSource: fixed random() value, choice() picks `pick`."""

    def __init__(self, value: float = 0.99, pick: int = 0) -> None:
        self.value = value
        self.pick = pick

    def random(self) -> float:
        return self.value

    def choice(self, seq: Sequence[Any]) -> Any:
        return seq[self.pick]
