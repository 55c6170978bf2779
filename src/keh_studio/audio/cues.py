# src/keh_studio/audio/cues.py

from __future__ import annotations

import logging
import sys
from enum import StrEnum

from ..core.ports import SoundPlayer

logger = logging.getLogger(__name__)


class SoundCue(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


class TerminalBellPlayer:
    """
    Console stand-in for the app's audio cues.

    Rings the terminal bell for error cues when stderr is a TTY; success cues
    are only logged. Disabled players do nothing.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = bool(enabled)

    def play(self, cue: str, *, volume: float = 1.0) -> None:
        if not self.enabled:
            return
        logger.debug("Sound cue=%s volume=%.2f", cue, volume)
        if cue == SoundCue.ERROR and sys.stderr.isatty():
            sys.stderr.write("\a")
            sys.stderr.flush()


def play_cue(player: SoundPlayer | None, cue: SoundCue, *, volume: float) -> None:
    """Best-effort playback: a failing player never reaches the caller."""
    if player is None:
        return
    try:
        player.play(cue.value, volume=volume)
    except Exception:
        logger.debug("Sound cue %s failed.", cue.value, exc_info=True)
