# src/keh_studio/core/feedback.py

"""
User-facing acknowledgements.

Success and error banners, each with its audio cue. Quota errors from the AI
collaborator get their own blocking slot instead of the error banner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..audio.cues import SoundCue, play_cue
from ..errors import QuotaExceeded
from .ports import SoundPlayer

logger = logging.getLogger(__name__)

SUCCESS_VOLUME = 0.4
ERROR_VOLUME = 0.3


@dataclass(slots=True)
class FeedbackCenter:
    sound: SoundPlayer | None = None

    success_message: str | None = None
    error_message: str | None = None
    quota_error: QuotaExceeded | None = None

    def success(self, message: str | None) -> None:
        self.success_message = message
        if message:
            logger.info("%s", message)
            play_cue(self.sound, SoundCue.SUCCESS, volume=SUCCESS_VOLUME)

    def error(self, error: BaseException | str) -> None:
        if isinstance(error, QuotaExceeded):
            logger.warning("Quota exceeded: %s", error.message)
            self.quota_error = error
        else:
            message = error if isinstance(error, str) else (str(error) or error.__class__.__name__)
            logger.error("%s", message)
            self.error_message = message
        play_cue(self.sound, SoundCue.ERROR, volume=ERROR_VOLUME)

    def dismiss(self) -> None:
        self.success_message = None
        self.error_message = None
        self.quota_error = None


def simulated_quota_error() -> QuotaExceeded:
    """The canned quota error the settings screen uses to preview the modal."""
    return QuotaExceeded(
        "[Processing Halted] Your account's API token has exceeded its usage limit for this billing cycle.",
        retry_after_seconds=0,
        details_text="QUOTA_EXCEEDED: Structured Content Compliance Kit subscription limit reached.",
        is_hard_limit=True,
        action_hint=(
            "Action Required: Please visit your account dashboard to upgrade your plan "
            "or wait for your quota to reset."
        ),
    )
