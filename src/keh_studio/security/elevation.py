# src/keh_studio/security/elevation.py

"""
Admin elevation gate.

Switching to a user whose role requires elevation opens a 4-digit PIN
challenge. The identity switch is committed only when the full input equals
the configured PIN at the moment of comparison. A wrong PIN keeps the
challenge open, clears the input and shows an error; retries are unlimited.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto

from ..audio.cues import SoundCue, play_cue
from ..core.feedback import ERROR_VOLUME, FeedbackCenter
from ..core.ports import SoundPlayer
from ..errors import ChallengeRejected
from ..storage.adapter import StateStoreAdapter
from ..storage.defaults import ADMIN_PIN_UNSET

logger = logging.getLogger(__name__)

PIN_LENGTH = 4
DEFAULT_ELEVATED_ROLES = frozenset({"Admin"})
SWITCH_ACK = "Switched to Admin User"


class GateState(Enum):
    IDLE = auto()
    CHALLENGING = auto()
    VERIFIED = auto()


class GateEvent(Enum):
    REQUEST = auto()
    MATCH = auto()
    MISMATCH = auto()
    CANCEL = auto()


_TRANSITIONS = {
    GateState.IDLE: {
        GateEvent.REQUEST: GateState.CHALLENGING,
    },
    GateState.CHALLENGING: {
        GateEvent.REQUEST: GateState.CHALLENGING,
        GateEvent.MATCH: GateState.VERIFIED,
        GateEvent.MISMATCH: GateState.CHALLENGING,
        GateEvent.CANCEL: GateState.IDLE,
    },
    GateState.VERIFIED: {
        GateEvent.REQUEST: GateState.CHALLENGING,
        GateEvent.CANCEL: GateState.IDLE,
    },
}


class SwitchResult(Enum):
    SWITCHED = auto()
    CHALLENGE_REQUIRED = auto()
    UNKNOWN_USER = auto()


class ChallengeOutcome(Enum):
    PENDING = auto()  # fewer than 4 digits, or no open challenge
    VERIFIED = auto()
    REJECTED = auto()


@dataclass(slots=True)
class ElevationChallenge:
    pending_user_id: str | None = None
    input_digits: str = ""
    error_message: str | None = None
    is_open: bool = False


def resolve_admin_pin(configured: object, default_pin: str) -> str:
    """The stored PIN, or `default_pin` when none is configured."""
    if configured is ADMIN_PIN_UNSET or configured == "":
        return default_pin
    return str(configured)


class ElevationGate:
    def __init__(
        self,
        store: StateStoreAdapter,
        *,
        feedback: FeedbackCenter | None = None,
        sound: SoundPlayer | None = None,
        default_pin: str = "1234",
        reject_delay_seconds: float = 0.3,
        elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES,
    ) -> None:
        self._store = store
        self._feedback = feedback
        self._sound = sound
        self._default_pin = default_pin
        self._reject_delay = max(0.0, float(reject_delay_seconds))
        self._elevated_roles = frozenset(elevated_roles)

        self.state = GateState.IDLE
        self.challenge = ElevationChallenge()
        self.last_rejection: ChallengeRejected | None = None

    def _transition(self, event: GateEvent) -> GateState:
        allowed = _TRANSITIONS.get(self.state, {})
        if event not in allowed:
            logger.warning("Invalid elevation transition: %s --%s-->", self.state, event)
            return self.state
        self.state = allowed[event]
        return self.state

    def _configured_pin(self) -> str:
        settings = self._store.get("settings") or {}
        return resolve_admin_pin(settings.get("adminPin", ADMIN_PIN_UNSET), self._default_pin)

    def _find_user(self, user_id: str) -> dict | None:
        for user in self._store.get("users") or []:
            if isinstance(user, dict) and user.get("userId") == user_id:
                return user
        return None

    def _commit_switch(self, user_id: str) -> None:
        self._store.update_fields(currentUserId=user_id)
        logger.info("Identity switched to user_id=%s", user_id)

    # ---- public API ----

    def requires_elevation(self, user_id: str) -> bool:
        user = self._find_user(user_id)
        return user is not None and user.get("role") in self._elevated_roles

    def request_switch(self, target_user_id: str) -> SwitchResult:
        user = self._find_user(target_user_id)
        if user is None:
            logger.warning("Switch requested to unknown user_id=%s", target_user_id)
            return SwitchResult.UNKNOWN_USER

        if user.get("role") not in self._elevated_roles:
            self._commit_switch(target_user_id)
            return SwitchResult.SWITCHED

        self._transition(GateEvent.REQUEST)
        self.challenge = ElevationChallenge(pending_user_id=target_user_id, is_open=True)
        self.last_rejection = None
        logger.info("Elevation challenge opened for user_id=%s", target_user_id)
        return SwitchResult.CHALLENGE_REQUIRED

    async def submit_digit(self, digit: str) -> ChallengeOutcome:
        """
        Append one typed character. Non-digits are ignored; input stops at 4.

        The 4th digit triggers verification. On mismatch the rejection is
        applied after a short delay so the last digit is visible first.
        """
        if not self.challenge.is_open:
            return ChallengeOutcome.PENDING

        clean = "".join(ch for ch in str(digit) if ch.isdigit())
        if not clean or len(self.challenge.input_digits) >= PIN_LENGTH:
            return ChallengeOutcome.PENDING

        self.challenge.input_digits = (self.challenge.input_digits + clean)[:PIN_LENGTH]
        self.challenge.error_message = None
        if len(self.challenge.input_digits) < PIN_LENGTH:
            return ChallengeOutcome.PENDING

        if self._matches():
            self._accept()
            return ChallengeOutcome.VERIFIED

        attempt = self.challenge
        if self._reject_delay:
            await asyncio.sleep(self._reject_delay)
        if attempt is not self.challenge or not attempt.is_open:
            # Cancelled or re-requested while we waited.
            return ChallengeOutcome.PENDING
        self._reject()
        return ChallengeOutcome.REJECTED

    def verify(self) -> ChallengeOutcome:
        """Explicit confirm: compare the current input right away."""
        if not self.challenge.is_open:
            return ChallengeOutcome.PENDING
        if self._matches():
            self._accept()
            return ChallengeOutcome.VERIFIED
        self._reject()
        return ChallengeOutcome.REJECTED

    def cancel(self) -> None:
        if self.challenge.is_open:
            logger.info("Elevation challenge cancelled")
        self.challenge = ElevationChallenge()
        if self.state != GateState.IDLE:
            self._transition(GateEvent.CANCEL)

    # ---- internals ----

    def _matches(self) -> bool:
        entered = self.challenge.input_digits
        return len(entered) == PIN_LENGTH and entered == self._configured_pin()

    def _accept(self) -> None:
        pending = self.challenge.pending_user_id
        if pending:
            self._commit_switch(pending)
            if self._feedback is not None:
                self._feedback.success(SWITCH_ACK)
        self._transition(GateEvent.MATCH)
        self.challenge = ElevationChallenge()
        self.last_rejection = None

    def _reject(self) -> None:
        rejection = ChallengeRejected()
        self.last_rejection = rejection
        self.challenge.error_message = rejection.message
        self.challenge.input_digits = ""
        self._transition(GateEvent.MISMATCH)
        logger.info("Elevation challenge rejected for user_id=%s", self.challenge.pending_user_id)
        play_cue(self._sound, SoundCue.ERROR, volume=ERROR_VOLUME)
