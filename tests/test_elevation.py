# tests/test_elevation.py

from __future__ import annotations

import asyncio

import pytest

from keh_studio.core.feedback import FeedbackCenter
from keh_studio.errors import ChallengeRejected
from keh_studio.security.elevation import (
    ChallengeOutcome,
    ElevationGate,
    GateState,
    SwitchResult,
    resolve_admin_pin,
)


def _gate(store, sound, *, delay: float = 0.0) -> tuple[ElevationGate, FeedbackCenter]:
    feedback = FeedbackCenter(sound=sound)
    gate = ElevationGate(store, feedback=feedback, sound=sound, default_pin="1234", reject_delay_seconds=delay)
    return gate, feedback


async def _type(gate: ElevationGate, digits: str) -> ChallengeOutcome:
    outcome = ChallengeOutcome.PENDING
    for d in digits:
        outcome = await gate.submit_digit(d)
    return outcome


def test_resolve_admin_pin_falls_back_to_default() -> None:
    assert resolve_admin_pin(None, "1234") == "1234"
    assert resolve_admin_pin("", "1234") == "1234"
    assert resolve_admin_pin("9876", "1234") == "9876"


def test_non_admin_switch_is_immediate(store, sound) -> None:
    store.update_fields(currentUserId="u1")
    gate, _ = _gate(store, sound)

    assert gate.request_switch("u2") == SwitchResult.SWITCHED
    assert store.get("currentUserId") == "u2"
    assert gate.challenge.is_open is False


def test_unknown_user_changes_nothing(store, sound) -> None:
    store.update_fields(currentUserId="u2")
    gate, _ = _gate(store, sound)

    assert gate.request_switch("nobody") == SwitchResult.UNKNOWN_USER
    assert store.get("currentUserId") == "u2"
    assert gate.state == GateState.IDLE


@pytest.mark.asyncio
async def test_default_pin_commits_the_switch(store, sound) -> None:
    store.update_fields(currentUserId="u2")
    gate, feedback = _gate(store, sound)

    assert gate.request_switch("u1") == SwitchResult.CHALLENGE_REQUIRED
    assert gate.state == GateState.CHALLENGING
    assert store.get("currentUserId") == "u2"

    assert await _type(gate, "1234") == ChallengeOutcome.VERIFIED
    assert store.get("currentUserId") == "u1"
    assert gate.state == GateState.VERIFIED
    assert gate.challenge.is_open is False
    assert feedback.success_message == "Switched to Admin User"


@pytest.mark.asyncio
async def test_wrong_pin_rejects_and_allows_retry(store, sound) -> None:
    store.update_fields(currentUserId="u2")
    gate, _ = _gate(store, sound)
    gate.request_switch("u1")

    assert await _type(gate, "0000") == ChallengeOutcome.REJECTED
    assert store.get("currentUserId") == "u2"
    assert gate.challenge.is_open is True
    assert gate.challenge.input_digits == ""
    assert gate.challenge.error_message == "Incorrect PIN"
    assert isinstance(gate.last_rejection, ChallengeRejected)
    assert sound.cues() == ["error"]

    # Typing again clears the error; retries are unlimited.
    assert await gate.submit_digit("1") == ChallengeOutcome.PENDING
    assert gate.challenge.error_message is None
    assert await _type(gate, "234") == ChallengeOutcome.VERIFIED
    assert store.get("currentUserId") == "u1"


@pytest.mark.asyncio
async def test_configured_pin_replaces_default(store, sound) -> None:
    store.mutate(lambda doc: {**doc, "currentUserId": "u2", "settings": {**doc["settings"], "adminPin": "4321"}})
    gate, _ = _gate(store, sound)
    gate.request_switch("u1")

    assert await _type(gate, "1234") == ChallengeOutcome.REJECTED
    assert await _type(gate, "4321") == ChallengeOutcome.VERIFIED


@pytest.mark.asyncio
async def test_non_digits_are_ignored_and_input_stops_at_four(store, sound) -> None:
    gate, _ = _gate(store, sound)
    gate.request_switch("u1")

    assert await gate.submit_digit("a") == ChallengeOutcome.PENDING
    assert await _type(gate, "12") == ChallengeOutcome.PENDING
    assert gate.challenge.input_digits == "12"


def test_verify_compares_current_input(store, sound) -> None:
    store.update_fields(currentUserId="u2")
    gate, _ = _gate(store, sound)
    gate.request_switch("u1")

    assert gate.verify() == ChallengeOutcome.REJECTED
    assert gate.challenge.is_open is True


def test_cancel_discards_challenge(store, sound) -> None:
    store.update_fields(currentUserId="u2")
    gate, _ = _gate(store, sound)
    gate.request_switch("u1")

    gate.cancel()
    assert gate.state == GateState.IDLE
    assert gate.challenge.is_open is False
    assert gate.verify() == ChallengeOutcome.PENDING
    assert store.get("currentUserId") == "u2"


@pytest.mark.asyncio
async def test_cancel_during_reject_delay_drops_the_rejection(store, sound) -> None:
    gate, _ = _gate(store, sound, delay=0.05)
    gate.request_switch("u1")
    await _type(gate, "000")

    pending = asyncio.create_task(gate.submit_digit("0"))
    await asyncio.sleep(0)
    gate.cancel()

    assert await pending == ChallengeOutcome.PENDING
    assert gate.last_rejection is None
    assert sound.played == []
