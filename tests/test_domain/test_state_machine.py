"""Tests for the lifecycle state machine guards.

These tests verify that:
    1. All valid transitions are allowed.
    2. Terminal states accept no further events.
    3. The convenience function validate_transition works.
"""

from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from atomic_exchange.domain.state_machine import (
    ParticipantStateMachine,
    PoolStateMachine,
    SwapStateMachine,
    validate_transition,
)


class TestSwapMachine:
    def test_claim_from_pending(self) -> None:
        sm = SwapStateMachine("PENDING")
        sm.claim()
        assert sm.status == "CLAIMED"

    def test_refund_from_pending(self) -> None:
        sm = SwapStateMachine()
        sm.refund()
        assert sm.status == "REFUNDED"

    def test_claimed_cannot_refund(self) -> None:
        sm = SwapStateMachine("CLAIMED")
        with pytest.raises(TransitionNotAllowed):
            sm.refund()

    def test_refunded_cannot_claim(self) -> None:
        sm = SwapStateMachine("REFUNDED")
        with pytest.raises(TransitionNotAllowed):
            sm.claim()

    def test_claimed_cannot_claim_twice(self) -> None:
        sm = SwapStateMachine("CLAIMED")
        with pytest.raises(TransitionNotAllowed):
            sm.claim()

    def test_allowed_events_from_pending(self) -> None:
        assert set(SwapStateMachine("PENDING").get_allowed_events()) == {"claim", "refund"}

    def test_terminal_states_have_no_events(self) -> None:
        assert SwapStateMachine("CLAIMED").get_allowed_events() == []
        assert SwapStateMachine("REFUNDED").get_allowed_events() == []

    def test_unknown_status_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            SwapStateMachine("EXPIRED")


class TestPoolMachine:
    def test_activate(self) -> None:
        sm = PoolStateMachine("FILLING")
        sm.activate()
        assert sm.status == "ACTIVE"

    def test_activation_is_one_way(self) -> None:
        sm = PoolStateMachine("ACTIVE")
        with pytest.raises(TransitionNotAllowed):
            sm.activate()


class TestParticipantMachine:
    def test_withdraw_once(self) -> None:
        sm = ParticipantStateMachine("JOINED")
        sm.withdraw()
        assert sm.status == "WITHDRAWN"
        with pytest.raises(TransitionNotAllowed):
            sm.withdraw()


class TestValidateTransition:
    def test_valid_transition_returns_new_status(self) -> None:
        assert validate_transition("swap", "PENDING", "claim") == "CLAIMED"
        assert validate_transition("pool", "FILLING", "activate") == "ACTIVE"
        assert validate_transition("participant", "JOINED", "withdraw") == "WITHDRAWN"

    def test_invalid_transition_raises(self) -> None:
        with pytest.raises(TransitionNotAllowed):
            validate_transition("swap", "CLAIMED", "refund")

    def test_unknown_event_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            validate_transition("swap", "PENDING", "teleport")

    def test_unknown_machine_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Unknown machine"):
            validate_transition("escrow", "PENDING", "claim")
