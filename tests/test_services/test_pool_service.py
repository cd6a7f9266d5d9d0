"""Unit tests for the Mixing Pool Engine."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from atomic_exchange.config import ProtocolConstants
from atomic_exchange.domain.context import CallContext
from atomic_exchange.domain.enums import ParticipantStatus, PoolStatus
from atomic_exchange.domain.exceptions import (
    AlreadyClaimedError,
    InsufficientFundsError,
    InvalidParticipantError,
    MixerNotFoundError,
    NotClaimableError,
    ParticipantLimitReachedError,
    PoolClosedError,
    TimelockActiveError,
    TimelockExpiredError,
    UnauthorizedError,
)
from atomic_exchange.domain.identifiers import UINT_MAX
from atomic_exchange.services.exchange import AtomicExchange
from atomic_exchange.services.pool_service import MixingPoolEngine
from tests.parties import ALICE, BOB, CAROL, DAVE

BLINDED = b"\x03" * 33


def _fill(exchange: AtomicExchange, pool_id: bytes, height: int = 2) -> None:
    exchange.join_mixing_pool(CallContext(ALICE, height), pool_id, 5000, BLINDED)
    exchange.join_mixing_pool(CallContext(BOB, height), pool_id, 3000, BLINDED)


class TestCreatePool:
    def test_creates_filling_pool(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(height=4)
        pool = exchange.get_mixing_pool(pool_id)

        assert pool.creator == CAROL
        assert pool.status == PoolStatus.FILLING
        assert pool.participant_count == 0
        assert pool.total_amount == 0
        assert (pool.window_opens_at, pool.window_closes_at) == (14, 114)

    def test_identical_parameters_get_distinct_ids(
        self, make_pool: Callable[..., bytes]
    ) -> None:
        assert make_pool(height=4) != make_pool(height=4)

    def test_minimum_below_protocol_minimum(self, make_pool: Callable[..., bytes]) -> None:
        with pytest.raises(InsufficientFundsError):
            make_pool(min_amount=999)

    def test_maximum_below_minimum(self, make_pool: Callable[..., bytes]) -> None:
        with pytest.raises(InsufficientFundsError):
            make_pool(min_amount=5000, max_amount=4999)

    def test_zero_threshold(self, make_pool: Callable[..., bytes]) -> None:
        with pytest.raises(InvalidParticipantError):
            make_pool(activation_threshold=0)

    def test_unreachable_threshold(self, make_pool: Callable[..., bytes]) -> None:
        with pytest.raises(InvalidParticipantError):
            make_pool(activation_threshold=101)

    def test_maximum_above_uint_range_rejected(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        with pytest.raises(ValueError, match="128-bit"):
            make_pool(max_amount=UINT_MAX + 1)
        pool_id = make_pool(max_amount=UINT_MAX)
        assert exchange.get_mixing_pool(pool_id).max_amount == UINT_MAX

    def test_failed_creation_leaves_no_trace(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        before = len(exchange.store)
        with pytest.raises(InvalidParticipantError):
            make_pool(activation_threshold=0)
        assert len(exchange.store) == before


class TestJoinPool:
    def test_dense_participant_ids(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(activation_threshold=3)
        first = exchange.join_mixing_pool(CallContext(ALICE, 2), pool_id, 5000, BLINDED)
        second = exchange.join_mixing_pool(CallContext(BOB, 2), pool_id, 2000, BLINDED)

        assert (first.participant_id, second.participant_id) == (0, 1)
        assert second.pool.participant_count == 2
        assert second.pool.total_amount == 7000
        assert exchange.get_mixer_participant(pool_id, 1).participant == BOB

    def test_activates_exactly_at_threshold(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(activation_threshold=3)
        receipts = [
            exchange.join_mixing_pool(CallContext(who, 2), pool_id, 1000, BLINDED)
            for who in (ALICE, BOB, DAVE)
        ]
        assert [r.activated for r in receipts] == [False, False, True]
        assert exchange.get_mixing_pool(pool_id).status == PoolStatus.ACTIVE

    def test_active_pool_closed_to_new_entrants(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool()
        _fill(exchange, pool_id)
        with pytest.raises(PoolClosedError):
            exchange.join_mixing_pool(CallContext(DAVE, 3), pool_id, 5000, BLINDED)
        pool = exchange.get_mixing_pool(pool_id)
        assert pool.active
        assert pool.participant_count == 2

    def test_amount_outside_bounds(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool()
        with pytest.raises(InsufficientFundsError):
            exchange.join_mixing_pool(CallContext(ALICE, 2), pool_id, 999, BLINDED)
        with pytest.raises(InsufficientFundsError):
            exchange.join_mixing_pool(CallContext(ALICE, 2), pool_id, 10001, BLINDED)
        assert exchange.get_mixer_participant(pool_id, 0) is None

    def test_unknown_pool(self, exchange: AtomicExchange) -> None:
        with pytest.raises(MixerNotFoundError):
            exchange.join_mixing_pool(CallContext(ALICE, 1), b"\x07" * 32, 5000, BLINDED)

    def test_participant_limit(self, exchange: AtomicExchange) -> None:
        # A pool created under a larger limit, then joined under a smaller one.
        pool_id = exchange.create_mixing_pool(CallContext(CAROL, 1), 1000, 10000, 5, 10, 100)
        strict = MixingPoolEngine(
            exchange.store, ProtocolConstants(max_participants_per_mixer=1)
        )
        strict.join_pool(CallContext(ALICE, 2), pool_id, 1000, BLINDED)
        with pytest.raises(ParticipantLimitReachedError):
            strict.join_pool(CallContext(BOB, 2), pool_id, 1000, BLINDED)


class TestWithdraw:
    def test_withdraw_inside_window(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(height=1)
        _fill(exchange, pool_id)
        entry = exchange.withdraw_from_mixer(CallContext(ALICE, 11), pool_id, 0)
        assert entry.withdrawn
        assert entry.status == ParticipantStatus.WITHDRAWN

    @pytest.mark.parametrize("height", [11, 60, 111])
    def test_window_bounds_inclusive(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes], height: int
    ) -> None:
        pool_id = make_pool(height=1)
        _fill(exchange, pool_id)
        assert exchange.withdraw_from_mixer(CallContext(BOB, height), pool_id, 1).withdrawn

    def test_before_window(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(height=1)
        _fill(exchange, pool_id)
        with pytest.raises(TimelockActiveError):
            exchange.withdraw_from_mixer(CallContext(ALICE, 10), pool_id, 0)

    def test_after_window(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(height=1)
        _fill(exchange, pool_id)
        with pytest.raises(TimelockExpiredError):
            exchange.withdraw_from_mixer(CallContext(ALICE, 112), pool_id, 0)

    def test_only_once(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(height=1)
        _fill(exchange, pool_id)
        exchange.withdraw_from_mixer(CallContext(ALICE, 20), pool_id, 0)
        with pytest.raises(AlreadyClaimedError):
            exchange.withdraw_from_mixer(CallContext(ALICE, 21), pool_id, 0)

    def test_inactive_pool(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(height=1)
        exchange.join_mixing_pool(CallContext(ALICE, 2), pool_id, 5000, BLINDED)
        with pytest.raises(NotClaimableError):
            exchange.withdraw_from_mixer(CallContext(ALICE, 20), pool_id, 0)

    def test_someone_elses_slot(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(height=1)
        _fill(exchange, pool_id)
        with pytest.raises(UnauthorizedError):
            exchange.withdraw_from_mixer(CallContext(BOB, 20), pool_id, 0)

    def test_unknown_slot(
        self, exchange: AtomicExchange, make_pool: Callable[..., bytes]
    ) -> None:
        pool_id = make_pool(height=1)
        _fill(exchange, pool_id)
        with pytest.raises(InvalidParticipantError):
            exchange.withdraw_from_mixer(CallContext(ALICE, 20), pool_id, 7)

    def test_unknown_pool(self, exchange: AtomicExchange) -> None:
        with pytest.raises(MixerNotFoundError):
            exchange.withdraw_from_mixer(CallContext(ALICE, 20), b"\x05" * 32, 0)


class TestIndependence:
    def test_pools_and_swaps_do_not_interact(
        self,
        exchange: AtomicExchange,
        make_pool: Callable[..., bytes],
        make_swap: Callable[..., bytes],
    ) -> None:
        pool_id = make_pool(height=1)
        swap_id = make_swap(height=1)
        _fill(exchange, pool_id)
        assert exchange.get_swap(swap_id).status == "PENDING"
        assert exchange.get_protocol_fee_balance() == 20
