"""Unit tests for the Swap Engine through the AtomicExchange facade."""

from __future__ import annotations

import hashlib
from collections.abc import Callable

import pytest

from atomic_exchange.config import ProtocolConstants
from atomic_exchange.domain.context import CallContext
from atomic_exchange.domain.enums import ErrorCode, SwapStatus
from atomic_exchange.domain.exceptions import (
    AlreadyClaimedError,
    InsufficientFundsError,
    InvalidHashError,
    InvalidParticipantError,
    InvalidRefundError,
    SwapExistsError,
    SwapExpiredError,
    SwapNotFoundError,
    TimelockActiveError,
    TimelockExpiredError,
    UnauthorizedError,
)
from atomic_exchange.domain.identifiers import UINT_MAX
from atomic_exchange.services.exchange import AtomicExchange
from tests.parties import ALICE, BOB, CAROL, TARGET_ADDRESS


class TestInitiate:
    def test_creates_pending_swap(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes], hash_lock: bytes
    ) -> None:
        swap_id = make_swap(height=5)
        swap = exchange.get_swap(swap_id)

        assert swap.initiator == ALICE
        assert swap.participant == BOB
        assert swap.hash_lock == hash_lock
        assert swap.creation_height == 5
        assert swap.expiration_height == 105
        assert swap.status == SwapStatus.PENDING
        assert swap.multi_sig_provided == 0

    def test_fees_computed_and_protocol_fee_credited(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(amount=10000)
        swap = exchange.get_swap(swap_id)
        assert (swap.swap_fee, swap.protocol_fee) == (50, 20)
        assert exchange.get_protocol_fee_balance() == 20

        make_swap(height=2, amount=20000)
        assert exchange.get_protocol_fee_balance() == 60

    def test_amount_below_minimum(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        with pytest.raises(InsufficientFundsError) as exc_info:
            make_swap(amount=999)
        assert exc_info.value.error_code == ErrorCode.INSUFFICIENT_FUNDS
        assert exchange.get_protocol_fee_balance() == 0

    def test_minimum_amount_accepted(self, make_swap: Callable[..., bytes]) -> None:
        make_swap(amount=1000)

    def test_time_lock_above_maximum(self, make_swap: Callable[..., bytes]) -> None:
        with pytest.raises(TimelockExpiredError):
            make_swap(time_lock=1009)

    def test_maximum_time_lock_accepted(self, make_swap: Callable[..., bytes]) -> None:
        make_swap(time_lock=1008)

    def test_self_swap_rejected(self, make_swap: Callable[..., bytes]) -> None:
        with pytest.raises(InvalidParticipantError):
            make_swap(initiator=ALICE, participant=ALICE)

    def test_duplicate_id_rejected(self, make_swap: Callable[..., bytes]) -> None:
        make_swap(height=3)
        with pytest.raises(SwapExistsError) as exc_info:
            make_swap(height=3)
        assert exc_info.value.error_code == ErrorCode.ALREADY_CLAIMED

    def test_terminal_swap_still_blocks_its_id(
        self,
        exchange: AtomicExchange,
        make_swap: Callable[..., bytes],
        preimage: bytes,
    ) -> None:
        swap_id = make_swap(height=3)
        exchange.claim_swap(CallContext(BOB, 3), swap_id, preimage)
        with pytest.raises(SwapExistsError):
            make_swap(height=3)

    def test_negative_amount_rejected(self, make_swap: Callable[..., bytes]) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            make_swap(amount=-1)

    def test_amount_above_uint_range_rejected(self, make_swap: Callable[..., bytes]) -> None:
        with pytest.raises(ValueError, match="128-bit"):
            make_swap(amount=UINT_MAX + 1)

    def test_quorum_beyond_both_parties_rejected(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        journal_before = exchange.get_journal()
        with pytest.raises(InvalidParticipantError, match="can never be met"):
            make_swap(multi_sig_required=3)
        assert exchange.get_protocol_fee_balance() == 0
        assert exchange.get_journal() == journal_before

    def test_two_party_quorum_accepted(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(multi_sig_required=2)
        assert exchange.get_swap(swap_id).multi_sig_required == 2

    def test_per_call_counting_allows_larger_quorum(self, hash_lock: bytes) -> None:
        exchange = AtomicExchange(constants=ProtocolConstants(count_distinct_signers=False))
        swap_id = exchange.initiate_swap(
            CallContext(ALICE, 1),
            participant=BOB,
            amount=5000,
            hash_lock=hash_lock,
            time_lock=50,
            swap_token="STX",
            target_chain="BTC",
            target_address=TARGET_ADDRESS,
            multi_sig_required=3,
        )
        assert exchange.get_swap(swap_id).multi_sig_required == 3


class TestClaim:
    def test_claim_with_correct_preimage(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes], preimage: bytes
    ) -> None:
        swap_id = make_swap()
        swap = exchange.claim_swap(CallContext(BOB, 2), swap_id, preimage)
        assert swap.claimed
        assert exchange.get_swap(swap_id).status == SwapStatus.CLAIMED

    def test_unknown_swap(self, exchange: AtomicExchange, preimage: bytes) -> None:
        with pytest.raises(SwapNotFoundError):
            exchange.claim_swap(CallContext(BOB, 1), b"\x00" * 32, preimage)

    def test_initiator_cannot_claim(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes], preimage: bytes
    ) -> None:
        swap_id = make_swap()
        with pytest.raises(UnauthorizedError):
            exchange.claim_swap(CallContext(ALICE, 2), swap_id, preimage)

    def test_wrong_preimage(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap()
        with pytest.raises(InvalidHashError):
            exchange.claim_swap(CallContext(BOB, 2), swap_id, b"wrong")
        assert not exchange.get_swap(swap_id).claimed

    def test_second_claim_fails(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes], preimage: bytes
    ) -> None:
        swap_id = make_swap()
        exchange.claim_swap(CallContext(BOB, 2), swap_id, preimage)
        with pytest.raises(AlreadyClaimedError):
            exchange.claim_swap(CallContext(BOB, 3), swap_id, preimage)

    def test_claim_after_refund_fails(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes], preimage: bytes
    ) -> None:
        swap_id = make_swap(time_lock=5)
        exchange.refund_swap(CallContext(ALICE, 6), swap_id)
        with pytest.raises(InvalidRefundError):
            exchange.claim_swap(CallContext(BOB, 7), swap_id, preimage)

    def test_claim_at_expiration_height_fails(
        self, hash_lock: bytes, preimage: bytes
    ) -> None:
        # Raw bound disabled so the expiration check is the one that fires.
        exchange = AtomicExchange(
            constants=ProtocolConstants(enforce_raw_timelock_bound=False)
        )
        swap_id = exchange.initiate_swap(
            CallContext(ALICE, 200),
            participant=BOB,
            amount=5000,
            hash_lock=hash_lock,
            time_lock=10,
            swap_token="STX",
            target_chain="BTC",
            target_address=TARGET_ADDRESS,
        )
        with pytest.raises(SwapExpiredError):
            exchange.claim_swap(CallContext(BOB, 210), swap_id, preimage)

    def test_raw_time_lock_bound(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes], preimage: bytes
    ) -> None:
        # Created at 50 with time_lock 20: expires at 70, but the raw bound is 20.
        swap_id = make_swap(height=50, time_lock=20)
        with pytest.raises(TimelockExpiredError):
            exchange.claim_swap(CallContext(BOB, 51), swap_id, preimage)
        assert not exchange.is_swap_claimable(swap_id, 51)

    def test_raw_bound_can_be_disabled(self, hash_lock: bytes, preimage: bytes) -> None:
        exchange = AtomicExchange(
            constants=ProtocolConstants(enforce_raw_timelock_bound=False)
        )
        swap_id = exchange.initiate_swap(
            CallContext(ALICE, 50),
            participant=BOB,
            amount=5000,
            hash_lock=hash_lock,
            time_lock=20,
            swap_token="STX",
            target_chain="BTC",
            target_address=TARGET_ADDRESS,
        )
        assert exchange.claim_swap(CallContext(BOB, 51), swap_id, preimage).claimed


class TestRefund:
    def test_refund_after_expiry(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(height=1, time_lock=10)
        swap = exchange.refund_swap(CallContext(ALICE, 11), swap_id)
        assert swap.refunded
        assert swap.status == SwapStatus.REFUNDED

    def test_refund_before_expiry(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(height=1, time_lock=10)
        with pytest.raises(TimelockActiveError):
            exchange.refund_swap(CallContext(ALICE, 10), swap_id)

    def test_third_party_cannot_refund(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(time_lock=1)
        with pytest.raises(UnauthorizedError):
            exchange.refund_swap(CallContext(CAROL, 50), swap_id)

    def test_refund_after_claim_fails(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes], preimage: bytes
    ) -> None:
        swap_id = make_swap(time_lock=10)
        exchange.claim_swap(CallContext(BOB, 2), swap_id, preimage)
        with pytest.raises(AlreadyClaimedError):
            exchange.refund_swap(CallContext(ALICE, 20), swap_id)
        swap = exchange.get_swap(swap_id)
        assert swap.claimed and not swap.refunded

    def test_double_refund_fails(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(time_lock=1)
        exchange.refund_swap(CallContext(ALICE, 5), swap_id)
        with pytest.raises(InvalidRefundError):
            exchange.refund_swap(CallContext(ALICE, 6), swap_id)


class TestQueries:
    def test_unknown_swap_is_conservative(self, exchange: AtomicExchange) -> None:
        missing = hashlib.sha256(b"missing").digest()
        assert exchange.get_swap(missing) is None
        assert not exchange.is_swap_claimable(missing, 0)
        assert not exchange.is_swap_refundable(missing, 0)
        report = exchange.get_swap_status(missing, 0)
        assert not report.exists
        assert not any([report.claimed, report.refunded, report.expired, report.claimable])

    def test_predicates_over_time(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(height=1, time_lock=10)
        assert exchange.is_swap_claimable(swap_id, 5)
        assert not exchange.is_swap_refundable(swap_id, 5)
        assert not exchange.is_swap_claimable(swap_id, 11)
        assert exchange.is_swap_refundable(swap_id, 11)

        report = exchange.get_swap_status(swap_id, 11)
        assert report.exists and report.expired and report.refundable
        assert report.status == "PENDING"

    def test_query_defaults_to_clock_height(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(height=1, time_lock=10)
        assert exchange.is_swap_claimable(swap_id)
        exchange.clock.advance(20)
        assert exchange.is_swap_refundable(swap_id)

    def test_queries_do_not_write(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap()
        before = len(exchange.get_journal())
        exchange.get_swap_status(swap_id, 3)
        exchange.is_swap_claimable(swap_id, 3)
        assert len(exchange.get_journal()) == before
