"""Unit tests for the Confidential Proof Gateway."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from atomic_exchange.domain.context import CallContext
from atomic_exchange.domain.exceptions import (
    AlreadyClaimedError,
    InvalidProofError,
    InvalidRefundError,
    SwapNotFoundError,
    UnauthorizedError,
)
from atomic_exchange.domain.identifiers import encode_swap
from atomic_exchange.services.exchange import AtomicExchange
from atomic_exchange.verifiers import MockVerifier
from tests.parties import ALICE, BOB, CAROL, TARGET_ADDRESS


class TestSubmitProof:
    def test_stores_verified_proof(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap(privacy_level=1)
        record = exchange.submit_zk_proof(CallContext(ALICE, 2), swap_id, b"\xde\xad")

        assert record.verified
        assert record.verification_height == 2
        assert exchange.get_confidential_proof(swap_id) == record

    def test_resubmission_overwrites(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap()
        exchange.submit_zk_proof(CallContext(ALICE, 2), swap_id, b"first")
        exchange.submit_zk_proof(CallContext(BOB, 3), swap_id, b"second")
        assert exchange.get_confidential_proof(swap_id).proof == b"second"

    def test_empty_proof_rejected(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap()
        with pytest.raises(InvalidProofError):
            exchange.submit_zk_proof(CallContext(ALICE, 2), swap_id, b"")
        assert exchange.get_confidential_proof(swap_id) is None

    def test_outsider_rejected(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes]
    ) -> None:
        swap_id = make_swap()
        with pytest.raises(UnauthorizedError):
            exchange.submit_zk_proof(CallContext(CAROL, 2), swap_id, b"proof")

    def test_unknown_swap(self, exchange: AtomicExchange) -> None:
        with pytest.raises(SwapNotFoundError):
            exchange.submit_zk_proof(CallContext(ALICE, 1), b"\x09" * 32, b"proof")

    def test_terminal_swaps_rejected(
        self, exchange: AtomicExchange, make_swap: Callable[..., bytes], preimage: bytes
    ) -> None:
        claimed = make_swap(height=1)
        refunded = make_swap(height=2, time_lock=1)
        exchange.claim_swap(CallContext(BOB, 2), claimed, preimage)
        exchange.refund_swap(CallContext(ALICE, 3), refunded)

        with pytest.raises(AlreadyClaimedError):
            exchange.submit_zk_proof(CallContext(ALICE, 4), claimed, b"proof")
        with pytest.raises(InvalidRefundError):
            exchange.submit_zk_proof(CallContext(ALICE, 4), refunded, b"proof")


class TestInjectedProofVerifier:
    def test_verifier_sees_swap_encoding(self, hash_lock: bytes) -> None:
        verifier = MockVerifier()
        exchange = AtomicExchange(proof_verifier=verifier)
        swap_id = exchange.initiate_swap(
            CallContext(ALICE, 1),
            participant=BOB,
            amount=5000,
            hash_lock=hash_lock,
            time_lock=50,
            swap_token="STX",
            target_chain="BTC",
            target_address=TARGET_ADDRESS,
            privacy_level=2,
        )
        exchange.submit_zk_proof(CallContext(BOB, 2), swap_id, b"zk")

        (request,) = verifier.calls
        assert request.prover == BOB
        assert request.swap_encoding == encode_swap(exchange.get_swap(swap_id))

    def test_rejecting_verifier(self, hash_lock: bytes) -> None:
        exchange = AtomicExchange(proof_verifier=MockVerifier(should_pass=False))
        swap_id = exchange.initiate_swap(
            CallContext(ALICE, 1),
            participant=BOB,
            amount=5000,
            hash_lock=hash_lock,
            time_lock=50,
            swap_token="STX",
            target_chain="BTC",
            target_address=TARGET_ADDRESS,
        )
        with pytest.raises(InvalidProofError):
            exchange.submit_zk_proof(CallContext(BOB, 2), swap_id, b"zk")
