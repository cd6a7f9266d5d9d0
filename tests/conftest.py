"""Shared test fixtures for the atomic exchange test suite.

Provides:
    - A fresh in-memory AtomicExchange per test
    - Secret / hash-lock pairs
    - Factory functions for initiating swaps and building pools
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable

import pytest

from atomic_exchange.domain.context import CallContext
from atomic_exchange.services.exchange import AtomicExchange
from atomic_exchange.verifiers import MockVerifier
from tests.parties import ALICE, BOB, CAROL, DEPLOYER, TARGET_ADDRESS

# ---------------------------------------------------------------------------
# Domain Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def preimage() -> bytes:
    """Return the secret a claimer reveals."""
    return b"correct horse battery staple"


@pytest.fixture
def hash_lock(preimage: bytes) -> bytes:
    """Return SHA-256 of the preimage."""
    return hashlib.sha256(preimage).digest()


@pytest.fixture
def exchange() -> AtomicExchange:
    """Return an exchange with an in-memory journal and default verifiers."""
    return AtomicExchange(admin=DEPLOYER)


@pytest.fixture
def mock_verifier() -> MockVerifier:
    return MockVerifier(should_pass=True)


@pytest.fixture
def ctx() -> Callable[..., CallContext]:
    """Return a CallContext builder: ctx(caller, height)."""

    def _ctx(caller: str, height: int = 0) -> CallContext:
        return CallContext(caller=caller, height=height)

    return _ctx


@pytest.fixture
def make_swap(
    exchange: AtomicExchange, hash_lock: bytes
) -> Callable[..., bytes]:
    """Initiate a swap from ALICE to BOB and return its ID.

    Keyword overrides are passed straight to initiate_swap.
    """

    def _make(
        height: int = 1,
        initiator: str = ALICE,
        participant: str = BOB,
        **overrides: object,
    ) -> bytes:
        params: dict = {
            "amount": 10000,
            "hash_lock": hash_lock,
            "time_lock": 100,
            "swap_token": "STX",
            "target_chain": "BTC",
            "target_address": TARGET_ADDRESS,
            "multi_sig_required": 1,
            "privacy_level": 0,
        }
        params.update(overrides)
        return exchange.initiate_swap(
            CallContext(caller=initiator, height=height), participant=participant, **params
        )

    return _make


@pytest.fixture
def make_pool(exchange: AtomicExchange) -> Callable[..., bytes]:
    """Create a pool (min=1000, max=10000, threshold=2, delay=10, window=100)."""

    def _make(height: int = 1, creator: str = CAROL, **overrides: int) -> bytes:
        params = {
            "min_amount": 1000,
            "max_amount": 10000,
            "activation_threshold": 2,
            "execution_delay": 10,
            "execution_window": 100,
        }
        params.update(overrides)
        return exchange.create_mixing_pool(CallContext(caller=creator, height=height), **params)

    return _make
