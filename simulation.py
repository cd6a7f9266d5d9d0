#!/usr/bin/env python3
"""Atomic Exchange: End-to-End Simulation.

Drives an AtomicExchange through five scenarios with two trader bots:

    Scenario 1: Happy Path
        - Alice locks funds behind a fresh secret
        - Bob claims with the revealed preimage -> CLAIMED

    Scenario 2: Refund After Expiry
        - Alice locks funds with a short time-lock and never reveals the secret
        - Bob's refund attempt is rejected; Alice refunds once it expires -> REFUNDED

    Scenario 3: Multi-Sig Quorum
        - Swap requires two approvals
        - Claim before quorum fails; both parties approve; claim succeeds

    Scenario 4: Mixing Pool
        - Carol opens a pool; Alice and Bob join and activate it
        - A late joiner is turned away; Alice withdraws inside the window

    Scenario 5: Fee Treasury
        - Protocol fees accrued by the swaps above are withdrawn by the admin

Usage:
    # In-memory journal:
    python simulation.py

    # Persist the journal to SQLite:
    python simulation.py --journal sqlite:///simulation.db

    # Mock verifiers (every signature and proof passes):
    python simulation.py --dry-run

    # Run a specific scenario:
    python simulation.py --scenario 3
"""

from __future__ import annotations

import argparse
from collections.abc import Callable
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Configure structured logging BEFORE importing app modules
# ---------------------------------------------------------------------------
from atomic_exchange.logging_config import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False)
logger = get_logger("simulation")

from atomic_exchange.config import Settings  # noqa: E402
from atomic_exchange.domain.context import CallContext  # noqa: E402
from atomic_exchange.domain.exceptions import AtomicExchangeError  # noqa: E402
from atomic_exchange.domain.identifiers import generate_secret  # noqa: E402
from atomic_exchange.services.exchange import AtomicExchange  # noqa: E402

TARGET_ADDRESS = bytes.fromhex("02" + "12" * 32)
SIGNATURE = b"\x11" * 65


# ---------------------------------------------------------------------------
# Trader Bots
# ---------------------------------------------------------------------------
@dataclass
class TraderBot:
    """A simulated party that initiates, approves, claims and refunds swaps."""

    identity: str
    exchange: AtomicExchange

    def _ctx(self) -> CallContext:
        return self.exchange.clock.context(self.identity)

    def initiate(
        self,
        counterparty: str,
        amount: int,
        hash_lock: bytes,
        time_lock: int,
        multi_sig_required: int = 1,
    ) -> bytes:
        swap_id = self.exchange.initiate_swap(
            self._ctx(),
            participant=counterparty,
            amount=amount,
            hash_lock=hash_lock,
            time_lock=time_lock,
            swap_token="STX",
            target_chain="BTC",
            target_address=TARGET_ADDRESS,
            multi_sig_required=multi_sig_required,
        )
        swap = self.exchange.get_swap(swap_id)
        print(f"  🔵 {self.identity}: locked {amount} for {counterparty}")
        print(f"     swap {swap_id.hex()[:16]}... expires at height {swap.expiration_height}")
        return swap_id

    def approve(self, swap_id: bytes) -> None:
        self.exchange.approve_multi_sig_swap(self._ctx(), swap_id, SIGNATURE)
        swap = self.exchange.get_swap(swap_id)
        print(
            f"  ✍️  {self.identity}: approved "
            f"({swap.multi_sig_provided}/{swap.multi_sig_required})"
        )

    def claim(self, swap_id: bytes, preimage: bytes) -> None:
        self.exchange.claim_swap(self._ctx(), swap_id, preimage)
        print(f"  🟢 {self.identity}: claimed with preimage {preimage.hex()[:16]}...")

    def refund(self, swap_id: bytes) -> None:
        self.exchange.refund_swap(self._ctx(), swap_id)
        print(f"  🟠 {self.identity}: refunded")


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------
def banner(text: str) -> None:
    """Print a prominent banner."""
    print("\n" + "=" * 70)
    print(f"  {text}")
    print("=" * 70)


def section(text: str) -> None:
    """Print a section header."""
    print(f"\n--- {text} ---\n")


def expect_rejection(label: str, action: Callable[[], object]) -> None:
    """Run an action that the protocol must refuse, and show why."""
    try:
        action()
    except AtomicExchangeError as exc:
        print(f"  ❌ {label}: {exc.code} ({exc.message})")
        return
    raise RuntimeError(f"{label} was expected to fail")


def print_status(exchange: AtomicExchange, swap_id: bytes) -> None:
    report = exchange.get_swap_status(swap_id)
    print(
        f"  Status: {report.status}  claimable={report.claimable}  "
        f"refundable={report.refundable}  height={exchange.clock.current}"
    )


def print_audit_trail(exchange: AtomicExchange, since: int = 0) -> None:
    """Print journal entries committed after the given batch."""
    print("\n  📜 Audit Trail:")
    for entry in exchange.get_journal():
        if entry.batch > since:
            print(
                f"    {entry.batch}. [{entry.operation}] {entry.key_kind} "
                f"v{entry.version} @ height {entry.height}"
            )
    print()


def _last_batch(exchange: AtomicExchange) -> int:
    return max((entry.batch for entry in exchange.get_journal()), default=0)


# ===========================================================================
# Scenarios
# ===========================================================================
def scenario_1_happy_path(exchange: AtomicExchange) -> None:
    banner("SCENARIO 1: Happy Path (Lock -> Reveal -> Claim)")
    start = _last_batch(exchange)
    alice = TraderBot("alice", exchange)
    bob = TraderBot("bob", exchange)

    section("Step 1: Alice generates a secret and locks funds")
    preimage, hash_lock = generate_secret()
    exchange.clock.advance()
    swap_id = alice.initiate("bob", amount=50000, hash_lock=hash_lock, time_lock=144)
    print_status(exchange, swap_id)

    section("Step 2: Bob claims with the revealed preimage")
    exchange.clock.advance()
    bob.claim(swap_id, preimage)
    print_status(exchange, swap_id)

    print_audit_trail(exchange, since=start)


def scenario_2_refund(exchange: AtomicExchange) -> None:
    banner("SCENARIO 2: Refund After Expiry")
    start = _last_batch(exchange)
    alice = TraderBot("alice", exchange)
    bob = TraderBot("bob", exchange)

    section("Step 1: Alice locks funds with a short time-lock")
    _, hash_lock = generate_secret()
    exchange.clock.advance()
    swap_id = alice.initiate("bob", amount=20000, hash_lock=hash_lock, time_lock=6)

    section("Step 2: Alice refunds too early")
    exchange.clock.advance()
    expect_rejection("Early refund", lambda: alice.refund(swap_id))

    section("Step 3: The time-lock expires")
    exchange.clock.advance(10)
    print_status(exchange, swap_id)
    expect_rejection("Refund by Bob", lambda: bob.refund(swap_id))
    alice.refund(swap_id)
    print_status(exchange, swap_id)

    print_audit_trail(exchange, since=start)


def scenario_3_multi_sig(exchange: AtomicExchange) -> None:
    banner("SCENARIO 3: Multi-Sig Quorum")
    start = _last_batch(exchange)
    alice = TraderBot("alice", exchange)
    bob = TraderBot("bob", exchange)

    section("Step 1: Swap requiring two approvals")
    preimage, hash_lock = generate_secret()
    exchange.clock.advance()
    swap_id = alice.initiate(
        "bob", amount=30000, hash_lock=hash_lock, time_lock=144, multi_sig_required=2
    )

    section("Step 2: Claim before quorum")
    exchange.clock.advance()
    alice.approve(swap_id)
    expect_rejection("Claim with one approval", lambda: bob.claim(swap_id, preimage))

    section("Step 3: Second approval, then claim")
    exchange.clock.advance()
    bob.approve(swap_id)
    bob.claim(swap_id, preimage)
    print_status(exchange, swap_id)

    print_audit_trail(exchange, since=start)


def scenario_4_mixing_pool(exchange: AtomicExchange) -> None:
    banner("SCENARIO 4: Mixing Pool")
    start = _last_batch(exchange)

    section("Step 1: Carol opens a pool")
    exchange.clock.advance()
    pool_id = exchange.create_mixing_pool(
        exchange.clock.context("carol"),
        min_amount=1000,
        max_amount=10000,
        activation_threshold=2,
        execution_delay=5,
        execution_window=20,
    )
    pool = exchange.get_mixing_pool(pool_id)
    print(f"  🟣 carol: pool {pool_id.hex()[:16]}... threshold {pool.activation_threshold}")
    print(f"     withdrawal window [{pool.window_opens_at}, {pool.window_closes_at}]")

    section("Step 2: Alice and Bob join")
    exchange.clock.advance()
    first = exchange.join_mixing_pool(
        exchange.clock.context("alice"), pool_id, 4000, bytes.fromhex("03" + "aa" * 32)
    )
    second = exchange.join_mixing_pool(
        exchange.clock.context("bob"), pool_id, 6000, bytes.fromhex("03" + "bb" * 32)
    )
    print(f"  alice -> slot {first.participant_id}, bob -> slot {second.participant_id}")
    print(f"  Pool active: {second.pool.active}  total: {second.pool.total_amount}")

    section("Step 3: A late joiner and a windowed withdrawal")
    expect_rejection(
        "Late join by dave",
        lambda: exchange.join_mixing_pool(
            exchange.clock.context("dave"), pool_id, 2000, bytes.fromhex("03" + "dd" * 32)
        ),
    )
    expect_rejection(
        "Withdrawal before the window",
        lambda: exchange.withdraw_from_mixer(exchange.clock.context("alice"), pool_id, 0),
    )
    exchange.clock.advance(pool.window_opens_at - exchange.clock.current)
    exchange.withdraw_from_mixer(exchange.clock.context("alice"), pool_id, 0)
    print(f"  🟢 alice: withdrew slot 0 at height {exchange.clock.current}")

    print_audit_trail(exchange, since=start)


def scenario_5_treasury(exchange: AtomicExchange) -> None:
    banner("SCENARIO 5: Fee Treasury")
    admin = exchange.get_contract_admin()

    section("Step 1: Accrued protocol fees")
    balance = exchange.get_protocol_fee_balance()
    print(f"  Admin: {admin}  balance: {balance}  version: {exchange.get_contract_version()}")

    section("Step 2: Withdrawals")
    expect_rejection(
        "Withdrawal by alice",
        lambda: exchange.withdraw_protocol_fees(exchange.clock.context("alice"), 1),
    )
    if balance:
        state = exchange.withdraw_protocol_fees(exchange.clock.context(admin), balance)
        print(f"  🏦 {admin}: withdrew {balance}, balance now {state.fee_balance}")


SCENARIOS: dict[int, Callable[[AtomicExchange], None]] = {
    1: scenario_1_happy_path,
    2: scenario_2_refund,
    3: scenario_3_multi_sig,
    4: scenario_4_mixing_pool,
    5: scenario_5_treasury,
}


# ===========================================================================
# Main
# ===========================================================================
def build_exchange(journal_url: str = "", dry_run: bool = False) -> AtomicExchange:
    """Build an exchange from settings, optionally with mock verifiers."""
    overrides: dict[str, object] = {"journal_url": journal_url}
    if dry_run:
        overrides.update(signature_verifier="mock", proof_verifier="mock")
    return AtomicExchange.from_settings(Settings(**overrides))


def run(scenarios: list[int], journal_url: str = "", dry_run: bool = False) -> None:
    exchange = build_exchange(journal_url=journal_url, dry_run=dry_run)
    try:
        print("\n" + "🚀" * 35)
        print("  ATOMIC EXCHANGE: SIMULATION")
        print(f"  Journal: {journal_url or 'in-memory'}")
        print(f"  Mode: {'DRY-RUN (mock verifiers)' if dry_run else 'STANDARD'}")
        print("🚀" * 35 + "\n")

        for num in scenarios:
            SCENARIOS[num](exchange)

        print("\n" + "=" * 70)
        print("  ✅ ALL SCENARIOS COMPLETED")
        print("=" * 70 + "\n")
    finally:
        exchange.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Atomic Exchange Simulation")
    parser.add_argument(
        "--scenario",
        type=int,
        default=0,
        choices=[0, *SCENARIOS],
        help="Run a specific scenario (1-5). Default: run all.",
    )
    parser.add_argument(
        "--journal",
        default="",
        help="SQLAlchemy URL for a persistent journal, e.g. sqlite:///simulation.db.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Use mock verifiers so every signature and proof passes.",
    )
    args = parser.parse_args()

    selected = list(SCENARIOS) if args.scenario == 0 else [args.scenario]
    run(selected, journal_url=args.journal, dry_run=args.dry_run)
