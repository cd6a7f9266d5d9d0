"""AtomicExchange: one entry point over every component.

Wires the Swap Engine, Multi-Sig Approval Tracker, Confidential Proof
Gateway, Mixing Pool Engine and Governance Treasury onto a single ledger
store, and owns the logical clock. Both the REST routes and direct Python
callers go through this class, so height monotonicity and call logging are
enforced in one place.

Mutating operations take a CallContext (caller + height). Read-only queries
take an optional height and default to the clock's current height.
A call below the current height is rejected up front; the clock only
moves to a call's height once that call has committed, so a failed call
leaves it unchanged.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from atomic_exchange.config import ProtocolConstants
from atomic_exchange.domain.context import CallContext, LogicalClock
from atomic_exchange.domain.identifiers import sha256_digest
from atomic_exchange.infrastructure.ledger.journal import open_journal
from atomic_exchange.infrastructure.ledger.store import LedgerStore
from atomic_exchange.logging_config import bind_call, get_logger
from atomic_exchange.services.approval_service import MultiSigApprovalTracker
from atomic_exchange.services.governance_service import GovernanceTreasury
from atomic_exchange.services.pool_service import MixingPoolEngine
from atomic_exchange.services.proof_service import ConfidentialProofGateway
from atomic_exchange.services.swap_service import SwapEngine
from atomic_exchange.verifiers import (
    FixedWidthSignatureVerifier,
    NonEmptyProofVerifier,
    VerifierFactory,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from atomic_exchange.config import Settings
    from atomic_exchange.domain.identifiers import Digest
    from atomic_exchange.domain.models import (
        ConfidentialProof,
        GovernanceState,
        JoinReceipt,
        MixerParticipant,
        MixingPool,
        MultiSigApproval,
        Swap,
        SwapStatusReport,
    )
    from atomic_exchange.domain.verifier_protocol import ProofVerifier, SignatureVerifier
    from atomic_exchange.infrastructure.ledger.journal import JournalEntry

logger = get_logger(__name__)


class AtomicExchange:
    """The full swap / pool / governance surface."""

    def __init__(
        self,
        store: LedgerStore | None = None,
        constants: ProtocolConstants | None = None,
        admin: str = "deployer",
        signature_verifier: SignatureVerifier | None = None,
        proof_verifier: ProofVerifier | None = None,
        clock: LogicalClock | None = None,
        digest: Digest = sha256_digest,
    ) -> None:
        self.store = store if store is not None else LedgerStore()
        self.constants = constants or ProtocolConstants()
        self.clock = clock or LogicalClock()

        self.governance = GovernanceTreasury(self.store, initial_admin=admin)
        self.swaps = SwapEngine(self.store, self.governance, self.constants, digest=digest)
        self.approvals = MultiSigApprovalTracker(
            self.store,
            signature_verifier or FixedWidthSignatureVerifier(),
            self.constants,
        )
        self.proofs = ConfidentialProofGateway(
            self.store, proof_verifier or NonEmptyProofVerifier()
        )
        self.pools = MixingPoolEngine(self.store, self.constants, digest=digest)

    @classmethod
    def from_settings(cls, settings: Settings) -> AtomicExchange:
        """Build an exchange from configuration, replaying any persisted journal."""
        journal = open_journal(
            settings.journal_url,
            echo=settings.journal_echo_sql,
            retry_attempts=settings.journal_retry_attempts,
        )
        store = LedgerStore.replay(journal)
        last_height = max((e.height for e in journal.entries()), default=0)
        exchange = cls(
            store=store,
            constants=settings.protocol_constants(),
            admin=settings.admin_identity,
            signature_verifier=VerifierFactory.create_signature_verifier(
                settings.signature_verifier, length=settings.signature_length
            ),
            proof_verifier=VerifierFactory.create_proof_verifier(settings.proof_verifier),
            clock=LogicalClock(start=last_height),
        )
        logger.info(
            "exchange.ready",
            version=exchange.constants.contract_version,
            height=exchange.clock.current,
            keys=len(store),
        )
        return exchange

    def close(self) -> None:
        self.store.journal.close()

    @contextmanager
    def _call(self, ctx: CallContext) -> Iterator[None]:
        """Run one mutating call; the clock only moves once the call succeeds."""
        self.clock.check(ctx.height)
        bind_call(ctx.caller, ctx.height)
        yield
        self.clock.settle(ctx.height)

    def _height(self, height: int | None) -> int:
        return self.clock.current if height is None else height

    # ------------------------------------------------------------------
    # Swaps
    # ------------------------------------------------------------------

    def initiate_swap(
        self,
        ctx: CallContext,
        participant: str,
        amount: int,
        hash_lock: bytes,
        time_lock: int,
        swap_token: str,
        target_chain: str,
        target_address: bytes,
        multi_sig_required: int = 1,
        privacy_level: int = 0,
    ) -> bytes:
        """Create a swap and return its derived ID."""
        with self._call(ctx):
            swap = self.swaps.initiate(
                ctx,
                participant=participant,
                amount=amount,
                hash_lock=hash_lock,
                time_lock=time_lock,
                swap_token=swap_token,
                target_chain=target_chain,
                target_address=target_address,
                multi_sig_required=multi_sig_required,
                privacy_level=privacy_level,
            )
        return swap.swap_id

    def claim_swap(self, ctx: CallContext, swap_id: bytes, preimage: bytes) -> Swap:
        with self._call(ctx):
            return self.swaps.claim(ctx, swap_id, preimage)

    def refund_swap(self, ctx: CallContext, swap_id: bytes) -> Swap:
        with self._call(ctx):
            return self.swaps.refund(ctx, swap_id)

    def approve_multi_sig_swap(
        self, ctx: CallContext, swap_id: bytes, signature: bytes
    ) -> MultiSigApproval:
        with self._call(ctx):
            return self.approvals.approve(ctx, swap_id, signature)

    def submit_zk_proof(self, ctx: CallContext, swap_id: bytes, proof: bytes) -> ConfidentialProof:
        with self._call(ctx):
            return self.proofs.submit_proof(ctx, swap_id, proof)

    # ------------------------------------------------------------------
    # Mixing pools
    # ------------------------------------------------------------------

    def create_mixing_pool(
        self,
        ctx: CallContext,
        min_amount: int,
        max_amount: int,
        activation_threshold: int,
        execution_delay: int,
        execution_window: int,
    ) -> bytes:
        """Create a pool and return its derived ID."""
        with self._call(ctx):
            pool = self.pools.create_pool(
                ctx,
                min_amount=min_amount,
                max_amount=max_amount,
                activation_threshold=activation_threshold,
                execution_delay=execution_delay,
                execution_window=execution_window,
            )
        return pool.pool_id

    def join_mixing_pool(
        self, ctx: CallContext, pool_id: bytes, amount: int, blinded_output_address: bytes
    ) -> JoinReceipt:
        with self._call(ctx):
            return self.pools.join_pool(ctx, pool_id, amount, blinded_output_address)

    def withdraw_from_mixer(
        self, ctx: CallContext, pool_id: bytes, participant_id: int
    ) -> MixerParticipant:
        with self._call(ctx):
            return self.pools.withdraw(ctx, pool_id, participant_id)

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------

    def set_contract_admin(self, ctx: CallContext, new_admin: str) -> GovernanceState:
        with self._call(ctx):
            return self.governance.set_admin(ctx, new_admin)

    def withdraw_protocol_fees(self, ctx: CallContext, amount: int) -> GovernanceState:
        with self._call(ctx):
            return self.governance.withdraw_fees(ctx, amount)

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------

    def get_swap(self, swap_id: bytes) -> Swap | None:
        return self.swaps.get_swap(swap_id)

    def get_confidential_proof(self, swap_id: bytes) -> ConfidentialProof | None:
        return self.proofs.get_proof(swap_id)

    def get_multi_sig_approval(self, swap_id: bytes, signer: str) -> MultiSigApproval | None:
        return self.approvals.get_approval(swap_id, signer)

    def get_mixing_pool(self, pool_id: bytes) -> MixingPool | None:
        return self.pools.get_pool(pool_id)

    def get_mixer_participant(self, pool_id: bytes, participant_id: int) -> MixerParticipant | None:
        return self.pools.get_participant(pool_id, participant_id)

    def get_contract_admin(self) -> str:
        return self.governance.get_admin()

    def get_protocol_fee_balance(self) -> int:
        return self.governance.get_fee_balance()

    def get_contract_version(self) -> str:
        return self.constants.contract_version

    def is_swap_claimable(self, swap_id: bytes, height: int | None = None) -> bool:
        return self.swaps.is_claimable(swap_id, self._height(height))

    def is_swap_refundable(self, swap_id: bytes, height: int | None = None) -> bool:
        return self.swaps.is_refundable(swap_id, self._height(height))

    def get_swap_status(self, swap_id: bytes, height: int | None = None) -> SwapStatusReport:
        return self.swaps.status(swap_id, self._height(height))

    def get_journal(self) -> list[JournalEntry]:
        """The append-only audit trail of committed operations."""
        return self.store.journal.entries()
