"""Swap Engine: HTLC lifecycle: initiate, claim, refund.

Coordinates between:
    - Domain state machine (transition guard)
    - Ledger store (all-or-nothing transactions)
    - Governance treasury (protocol fee credit on initiation)

Preconditions are checked in a fixed order and the first failure raises.
Because every write goes through one ledger transaction, a failure leaves
the ledger untouched.

State machine:
    PENDING -> CLAIMED   (hash-lock + quorum + not expired)
    PENDING -> REFUNDED  (expiration height reached)
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from atomic_exchange.domain.enums import EventType
from atomic_exchange.domain.exceptions import (
    InsufficientFundsError,
    InvalidHashError,
    InvalidParticipantError,
    InvalidSignatureError,
    SwapExistsError,
    SwapExpiredError,
    TimelockActiveError,
    TimelockExpiredError,
    UnauthorizedError,
)
from atomic_exchange.domain.fees import FeeSchedule
from atomic_exchange.domain.identifiers import derive_swap_id, sha256_digest
from atomic_exchange.domain.models import Swap, SwapStatusReport
from atomic_exchange.domain.state_machine import SwapStateMachine
from atomic_exchange.infrastructure.ledger.keys import SwapKey
from atomic_exchange.logging_config import get_logger
from atomic_exchange.services.guards import (
    fire_transition,
    load_swap,
    require_pending,
    require_unsigned,
)

if TYPE_CHECKING:
    from atomic_exchange.config import ProtocolConstants
    from atomic_exchange.domain.context import CallContext
    from atomic_exchange.domain.identifiers import Digest
    from atomic_exchange.infrastructure.ledger.store import LedgerStore
    from atomic_exchange.services.governance_service import GovernanceTreasury

logger = get_logger(__name__)

# Only the initiator and the participant may approve a swap.
SWAP_PARTIES = 2


class SwapEngine:
    """Owns the hash-lock and time-lock rules of a swap."""

    def __init__(
        self,
        store: LedgerStore,
        treasury: GovernanceTreasury,
        constants: ProtocolConstants,
        digest: Digest = sha256_digest,
    ) -> None:
        self._store = store
        self._treasury = treasury
        self._constants = constants
        self._digest = digest
        self._fees = FeeSchedule(
            mixer_bps=constants.mixer_fee_bps,
            protocol_bps=constants.protocol_fee_bps,
            denominator=constants.fee_denominator,
        )

    @property
    def fees(self) -> FeeSchedule:
        return self._fees

    # ------------------------------------------------------------------
    # Initiation
    # ------------------------------------------------------------------

    def initiate(
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
    ) -> Swap:
        """Create a PENDING swap and credit its protocol fee to the treasury."""
        require_unsigned(
            amount=amount,
            time_lock=time_lock,
            multi_sig_required=multi_sig_required,
            privacy_level=privacy_level,
        )

        if amount < self._constants.min_swap_amount:
            raise InsufficientFundsError(
                f"Amount {amount} is below the minimum swap amount "
                f"{self._constants.min_swap_amount}"
            )
        if time_lock > self._constants.max_timeout_blocks:
            raise TimelockExpiredError(
                f"Time-lock {time_lock} exceeds the maximum of "
                f"{self._constants.max_timeout_blocks} blocks"
            )
        if ctx.caller == participant:
            raise InvalidParticipantError("Initiator and participant must differ")
        if self._constants.count_distinct_signers and multi_sig_required > SWAP_PARTIES:
            raise InvalidParticipantError(
                f"Multi-sig requirement {multi_sig_required} can never be met; "
                f"at most {SWAP_PARTIES} distinct parties can approve"
            )

        swap_id = derive_swap_id(
            ctx.caller, participant, ctx.height, hash_lock, digest=self._digest
        )
        swap_fee, protocol_fee = self._fees.quote(amount)

        with self._store.transaction(EventType.SWAP_INITIATED, ctx.height) as txn:
            # Terminal swaps block re-use of their ID as well; records are never deleted.
            if txn.exists(SwapKey(swap_id)):
                raise SwapExistsError(swap_id.hex())

            swap = Swap(
                swap_id=swap_id,
                initiator=ctx.caller,
                participant=participant,
                amount=amount,
                hash_lock=hash_lock,
                time_lock=time_lock,
                swap_token=swap_token,
                target_chain=target_chain,
                target_address=target_address,
                multi_sig_required=multi_sig_required,
                privacy_level=privacy_level,
                creation_height=ctx.height,
                expiration_height=ctx.height + time_lock,
                swap_fee=swap_fee,
                protocol_fee=protocol_fee,
            )
            txn.put(SwapKey(swap_id), swap)
            self._treasury.credit(txn, protocol_fee)

        logger.info(
            "swap.initiated",
            swap_id=swap_id.hex(),
            initiator=ctx.caller,
            participant=participant,
            amount=amount,
            expiration_height=swap.expiration_height,
            protocol_fee=protocol_fee,
        )
        return swap

    # ------------------------------------------------------------------
    # Claim
    # ------------------------------------------------------------------

    def claim(self, ctx: CallContext, swap_id: bytes, preimage: bytes) -> Swap:
        """Reveal the pre-image and move the swap to CLAIMED."""
        with self._store.transaction(EventType.SWAP_CLAIMED, ctx.height) as txn:
            swap = load_swap(txn, swap_id)

            if ctx.caller != swap.participant:
                raise UnauthorizedError(ctx.caller, "claim this swap")
            require_pending(swap)
            if self._digest(preimage) != swap.hash_lock:
                raise InvalidHashError("Pre-image does not match the hash-lock")
            if self._constants.enforce_raw_timelock_bound and ctx.height >= swap.time_lock:
                raise TimelockExpiredError(
                    f"Height {ctx.height} is not below the raw time-lock {swap.time_lock}"
                )
            if ctx.height >= swap.expiration_height:
                raise SwapExpiredError(
                    f"Swap expired at height {swap.expiration_height}"
                )
            if not swap.quorum_met:
                raise InvalidSignatureError(
                    f"Quorum not met: {swap.multi_sig_provided} of "
                    f"{swap.multi_sig_required} approvals"
                )

            fire_transition(SwapStateMachine, swap.status, "claim")
            claimed = replace(swap, claimed=True)
            txn.put(SwapKey(swap_id), claimed)

        logger.info("swap.claimed", swap_id=swap_id.hex(), participant=ctx.caller)
        return claimed

    # ------------------------------------------------------------------
    # Refund
    # ------------------------------------------------------------------

    def refund(self, ctx: CallContext, swap_id: bytes) -> Swap:
        """Return an expired swap to its initiator."""
        with self._store.transaction(EventType.SWAP_REFUNDED, ctx.height) as txn:
            swap = load_swap(txn, swap_id)

            if ctx.caller != swap.initiator:
                raise UnauthorizedError(ctx.caller, "refund this swap")
            require_pending(swap)
            if ctx.height < swap.expiration_height:
                raise TimelockActiveError(
                    f"Time-lock active until height {swap.expiration_height}"
                )

            fire_transition(SwapStateMachine, swap.status, "refund")
            refunded = replace(swap, refunded=True)
            txn.put(SwapKey(swap_id), refunded)

        logger.info("swap.refunded", swap_id=swap_id.hex(), initiator=ctx.caller)
        return refunded

    # ------------------------------------------------------------------
    # Read helpers (never mutate)
    # ------------------------------------------------------------------

    def get_swap(self, swap_id: bytes) -> Swap | None:
        return self._store.get(SwapKey(swap_id))

    def is_claimable(self, swap_id: bytes, height: int) -> bool:
        swap = self.get_swap(swap_id)
        return swap is not None and self._claimable(swap, height)

    def is_refundable(self, swap_id: bytes, height: int) -> bool:
        swap = self.get_swap(swap_id)
        return swap is not None and not swap.is_terminal and height >= swap.expiration_height

    def status(self, swap_id: bytes, height: int) -> SwapStatusReport:
        swap = self.get_swap(swap_id)
        if swap is None:
            return SwapStatusReport(exists=False)
        return SwapStatusReport(
            exists=True,
            claimed=swap.claimed,
            refunded=swap.refunded,
            expired=height >= swap.expiration_height,
            claimable=self._claimable(swap, height),
            refundable=not swap.is_terminal and height >= swap.expiration_height,
            status=swap.status.value,
            multi_sig_provided=swap.multi_sig_provided,
            multi_sig_required=swap.multi_sig_required,
        )

    def _claimable(self, swap: Swap, height: int) -> bool:
        if swap.is_terminal or height >= swap.expiration_height:
            return False
        if self._constants.enforce_raw_timelock_bound and height >= swap.time_lock:
            return False
        return swap.quorum_met
