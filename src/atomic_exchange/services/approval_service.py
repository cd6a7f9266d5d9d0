"""Multi-Sig Approval Tracker.

Records per-signer approvals of a swap and maintains the swap's approval
counter, which the Swap Engine compares against ``multi_sig_required``
when claiming.

Only the swap's two parties may approve. Every signature is passed to the
injected SignatureVerifier before anything is recorded.

By default the counter moves only on a signer's first approval; setting
``count_distinct_signers`` to False counts every call. Either way it never
exceeds ``max(multi_sig_required, 1)``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from atomic_exchange.domain.enums import EventType
from atomic_exchange.domain.exceptions import InvalidSignatureError, SwapExpiredError
from atomic_exchange.domain.identifiers import encode_swap
from atomic_exchange.domain.models import MultiSigApproval
from atomic_exchange.domain.verifier_protocol import SignatureRequest
from atomic_exchange.infrastructure.ledger.keys import ApprovalKey, SwapKey
from atomic_exchange.logging_config import get_logger
from atomic_exchange.services.guards import load_swap, require_party, require_pending

if TYPE_CHECKING:
    from atomic_exchange.config import ProtocolConstants
    from atomic_exchange.domain.context import CallContext
    from atomic_exchange.domain.verifier_protocol import SignatureVerifier
    from atomic_exchange.infrastructure.ledger.store import LedgerStore

logger = get_logger(__name__)


class MultiSigApprovalTracker:
    """Approval records keyed by (swap_id, signer)."""

    def __init__(
        self,
        store: LedgerStore,
        verifier: SignatureVerifier,
        constants: ProtocolConstants,
    ) -> None:
        self._store = store
        self._verifier = verifier
        self._constants = constants

    def approve(self, ctx: CallContext, swap_id: bytes, signature: bytes) -> MultiSigApproval:
        """Record the caller's approval and bump the swap's counter."""
        with self._store.transaction(EventType.SWAP_APPROVED, ctx.height) as txn:
            swap = load_swap(txn, swap_id)
            require_party(swap, ctx.caller, "approve this swap")
            require_pending(swap)
            if ctx.height >= swap.expiration_height:
                raise SwapExpiredError(f"Swap expired at height {swap.expiration_height}")

            result = self._verifier.verify_signature(
                SignatureRequest(
                    swap_id=swap_id,
                    signer=ctx.caller,
                    signature=signature,
                    message=encode_swap(swap),
                )
            )
            if not result.is_valid:
                raise InvalidSignatureError(result.details or "Signature rejected")

            key = ApprovalKey(swap_id, ctx.caller)
            previous = txn.get(key)
            approval = MultiSigApproval(
                swap_id=swap_id,
                signer=ctx.caller,
                signature=signature,
                approved=True,
                approval_height=ctx.height,
            )
            txn.put(key, approval)

            counts = not (
                self._constants.count_distinct_signers
                and previous is not None
                and previous.approved
            )
            ceiling = max(swap.multi_sig_required, 1)
            provided = swap.multi_sig_provided
            if counts and provided < ceiling:
                provided += 1
                txn.put(SwapKey(swap_id), replace(swap, multi_sig_provided=provided))

        logger.info(
            "swap.approved",
            swap_id=swap_id.hex(),
            signer=ctx.caller,
            provided=provided,
            required=swap.multi_sig_required,
            repeat=previous is not None,
        )
        return approval

    def get_approval(self, swap_id: bytes, signer: str) -> MultiSigApproval | None:
        return self._store.get(ApprovalKey(swap_id, signer))

    def has_quorum(self, swap_id: bytes) -> bool:
        swap = self._store.get(SwapKey(swap_id))
        return swap is not None and swap.quorum_met
