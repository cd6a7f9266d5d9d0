"""Confidential Proof Gateway.

Forwards opaque proof bytes, with the canonical encoding of the swap they
refer to, to the injected ProofVerifier. Accepted proofs are stored, one
record per swap; a later accepted proof overwrites the earlier one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from atomic_exchange.domain.enums import EventType
from atomic_exchange.domain.exceptions import InvalidProofError
from atomic_exchange.domain.identifiers import encode_swap
from atomic_exchange.domain.models import ConfidentialProof
from atomic_exchange.domain.verifier_protocol import ProofRequest
from atomic_exchange.infrastructure.ledger.keys import ProofKey
from atomic_exchange.logging_config import get_logger
from atomic_exchange.services.guards import load_swap, require_party, require_pending

if TYPE_CHECKING:
    from atomic_exchange.domain.context import CallContext
    from atomic_exchange.domain.verifier_protocol import ProofVerifier
    from atomic_exchange.infrastructure.ledger.store import LedgerStore

logger = get_logger(__name__)


class ConfidentialProofGateway:
    """Verifies and stores per-swap proofs."""

    def __init__(self, store: LedgerStore, verifier: ProofVerifier) -> None:
        self._store = store
        self._verifier = verifier

    def submit_proof(self, ctx: CallContext, swap_id: bytes, proof: bytes) -> ConfidentialProof:
        with self._store.transaction(EventType.PROOF_SUBMITTED, ctx.height) as txn:
            swap = load_swap(txn, swap_id)
            require_party(swap, ctx.caller, "submit a proof for this swap")
            require_pending(swap)

            result = self._verifier.verify_proof(
                ProofRequest(
                    swap_id=swap_id,
                    prover=ctx.caller,
                    proof=proof,
                    swap_encoding=encode_swap(swap),
                )
            )
            if not result.is_valid:
                raise InvalidProofError(result.details or "Proof rejected")

            record = ConfidentialProof(
                swap_id=swap_id,
                proof=proof,
                verified=True,
                verification_height=ctx.height,
            )
            txn.put(ProofKey(swap_id), record)

        logger.info(
            "proof.verified",
            swap_id=swap_id.hex(),
            prover=ctx.caller,
            proof_length=len(proof),
        )
        return record

    def get_proof(self, swap_id: bytes) -> ConfidentialProof | None:
        return self._store.get(ProofKey(swap_id))
