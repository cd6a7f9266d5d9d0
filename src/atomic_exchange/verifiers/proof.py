"""Placeholder proof verifier.

Accepts any non-empty proof. This mirrors the behaviour the protocol shipped
with and exists so the gateway has a default; it proves nothing. Inject a
real ProofVerifier for confidential swaps.
"""

from __future__ import annotations

from atomic_exchange.domain.verifier_protocol import ProofRequest, VerificationResult


class NonEmptyProofVerifier:
    """Accepts a proof iff it has at least one byte."""

    def verify_proof(self, request: ProofRequest) -> VerificationResult:
        if not request.proof:
            return VerificationResult(is_valid=False, details="Proof is empty")
        return VerificationResult(
            is_valid=True,
            details="Proof is non-empty (placeholder check)",
            logs={"verifier": "non_empty", "proof_length": len(request.proof)},
        )
