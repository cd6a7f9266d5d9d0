"""Verifier Strategy Protocols.

Defines the capabilities the core calls for signature and proof checks.
These are Protocols (structural subtyping) so concrete verifiers don't need
to inherit from a base class, they just need to match the shape.

The domain layer owns no cryptography. A production deployment swaps in
genuine verification without touching the swap state machine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class SignatureRequest:
    """Input to a signature verifier.

    Attributes:
        swap_id: The swap being approved.
        signer: Identity of the approving caller.
        signature: Opaque signature buffer supplied with the approval.
        message: Canonical swap encoding the signature is expected to cover.
    """

    swap_id: bytes
    signer: str
    signature: bytes
    message: bytes


@dataclass(frozen=True)
class ProofRequest:
    """Input to a proof verifier.

    Attributes:
        swap_id: The swap the proof refers to.
        prover: Identity of the submitting caller.
        proof: Opaque proof bytes.
        swap_encoding: Canonical encoding of the swap record.
    """

    swap_id: bytes
    prover: str
    proof: bytes
    swap_encoding: bytes


@dataclass(frozen=True)
class VerificationResult:
    """Output from a verifier.

    Attributes:
        is_valid: Whether the signature or proof is accepted.
        details: Human-readable explanation of the result.
        logs: Verifier-specific diagnostics.
    """

    is_valid: bool
    details: str = ""
    logs: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "details": self.details,
            "logs": self.logs,
        }


@runtime_checkable
class SignatureVerifier(Protocol):
    """Protocol that multi-sig approval verifiers must satisfy.

    Concrete implementations:
        - verifiers/signature.py  (FixedWidthSignatureVerifier)
        - verifiers/__init__.py   (MockVerifier)
    """

    def verify_signature(self, request: SignatureRequest) -> VerificationResult:
        """Check an approval signature before it is recorded."""
        ...


@runtime_checkable
class ProofVerifier(Protocol):
    """Protocol that confidential proof verifiers must satisfy.

    Concrete implementations:
        - verifiers/proof.py      (NonEmptyProofVerifier)
        - verifiers/__init__.py   (MockVerifier)
    """

    def verify_proof(self, request: ProofRequest) -> VerificationResult:
        """Check a proof against the canonical swap encoding."""
        ...
