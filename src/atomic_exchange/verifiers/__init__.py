"""Verification strategy implementations and factory.

Three strategies:
    - FixedWidthSignatureVerifier: Structural width check on approval signatures
    - NonEmptyProofVerifier:       Placeholder proof check (non-empty bytes)
    - MockVerifier:                Configurable pass/fail for dry runs; satisfies
                                   both SignatureVerifier and ProofVerifier

The VerifierFactory builds the configured strategy by name
(Settings.signature_verifier / Settings.proof_verifier).
"""

from collections import deque

from atomic_exchange.domain.enums import VerifierType
from atomic_exchange.domain.verifier_protocol import (
    ProofRequest,
    ProofVerifier,
    SignatureRequest,
    SignatureVerifier,
    VerificationResult,
)
from atomic_exchange.verifiers.proof import NonEmptyProofVerifier
from atomic_exchange.verifiers.signature import (
    DEFAULT_SIGNATURE_LENGTH,
    FixedWidthSignatureVerifier,
)


class MockVerifier:
    """Instant mock verifier for dry-run simulations.

    Args:
        should_pass: Whether every check passes. Default True.
        details: Custom details message. Optional.
        history: How many recent requests to keep in ``calls``. Default 100.
    """

    def __init__(
        self, should_pass: bool = True, details: str | None = None, history: int = 100
    ) -> None:
        self.should_pass = should_pass
        self.details = details or (
            "Mock verification passed (dry-run mode)"
            if should_pass
            else "Mock verification failed (dry-run mode)"
        )
        self.calls: deque[SignatureRequest | ProofRequest] = deque(maxlen=history)

    def _result(self, request: SignatureRequest | ProofRequest) -> VerificationResult:
        self.calls.append(request)
        return VerificationResult(
            is_valid=self.should_pass,
            details=self.details,
            logs={"mode": "dry-run", "verifier": "mock"},
        )

    def verify_signature(self, request: SignatureRequest) -> VerificationResult:
        return self._result(request)

    def verify_proof(self, request: ProofRequest) -> VerificationResult:
        return self._result(request)


class VerifierFactory:
    """Factory that creates verifiers by strategy name.

    Usage:
        signatures = VerifierFactory.create_signature_verifier("fixed_width", length=65)
        proofs = VerifierFactory.create_proof_verifier("non_empty")
    """

    _signature_registry: dict[str, type] = {
        VerifierType.FIXED_WIDTH.value: FixedWidthSignatureVerifier,
        VerifierType.MOCK.value: MockVerifier,
    }
    _proof_registry: dict[str, type] = {
        VerifierType.NON_EMPTY.value: NonEmptyProofVerifier,
        VerifierType.MOCK.value: MockVerifier,
    }

    @staticmethod
    def _lookup(registry: dict[str, type], name: str, kind: str) -> type:
        if not name:
            raise ValueError(f"A {kind} verifier name is required. Valid types: {list(registry)}")
        verifier_class = registry.get(name)
        if verifier_class is None:
            raise ValueError(f"Unknown {kind} verifier type: '{name}'. Valid types: {list(registry)}")
        return verifier_class

    @classmethod
    def create_signature_verifier(
        cls, name: str, length: int = DEFAULT_SIGNATURE_LENGTH
    ) -> SignatureVerifier:
        """Create a signature verifier.

        Raises:
            ValueError: If the name is unknown or empty.
        """
        verifier_class = cls._lookup(cls._signature_registry, name, "signature")
        if verifier_class is FixedWidthSignatureVerifier:
            return FixedWidthSignatureVerifier(length=length)
        return verifier_class()

    @classmethod
    def create_proof_verifier(cls, name: str) -> ProofVerifier:
        """Create a proof verifier.

        Raises:
            ValueError: If the name is unknown or empty.
        """
        return cls._lookup(cls._proof_registry, name, "proof")()

    @classmethod
    def get_supported_types(cls) -> dict[str, list[str]]:
        """Return the supported strategy names per capability."""
        return {
            "signature": list(cls._signature_registry),
            "proof": list(cls._proof_registry),
        }


__all__ = [
    "FixedWidthSignatureVerifier",
    "MockVerifier",
    "NonEmptyProofVerifier",
    "VerifierFactory",
    "ProofRequest",
    "ProofVerifier",
    "SignatureRequest",
    "SignatureVerifier",
    "VerificationResult",
]
