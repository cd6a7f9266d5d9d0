"""Structural signature verifier.

Accepts any signature of exactly the configured width (65 bytes by default,
the size of a recoverable secp256k1 signature). It performs no cryptography:
it only keeps malformed buffers out of the approval records. Deployments that
need real verification inject their own SignatureVerifier.
"""

from __future__ import annotations

from atomic_exchange.domain.verifier_protocol import SignatureRequest, VerificationResult
from atomic_exchange.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SIGNATURE_LENGTH = 65


class FixedWidthSignatureVerifier:
    """Checks signature width only."""

    def __init__(self, length: int = DEFAULT_SIGNATURE_LENGTH) -> None:
        if length <= 0:
            raise ValueError("signature length must be positive")
        self._length = length

    def verify_signature(self, request: SignatureRequest) -> VerificationResult:
        actual = len(request.signature)
        if actual != self._length:
            logger.info(
                "signature.rejected",
                swap_id=request.swap_id.hex(),
                signer=request.signer,
                length=actual,
            )
            return VerificationResult(
                is_valid=False,
                details=f"Signature must be {self._length} bytes, got {actual}",
                logs={"expected_length": self._length, "actual_length": actual},
            )
        return VerificationResult(
            is_valid=True,
            details="Signature width accepted (no cryptographic check)",
            logs={"verifier": "fixed_width"},
        )
