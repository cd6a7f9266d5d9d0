"""Domain layer: pure protocol rules with zero framework dependencies."""

from atomic_exchange.domain.context import CallContext, LogicalClock
from atomic_exchange.domain.enums import (
    ErrorCode,
    EventType,
    ParticipantStatus,
    PoolStatus,
    SwapStatus,
    VerifierType,
)
from atomic_exchange.domain.exceptions import (
    AtomicExchangeError,
    ConcurrentModificationError,
    InvalidStateTransitionError,
    ProtocolError,
)
from atomic_exchange.domain.fees import FeeSchedule, compute_fee
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
from atomic_exchange.domain.state_machine import (
    ParticipantStateMachine,
    PoolStateMachine,
    SwapStateMachine,
    validate_transition,
)
from atomic_exchange.domain.verifier_protocol import (
    ProofRequest,
    ProofVerifier,
    SignatureRequest,
    SignatureVerifier,
    VerificationResult,
)

__all__ = [
    "CallContext",
    "LogicalClock",
    "ErrorCode",
    "EventType",
    "ParticipantStatus",
    "PoolStatus",
    "SwapStatus",
    "VerifierType",
    "AtomicExchangeError",
    "ConcurrentModificationError",
    "InvalidStateTransitionError",
    "ProtocolError",
    "FeeSchedule",
    "compute_fee",
    "ConfidentialProof",
    "GovernanceState",
    "JoinReceipt",
    "MixerParticipant",
    "MixingPool",
    "MultiSigApproval",
    "Swap",
    "SwapStatusReport",
    "ParticipantStateMachine",
    "PoolStateMachine",
    "SwapStateMachine",
    "validate_transition",
    "ProofRequest",
    "ProofVerifier",
    "SignatureRequest",
    "SignatureVerifier",
    "VerificationResult",
]
