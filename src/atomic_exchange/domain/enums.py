"""Domain enumerations for the atomic exchange protocol.

These enums define the canonical states and codes used throughout the system.
They are framework-agnostic (no SQLAlchemy, no FastAPI imports).
"""

import enum


class SwapStatus(enum.StrEnum):
    """Lifecycle states of an HTLC swap.

    Derived from the claimed/refunded flags on the record. Both terminal
    states are final; see domain/state_machine.py.
    """

    PENDING = "PENDING"
    CLAIMED = "CLAIMED"
    REFUNDED = "REFUNDED"


class PoolStatus(enum.StrEnum):
    """Lifecycle states of a mixing pool. Activation is one-way."""

    FILLING = "FILLING"
    ACTIVE = "ACTIVE"


class ParticipantStatus(enum.StrEnum):
    """Lifecycle states of a mixer participant."""

    JOINED = "JOINED"
    WITHDRAWN = "WITHDRAWN"


class EventType(enum.StrEnum):
    """Operation names recorded in the ledger journal.

    Every committed ledger transaction carries exactly one of these.
    """

    # Swap lifecycle
    SWAP_INITIATED = "SWAP_INITIATED"
    SWAP_CLAIMED = "SWAP_CLAIMED"
    SWAP_REFUNDED = "SWAP_REFUNDED"

    # Approvals and proofs
    SWAP_APPROVED = "SWAP_APPROVED"
    PROOF_SUBMITTED = "PROOF_SUBMITTED"

    # Mixing pools
    POOL_CREATED = "POOL_CREATED"
    POOL_JOINED = "POOL_JOINED"
    MIXER_WITHDRAWN = "MIXER_WITHDRAWN"

    # Governance
    ADMIN_CHANGED = "ADMIN_CHANGED"
    FEES_WITHDRAWN = "FEES_WITHDRAWN"


class ErrorCode(enum.IntEnum):
    """Numeric error kinds. Values are stable and exposed to callers."""

    UNAUTHORIZED = 1
    SWAP_NOT_FOUND = 2
    ALREADY_CLAIMED = 3
    NOT_CLAIMABLE = 4
    TIMELOCK_ACTIVE = 5
    TIMELOCK_EXPIRED = 6
    INVALID_PROOF = 7
    INVALID_SIGNATURE = 8
    INVALID_HASH = 9
    INSUFFICIENT_FUNDS = 10
    SWAP_EXPIRED = 11
    INVALID_REFUND = 12
    INVALID_PARTICIPANT = 13
    MIXER_NOT_FOUND = 14
    INVALID_FEE = 15
    PARTICIPANT_LIMIT_REACHED = 16


class VerifierType(enum.StrEnum):
    """Names of the built-in verification strategies.

    Selected through Settings.signature_verifier / Settings.proof_verifier.
    """

    FIXED_WIDTH = "fixed_width"
    NON_EMPTY = "non_empty"
    MOCK = "mock"
