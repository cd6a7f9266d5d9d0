"""Domain exceptions for the atomic exchange protocol.

Every protocol failure maps to exactly one numeric ErrorCode. The exceptions
are framework-agnostic; the API layer's middleware translates them to HTTP
responses.
"""

from atomic_exchange.domain.enums import ErrorCode


class AtomicExchangeError(Exception):
    """Base exception for all domain errors."""

    error_code: ErrorCode | None = None

    def __init__(self, message: str, code: str = "ATOMIC_EXCHANGE_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ProtocolError(AtomicExchangeError):
    """A precondition of a protocol operation failed.

    Subclasses set ``error_code``; the string code is derived from it.
    """

    error_code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code=self.error_code.name)


# --- Authorization ---


class UnauthorizedError(ProtocolError):
    """Raised when the caller is not allowed to perform the operation."""

    error_code = ErrorCode.UNAUTHORIZED

    def __init__(self, caller: str, action: str) -> None:
        super().__init__(f"{caller} is not authorized to {action}")
        self.caller = caller


# --- Swap Errors ---


class SwapNotFoundError(ProtocolError):
    """Raised when a swap ID does not exist."""

    error_code = ErrorCode.SWAP_NOT_FOUND

    def __init__(self, swap_id: str) -> None:
        super().__init__(f"Swap not found: {swap_id}")
        self.swap_id = swap_id


class AlreadyClaimedError(ProtocolError):
    """Raised when a swap or participant slot has already been consumed."""

    error_code = ErrorCode.ALREADY_CLAIMED


class SwapExistsError(AlreadyClaimedError):
    """Raised when a derived swap ID already references a stored swap.

    Shares code 3 with AlreadyClaimedError for wire compatibility.
    """

    def __init__(self, swap_id: str) -> None:
        super().__init__(f"Swap already exists: {swap_id}")
        self.swap_id = swap_id


class PoolClosedError(AlreadyClaimedError):
    """Raised when joining a pool that has already activated.

    Shares code 3 with AlreadyClaimedError for wire compatibility.
    """

    def __init__(self, pool_id: str) -> None:
        super().__init__(f"Mixing pool is active and closed to new entrants: {pool_id}")
        self.pool_id = pool_id


class NotClaimableError(ProtocolError):
    """Raised when withdrawing from a pool that has not activated."""

    error_code = ErrorCode.NOT_CLAIMABLE


class InvalidRefundError(ProtocolError):
    """Raised when the swap has already been refunded."""

    error_code = ErrorCode.INVALID_REFUND


# --- Time Errors ---


class TimelockActiveError(ProtocolError):
    """Raised when acting before a time window has opened."""

    error_code = ErrorCode.TIMELOCK_ACTIVE


class TimelockExpiredError(ProtocolError):
    """Raised when a time-lock is too large or a window has closed."""

    error_code = ErrorCode.TIMELOCK_EXPIRED


class SwapExpiredError(ProtocolError):
    """Raised when the swap's expiration height has been reached."""

    error_code = ErrorCode.SWAP_EXPIRED


# --- Verification Errors ---


class InvalidProofError(ProtocolError):
    """Raised when the injected proof verifier rejects a proof."""

    error_code = ErrorCode.INVALID_PROOF


class InvalidSignatureError(ProtocolError):
    """Raised when quorum is not met or a signature is rejected."""

    error_code = ErrorCode.INVALID_SIGNATURE


class InvalidHashError(ProtocolError):
    """Raised when a pre-image does not hash to the swap's hash-lock."""

    error_code = ErrorCode.INVALID_HASH


# --- Value Errors ---


class InsufficientFundsError(ProtocolError):
    """Raised when an amount is below a minimum, outside bounds, or over balance."""

    error_code = ErrorCode.INSUFFICIENT_FUNDS


class InvalidFeeError(ProtocolError):
    """Raised when a fee schedule or fee input is malformed."""

    error_code = ErrorCode.INVALID_FEE


# --- Mixer Errors ---


class InvalidParticipantError(ProtocolError):
    """Raised for self-swaps, unknown participant slots and bad pool thresholds."""

    error_code = ErrorCode.INVALID_PARTICIPANT


class MixerNotFoundError(ProtocolError):
    """Raised when a pool ID does not exist."""

    error_code = ErrorCode.MIXER_NOT_FOUND

    def __init__(self, pool_id: str) -> None:
        super().__init__(f"Mixing pool not found: {pool_id}")
        self.pool_id = pool_id


class ParticipantLimitReachedError(ProtocolError):
    """Raised when a pool already holds the maximum number of participants."""

    error_code = ErrorCode.PARTICIPANT_LIMIT_REACHED


# --- Infrastructure Errors (outside the numeric taxonomy) ---


class InvalidStateTransitionError(AtomicExchangeError):
    """Raised when a state machine guard rejects a transition.

    Engines check every precondition first, so reaching this is a bug.
    """

    def __init__(self, current_state: str, attempted_event: str) -> None:
        super().__init__(
            message=f"Invalid state transition: {attempted_event} from {current_state}",
            code="INVALID_STATE_TRANSITION",
        )
        self.current_state = current_state
        self.attempted_event = attempted_event


class ConcurrentModificationError(AtomicExchangeError):
    """Raised when a ledger record changed between read and commit."""

    def __init__(self, key: str, expected: int, actual: int) -> None:
        super().__init__(
            message=f"Ledger key {key} changed: expected version {expected}, found {actual}",
            code="CONCURRENT_MODIFICATION",
        )
        self.key = key
        self.expected = expected
        self.actual = actual


class HeightRegressionError(AtomicExchangeError):
    """Raised when a call supplies a logical height below one already observed."""

    def __init__(self, supplied: int, current: int) -> None:
        super().__init__(
            message=f"Logical height {supplied} is below the current height {current}",
            code="HEIGHT_REGRESSION",
        )
        self.supplied = supplied
        self.current = current
