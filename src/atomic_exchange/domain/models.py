"""Ledger records for swaps, approvals, proofs, pools and governance.

Records are frozen dataclasses. Engines never mutate a record in place; they
write a ``dataclasses.replace`` copy back through a ledger transaction, so a
record handed to a caller never changes underneath it and a failed operation
leaves nothing half-written.

``to_dict`` / ``from_dict`` render byte buffers as hex for the journal and the
HTTP layer.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar

from atomic_exchange.domain.enums import ParticipantStatus, PoolStatus, SwapStatus


class _Record:
    """Hex codec shared by all ledger records."""

    _bytes_fields: ClassVar[tuple[str, ...]] = ()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)  # type: ignore[call-overload]
        for name in self._bytes_fields:
            data[name] = data[name].hex()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]):  # noqa: ANN206
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        values = {k: v for k, v in data.items() if k in known}
        for name in cls._bytes_fields:
            values[name] = bytes.fromhex(values[name])
        return cls(**values)


@dataclass(frozen=True)
class Swap(_Record):
    """A hash-time-locked exchange between an initiator and a participant.

    Attributes:
        swap_id: Deterministic digest identifying the swap.
        time_lock: Relative height budget supplied at creation.
        expiration_height: creation_height + time_lock.
        multi_sig_provided: Approvals counted so far; only ever increases.
        privacy_level: Stored hint, 0 = public. Not consumed by any rule.
    """

    _bytes_fields: ClassVar[tuple[str, ...]] = ("swap_id", "hash_lock", "target_address")

    swap_id: bytes
    initiator: str
    participant: str
    amount: int
    hash_lock: bytes
    time_lock: int
    swap_token: str
    target_chain: str
    target_address: bytes
    multi_sig_required: int
    privacy_level: int
    creation_height: int
    expiration_height: int
    swap_fee: int
    protocol_fee: int
    claimed: bool = False
    refunded: bool = False
    multi_sig_provided: int = 0

    @property
    def status(self) -> SwapStatus:
        if self.claimed:
            return SwapStatus.CLAIMED
        if self.refunded:
            return SwapStatus.REFUNDED
        return SwapStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.claimed or self.refunded

    @property
    def quorum_met(self) -> bool:
        """Quorum is only enforced when more than one approval is required."""
        if self.multi_sig_required <= 1:
            return True
        return self.multi_sig_provided >= self.multi_sig_required

    def is_party(self, identity: str) -> bool:
        return identity in (self.initiator, self.participant)


@dataclass(frozen=True)
class ConfidentialProof(_Record):
    """Outcome of a proof submission. One per swap; resubmission overwrites."""

    _bytes_fields: ClassVar[tuple[str, ...]] = ("swap_id", "proof")

    swap_id: bytes
    proof: bytes
    verified: bool
    verification_height: int


@dataclass(frozen=True)
class MultiSigApproval(_Record):
    """A signer's approval of a swap."""

    _bytes_fields: ClassVar[tuple[str, ...]] = ("swap_id", "signature")

    swap_id: bytes
    signer: str
    signature: bytes
    approved: bool
    approval_height: int


@dataclass(frozen=True)
class MixingPool(_Record):
    """A batch of deposits that activates once enough participants join."""

    _bytes_fields: ClassVar[tuple[str, ...]] = ("pool_id",)

    pool_id: bytes
    creator: str
    min_amount: int
    max_amount: int
    activation_threshold: int
    execution_delay: int
    execution_window: int
    creation_height: int
    total_amount: int = 0
    participant_count: int = 0
    active: bool = False

    @property
    def status(self) -> PoolStatus:
        return PoolStatus.ACTIVE if self.active else PoolStatus.FILLING

    @property
    def window_opens_at(self) -> int:
        return self.creation_height + self.execution_delay

    @property
    def window_closes_at(self) -> int:
        """Last height (inclusive) at which withdrawal is allowed."""
        return self.window_opens_at + self.execution_window


@dataclass(frozen=True)
class MixerParticipant(_Record):
    """One deposit into a mixing pool, keyed by its dense join index."""

    _bytes_fields: ClassVar[tuple[str, ...]] = ("pool_id", "blinded_output_address")

    pool_id: bytes
    participant_id: int
    participant: str
    amount: int
    blinded_output_address: bytes
    joined_height: int
    withdrawn: bool = False

    @property
    def status(self) -> ParticipantStatus:
        return ParticipantStatus.WITHDRAWN if self.withdrawn else ParticipantStatus.JOINED


@dataclass(frozen=True)
class GovernanceState(_Record):
    """Administrator identity and accumulated protocol fees."""

    admin: str
    fee_balance: int = 0


@dataclass(frozen=True)
class JoinReceipt:
    """Result of joining a pool: the slot taken and the pool after the join."""

    participant_id: int
    pool: MixingPool

    @property
    def activated(self) -> bool:
        return self.pool.active


@dataclass(frozen=True)
class SwapStatusReport:
    """Aggregate read-only view of a swap at a given height.

    A missing swap reports every flag as False.
    """

    exists: bool
    claimed: bool = False
    refunded: bool = False
    expired: bool = False
    claimable: bool = False
    refundable: bool = False
    status: str | None = None
    multi_sig_provided: int = 0
    multi_sig_required: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
