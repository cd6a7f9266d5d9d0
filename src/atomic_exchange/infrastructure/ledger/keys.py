"""Strongly-typed composite keys for the ledger store.

Each key kind maps to exactly one record type. Keys serialize to a JSON-safe
list of parts (bytes as hex) so the journal can rebuild them on replay.
"""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields
from typing import Any, ClassVar

from atomic_exchange.domain.models import (
    ConfidentialProof,
    GovernanceState,
    MixerParticipant,
    MixingPool,
    MultiSigApproval,
    Swap,
)


class LedgerKey:
    """Base for all ledger keys."""

    kind: ClassVar[str]
    _bytes_fields: ClassVar[tuple[str, ...]] = ()

    def to_parts(self) -> list[Any]:
        parts: list[Any] = []
        for f, value in zip(fields(self), astuple(self), strict=True):  # type: ignore[arg-type]
            parts.append(value.hex() if f.name in self._bytes_fields else value)
        return parts

    @classmethod
    def from_parts(cls, parts: list[Any]) -> LedgerKey:
        values = {}
        for f, value in zip(fields(cls), parts, strict=True):  # type: ignore[arg-type]
            values[f.name] = bytes.fromhex(value) if f.name in cls._bytes_fields else value
        return cls(**values)

    def render(self) -> str:
        return "/".join([self.kind, *(str(p) for p in self.to_parts())])


@dataclass(frozen=True)
class SwapKey(LedgerKey):
    kind: ClassVar[str] = "swap"
    _bytes_fields: ClassVar[tuple[str, ...]] = ("swap_id",)

    swap_id: bytes


@dataclass(frozen=True)
class ProofKey(LedgerKey):
    kind: ClassVar[str] = "proof"
    _bytes_fields: ClassVar[tuple[str, ...]] = ("swap_id",)

    swap_id: bytes


@dataclass(frozen=True)
class ApprovalKey(LedgerKey):
    kind: ClassVar[str] = "approval"
    _bytes_fields: ClassVar[tuple[str, ...]] = ("swap_id",)

    swap_id: bytes
    signer: str


@dataclass(frozen=True)
class PoolKey(LedgerKey):
    kind: ClassVar[str] = "pool"
    _bytes_fields: ClassVar[tuple[str, ...]] = ("pool_id",)

    pool_id: bytes


@dataclass(frozen=True)
class ParticipantKey(LedgerKey):
    kind: ClassVar[str] = "participant"
    _bytes_fields: ClassVar[tuple[str, ...]] = ("pool_id",)

    pool_id: bytes
    index: int


@dataclass(frozen=True)
class GovernanceKey(LedgerKey):
    """Scalar key for the single governance record."""

    kind: ClassVar[str] = "governance"


@dataclass(frozen=True)
class PoolNonceKey(LedgerKey):
    """Scalar key for the pool-id salt counter."""

    kind: ClassVar[str] = "pool_nonce"


KEY_TYPES: dict[str, type[LedgerKey]] = {
    cls.kind: cls
    for cls in (
        SwapKey,
        ProofKey,
        ApprovalKey,
        PoolKey,
        ParticipantKey,
        GovernanceKey,
        PoolNonceKey,
    )
}

# None means the record is a plain integer.
RECORD_TYPES: dict[str, type | None] = {
    SwapKey.kind: Swap,
    ProofKey.kind: ConfidentialProof,
    ApprovalKey.kind: MultiSigApproval,
    PoolKey.kind: MixingPool,
    ParticipantKey.kind: MixerParticipant,
    GovernanceKey.kind: GovernanceState,
    PoolNonceKey.kind: None,
}


def encode_record(record: Any) -> dict[str, Any]:
    if isinstance(record, int):
        return {"value": record}
    return record.to_dict()


def decode_record(kind: str, payload: dict[str, Any]) -> Any:
    record_type = RECORD_TYPES[kind]
    if record_type is None:
        return int(payload["value"])
    return record_type.from_dict(payload)
