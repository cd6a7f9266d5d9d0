"""Pydantic schemas for the exchange API.

These schemas define the request/response shapes of the REST API. They are
separate from the ledger records to keep a clean boundary between the wire
format and the domain. Byte buffers travel as hex strings; widths follow the
on-ledger buffer sizes.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
)

from atomic_exchange.domain.identifiers import UINT_MAX

HASH_LENGTH = 32
ADDRESS_MAX_LENGTH = 33
SIGNATURE_MAX_LENGTH = 65
PROOF_MAX_LENGTH = 1024
PREIMAGE_MAX_LENGTH = 64
ASCII_PATTERN = r"^[\x20-\x7e]+$"


def _from_hex(value: Any) -> Any:
    if isinstance(value, str):
        text = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            return bytes.fromhex(text)
        except ValueError as err:
            raise ValueError("must be a hex string") from err
    return value


def _width(max_length: int, exact: bool = False):  # noqa: ANN202
    def check(value: bytes) -> bytes:
        if exact and len(value) != max_length:
            raise ValueError(f"must be exactly {max_length} bytes")
        if len(value) > max_length:
            raise ValueError(f"must be at most {max_length} bytes")
        return value

    return check


def HexBytes(max_length: int, exact: bool = False) -> Any:  # noqa: N802
    """Bytes accepted as hex (optionally 0x-prefixed) and rendered as hex."""
    return Annotated[
        bytes,
        BeforeValidator(_from_hex),
        AfterValidator(_width(max_length, exact)),
        PlainSerializer(lambda b: b.hex(), return_type=str, when_used="json"),
    ]


Digest32 = HexBytes(HASH_LENGTH, exact=True)
Address = HexBytes(ADDRESS_MAX_LENGTH)
Preimage = HexBytes(PREIMAGE_MAX_LENGTH)
Signature = HexBytes(SIGNATURE_MAX_LENGTH)
Proof = HexBytes(PROOF_MAX_LENGTH)
Unsigned = Annotated[int, Field(ge=0, le=UINT_MAX)]
Identity = Annotated[str, Field(min_length=1, max_length=128)]

# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------


class InitiateSwapRequest(BaseModel):
    """Request body for initiating a swap."""

    participant: Identity = Field(..., description="Identity allowed to claim the swap")
    amount: Unsigned = Field(..., examples=[10000])
    hash_lock: Digest32 = Field(..., description="SHA-256 of the secret pre-image (hex)")
    time_lock: Unsigned = Field(..., description="Blocks until the swap becomes refundable")
    swap_token: str = Field(
        ..., min_length=1, max_length=10, pattern=ASCII_PATTERN, examples=["STX"]
    )
    target_chain: str = Field(
        ..., min_length=1, max_length=20, pattern=ASCII_PATTERN, examples=["BTC"]
    )
    target_address: Address = Field(..., description="Destination-chain address (hex, opaque)")
    multi_sig_required: Unsigned = Field(default=1)
    privacy_level: Unsigned = Field(default=0, description="0 = public")


class ClaimSwapRequest(BaseModel):
    preimage: Preimage = Field(..., description="Secret pre-image (hex)")


class ApproveSwapRequest(BaseModel):
    signature: Signature = Field(..., description="Approval signature (hex)")


class SubmitProofRequest(BaseModel):
    proof: Proof = Field(..., description="Opaque proof bytes (hex)")


class CreatePoolRequest(BaseModel):
    """Request body for creating a mixing pool."""

    min_amount: Unsigned = Field(..., examples=[1000])
    max_amount: Unsigned = Field(..., examples=[10000])
    activation_threshold: Unsigned = Field(..., examples=[2])
    execution_delay: Unsigned = Field(..., examples=[10])
    execution_window: Unsigned = Field(..., examples=[100])


class JoinPoolRequest(BaseModel):
    amount: Unsigned
    blinded_output_address: Address = Field(
        ..., description="Payout address unlinkable to the depositor (hex)"
    )


class SetAdminRequest(BaseModel):
    new_admin: Identity


class WithdrawFeesRequest(BaseModel):
    amount: Unsigned


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------


class SwapResponse(BaseModel):
    """Response schema for a swap record."""

    model_config = ConfigDict(from_attributes=True)

    swap_id: Digest32
    initiator: str
    participant: str
    amount: int
    hash_lock: Digest32
    time_lock: int
    swap_token: str
    target_chain: str
    target_address: Address
    claimed: bool
    refunded: bool
    multi_sig_required: int
    multi_sig_provided: int
    privacy_level: int
    creation_height: int
    expiration_height: int
    swap_fee: int
    protocol_fee: int
    status: str


class InitiateSwapResponse(BaseModel):
    swap_id: Digest32
    swap: SwapResponse


class SwapStatusResponse(BaseModel):
    """Aggregate status of a swap at a height."""

    model_config = ConfigDict(from_attributes=True)

    swap_id: Digest32
    height: int
    exists: bool
    claimed: bool
    refunded: bool
    expired: bool
    claimable: bool
    refundable: bool
    status: str | None
    multi_sig_provided: int
    multi_sig_required: int


class PredicateResponse(BaseModel):
    swap_id: Digest32
    height: int
    value: bool


class ApprovalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    swap_id: Digest32
    signer: str
    signature: Signature
    approved: bool
    approval_height: int


class ProofResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    swap_id: Digest32
    proof: Proof
    verified: bool
    verification_height: int


class PoolResponse(BaseModel):
    """Response schema for a mixing pool."""

    model_config = ConfigDict(from_attributes=True)

    pool_id: Digest32
    creator: str
    min_amount: int
    max_amount: int
    activation_threshold: int
    execution_delay: int
    execution_window: int
    creation_height: int
    total_amount: int
    participant_count: int
    active: bool
    window_opens_at: int
    window_closes_at: int


class CreatePoolResponse(BaseModel):
    pool_id: Digest32
    pool: PoolResponse


class ParticipantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pool_id: Digest32
    participant_id: int
    participant: str
    amount: int
    blinded_output_address: Address
    joined_height: int
    withdrawn: bool


class JoinPoolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    participant_id: int
    pool: PoolResponse


class GovernanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    admin: str
    fee_balance: int


class VersionResponse(BaseModel):
    version: str


class JournalEntryResponse(BaseModel):
    """One written key of a committed operation."""

    model_config = ConfigDict(from_attributes=True)

    batch: int
    height: int
    operation: str
    key_kind: str
    key_parts: list[Any]
    version: int
    payload: dict[str, Any]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "1.0.0"
    journal: str = "unknown"
    height: int = 0
