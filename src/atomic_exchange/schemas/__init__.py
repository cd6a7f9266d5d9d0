"""Pydantic API schemas."""

from atomic_exchange.schemas.exchange import (
    ApprovalResponse,
    ApproveSwapRequest,
    ClaimSwapRequest,
    CreatePoolRequest,
    CreatePoolResponse,
    GovernanceResponse,
    HealthResponse,
    InitiateSwapRequest,
    InitiateSwapResponse,
    JoinPoolRequest,
    JoinPoolResponse,
    JournalEntryResponse,
    ParticipantResponse,
    PoolResponse,
    PredicateResponse,
    ProofResponse,
    SetAdminRequest,
    SubmitProofRequest,
    SwapResponse,
    SwapStatusResponse,
    VersionResponse,
    WithdrawFeesRequest,
)

__all__ = [
    "ApprovalResponse",
    "ApproveSwapRequest",
    "ClaimSwapRequest",
    "CreatePoolRequest",
    "CreatePoolResponse",
    "GovernanceResponse",
    "HealthResponse",
    "InitiateSwapRequest",
    "InitiateSwapResponse",
    "JoinPoolRequest",
    "JoinPoolResponse",
    "JournalEntryResponse",
    "ParticipantResponse",
    "PoolResponse",
    "PredicateResponse",
    "ProofResponse",
    "SetAdminRequest",
    "SubmitProofRequest",
    "SwapResponse",
    "SwapStatusResponse",
    "VersionResponse",
    "WithdrawFeesRequest",
]
