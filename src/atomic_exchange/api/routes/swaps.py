"""Swap REST API routes.

These endpoints provide the HTTP interface for the HTLC lifecycle: initiate,
approve, attach a confidential proof, claim with the pre-image, refund after
expiry, and the read-only projections. Mutations read the caller from the
``X-Caller`` header and the height from ``X-Block-Height``.

Routes:
    POST   /api/v1/swaps                              Initiate a swap
    GET    /api/v1/swaps/{id}                         Get swap details
    GET    /api/v1/swaps/{id}/status                  Aggregate status at a height
    GET    /api/v1/swaps/{id}/claimable               Claimable predicate
    GET    /api/v1/swaps/{id}/refundable              Refundable predicate
    POST   /api/v1/swaps/{id}/claim                   Claim with the pre-image
    POST   /api/v1/swaps/{id}/refund                  Refund after expiry
    POST   /api/v1/swaps/{id}/approvals               Record a multi-sig approval
    GET    /api/v1/swaps/{id}/approvals/{signer}      Get one approval
    POST   /api/v1/swaps/{id}/proof                   Submit a confidential proof
    GET    /api/v1/swaps/{id}/proof                   Get the stored proof
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from atomic_exchange.api.deps import get_call_context, get_exchange, get_swap_id
from atomic_exchange.domain.context import MAX_HEIGHT, CallContext
from atomic_exchange.domain.exceptions import SwapNotFoundError
from atomic_exchange.logging_config import get_logger
from atomic_exchange.schemas.exchange import (
    ApprovalResponse,
    ApproveSwapRequest,
    ClaimSwapRequest,
    InitiateSwapRequest,
    InitiateSwapResponse,
    PredicateResponse,
    ProofResponse,
    SubmitProofRequest,
    SwapResponse,
    SwapStatusResponse,
)
from atomic_exchange.services.exchange import AtomicExchange

router = APIRouter(prefix="/api/v1/swaps", tags=["Swaps"])
logger = get_logger(__name__)

HeightQuery = Query(default=None, ge=0, le=MAX_HEIGHT, description="Evaluate at this height")


# ---------------------------------------------------------------------------
# Initiate
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=InitiateSwapResponse,
    status_code=201,
    summary="Initiate a hash-time-locked swap",
)
def initiate_swap(
    request: InitiateSwapRequest,
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> InitiateSwapResponse:
    """Create a PENDING swap; the protocol fee is credited to the treasury."""
    swap_id = exchange.initiate_swap(ctx, **request.model_dump())
    swap = exchange.get_swap(swap_id)
    return InitiateSwapResponse(swap_id=swap_id, swap=SwapResponse.model_validate(swap))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/{swap_id}", response_model=SwapResponse, summary="Get swap details")
def get_swap(
    swap_id: bytes = Depends(get_swap_id),
    exchange: AtomicExchange = Depends(get_exchange),
) -> SwapResponse:
    swap = exchange.get_swap(swap_id)
    if swap is None:
        raise SwapNotFoundError(swap_id.hex())
    return SwapResponse.model_validate(swap)


@router.get(
    "/{swap_id}/status",
    response_model=SwapStatusResponse,
    summary="Aggregate swap status",
    description="A missing swap reports exists=false with every flag false.",
)
def get_swap_status(
    swap_id: bytes = Depends(get_swap_id),
    height: int | None = HeightQuery,
    exchange: AtomicExchange = Depends(get_exchange),
) -> SwapStatusResponse:
    at = exchange.clock.current if height is None else height
    report = exchange.get_swap_status(swap_id, at)
    return SwapStatusResponse(swap_id=swap_id, height=at, **report.to_dict())


@router.get("/{swap_id}/claimable", response_model=PredicateResponse)
def is_swap_claimable(
    swap_id: bytes = Depends(get_swap_id),
    height: int | None = HeightQuery,
    exchange: AtomicExchange = Depends(get_exchange),
) -> PredicateResponse:
    at = exchange.clock.current if height is None else height
    return PredicateResponse(
        swap_id=swap_id, height=at, value=exchange.is_swap_claimable(swap_id, at)
    )


@router.get("/{swap_id}/refundable", response_model=PredicateResponse)
def is_swap_refundable(
    swap_id: bytes = Depends(get_swap_id),
    height: int | None = HeightQuery,
    exchange: AtomicExchange = Depends(get_exchange),
) -> PredicateResponse:
    at = exchange.clock.current if height is None else height
    return PredicateResponse(
        swap_id=swap_id, height=at, value=exchange.is_swap_refundable(swap_id, at)
    )


# ---------------------------------------------------------------------------
# Claim / Refund
# ---------------------------------------------------------------------------


@router.post("/{swap_id}/claim", response_model=SwapResponse, summary="Claim a swap")
def claim_swap(
    request: ClaimSwapRequest,
    swap_id: bytes = Depends(get_swap_id),
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> SwapResponse:
    """Reveal the pre-image as the participant; the swap becomes CLAIMED."""
    swap = exchange.claim_swap(ctx, swap_id, request.preimage)
    return SwapResponse.model_validate(swap)


@router.post("/{swap_id}/refund", response_model=SwapResponse, summary="Refund a swap")
def refund_swap(
    swap_id: bytes = Depends(get_swap_id),
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> SwapResponse:
    """Return an expired, unclaimed swap to its initiator."""
    swap = exchange.refund_swap(ctx, swap_id)
    return SwapResponse.model_validate(swap)


# ---------------------------------------------------------------------------
# Approvals / Proofs
# ---------------------------------------------------------------------------


@router.post(
    "/{swap_id}/approvals",
    response_model=ApprovalResponse,
    status_code=201,
    summary="Approve a multi-sig swap",
)
def approve_swap(
    request: ApproveSwapRequest,
    swap_id: bytes = Depends(get_swap_id),
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> ApprovalResponse:
    approval = exchange.approve_multi_sig_swap(ctx, swap_id, request.signature)
    return ApprovalResponse.model_validate(approval)


@router.get("/{swap_id}/approvals/{signer}", response_model=ApprovalResponse)
def get_approval(
    signer: str,
    swap_id: bytes = Depends(get_swap_id),
    exchange: AtomicExchange = Depends(get_exchange),
) -> ApprovalResponse:
    approval = exchange.get_multi_sig_approval(swap_id, signer)
    if approval is None:
        raise SwapNotFoundError(swap_id.hex())
    return ApprovalResponse.model_validate(approval)


@router.post(
    "/{swap_id}/proof",
    response_model=ProofResponse,
    status_code=201,
    summary="Submit a confidential proof",
)
def submit_proof(
    request: SubmitProofRequest,
    swap_id: bytes = Depends(get_swap_id),
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> ProofResponse:
    proof = exchange.submit_zk_proof(ctx, swap_id, request.proof)
    return ProofResponse.model_validate(proof)


@router.get("/{swap_id}/proof", response_model=ProofResponse)
def get_proof(
    swap_id: bytes = Depends(get_swap_id),
    exchange: AtomicExchange = Depends(get_exchange),
) -> ProofResponse:
    proof = exchange.get_confidential_proof(swap_id)
    if proof is None:
        raise SwapNotFoundError(swap_id.hex())
    return ProofResponse.model_validate(proof)
