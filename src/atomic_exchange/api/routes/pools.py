"""Mixing pool REST API routes.

Routes:
    POST   /api/v1/pools                                              Create a pool
    GET    /api/v1/pools/{id}                                         Get pool details
    POST   /api/v1/pools/{id}/join                                    Join a filling pool
    GET    /api/v1/pools/{id}/participants/{participant_id}           Get one participant
    POST   /api/v1/pools/{id}/participants/{participant_id}/withdraw  Withdraw in window
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from atomic_exchange.api.deps import get_call_context, get_exchange, get_pool_id
from atomic_exchange.domain.context import CallContext
from atomic_exchange.domain.exceptions import InvalidParticipantError, MixerNotFoundError
from atomic_exchange.logging_config import get_logger
from atomic_exchange.schemas.exchange import (
    CreatePoolRequest,
    CreatePoolResponse,
    JoinPoolRequest,
    JoinPoolResponse,
    ParticipantResponse,
    PoolResponse,
)
from atomic_exchange.services.exchange import AtomicExchange

router = APIRouter(prefix="/api/v1/pools", tags=["Mixing Pools"])
logger = get_logger(__name__)

ParticipantPath = Path(..., ge=0, description="Index assigned at join time")


@router.post(
    "",
    response_model=CreatePoolResponse,
    status_code=201,
    summary="Create a mixing pool",
)
def create_pool(
    request: CreatePoolRequest,
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> CreatePoolResponse:
    pool_id = exchange.create_mixing_pool(ctx, **request.model_dump())
    pool = exchange.get_mixing_pool(pool_id)
    return CreatePoolResponse(pool_id=pool_id, pool=PoolResponse.model_validate(pool))


@router.get("/{pool_id}", response_model=PoolResponse, summary="Get pool details")
def get_pool(
    pool_id: bytes = Depends(get_pool_id),
    exchange: AtomicExchange = Depends(get_exchange),
) -> PoolResponse:
    pool = exchange.get_mixing_pool(pool_id)
    if pool is None:
        raise MixerNotFoundError(pool_id.hex())
    return PoolResponse.model_validate(pool)


@router.post(
    "/{pool_id}/join",
    response_model=JoinPoolResponse,
    status_code=201,
    summary="Join a mixing pool",
)
def join_pool(
    request: JoinPoolRequest,
    pool_id: bytes = Depends(get_pool_id),
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> JoinPoolResponse:
    """Deposit into a FILLING pool; the response carries the participant index."""
    receipt = exchange.join_mixing_pool(
        ctx, pool_id, request.amount, request.blinded_output_address
    )
    return JoinPoolResponse.model_validate(receipt)


@router.get(
    "/{pool_id}/participants/{participant_id}",
    response_model=ParticipantResponse,
)
def get_participant(
    participant_id: int = ParticipantPath,
    pool_id: bytes = Depends(get_pool_id),
    exchange: AtomicExchange = Depends(get_exchange),
) -> ParticipantResponse:
    participant = exchange.get_mixer_participant(pool_id, participant_id)
    if participant is None:
        if exchange.get_mixing_pool(pool_id) is None:
            raise MixerNotFoundError(pool_id.hex())
        raise InvalidParticipantError(f"No participant {participant_id} in pool {pool_id.hex()}")
    return ParticipantResponse.model_validate(participant)


@router.post(
    "/{pool_id}/participants/{participant_id}/withdraw",
    response_model=ParticipantResponse,
    summary="Withdraw from an active pool",
)
def withdraw_from_pool(
    participant_id: int = ParticipantPath,
    pool_id: bytes = Depends(get_pool_id),
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> ParticipantResponse:
    """Only inside the execution window of an active pool."""
    participant = exchange.withdraw_from_mixer(ctx, pool_id, participant_id)
    return ParticipantResponse.model_validate(participant)
