"""Governance and treasury REST API routes.

Routes:
    GET    /api/v1/governance                  Admin identity and fee balance
    PUT    /api/v1/governance/admin            Hand over the admin role
    POST   /api/v1/governance/fees/withdraw    Withdraw accrued protocol fees
    GET    /api/v1/governance/version          Contract version string
    GET    /api/v1/governance/journal          Committed-operation audit trail
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from atomic_exchange.api.deps import get_call_context, get_exchange
from atomic_exchange.domain.context import CallContext
from atomic_exchange.logging_config import get_logger
from atomic_exchange.schemas.exchange import (
    GovernanceResponse,
    JournalEntryResponse,
    SetAdminRequest,
    VersionResponse,
    WithdrawFeesRequest,
)
from atomic_exchange.services.exchange import AtomicExchange

router = APIRouter(prefix="/api/v1/governance", tags=["Governance"])
logger = get_logger(__name__)


@router.get("", response_model=GovernanceResponse, summary="Get governance state")
def get_governance(exchange: AtomicExchange = Depends(get_exchange)) -> GovernanceResponse:
    return GovernanceResponse(
        admin=exchange.get_contract_admin(),
        fee_balance=exchange.get_protocol_fee_balance(),
    )


@router.put("/admin", response_model=GovernanceResponse, summary="Set the contract admin")
def set_admin(
    request: SetAdminRequest,
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> GovernanceResponse:
    """Only the current admin may hand over the role."""
    state = exchange.set_contract_admin(ctx, request.new_admin)
    return GovernanceResponse.model_validate(state)


@router.post(
    "/fees/withdraw",
    response_model=GovernanceResponse,
    summary="Withdraw protocol fees",
)
def withdraw_fees(
    request: WithdrawFeesRequest,
    ctx: CallContext = Depends(get_call_context),
    exchange: AtomicExchange = Depends(get_exchange),
) -> GovernanceResponse:
    state = exchange.withdraw_protocol_fees(ctx, request.amount)
    return GovernanceResponse.model_validate(state)


@router.get("/version", response_model=VersionResponse)
def get_version(exchange: AtomicExchange = Depends(get_exchange)) -> VersionResponse:
    return VersionResponse(version=exchange.get_contract_version())


@router.get(
    "/journal",
    response_model=list[JournalEntryResponse],
    summary="Get the audit trail",
    description="Every committed ledger write, oldest first.",
)
def get_journal(
    exchange: AtomicExchange = Depends(get_exchange),
) -> list[JournalEntryResponse]:
    return [JournalEntryResponse.model_validate(e) for e in exchange.get_journal()]
