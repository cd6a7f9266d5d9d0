"""Shared precondition helpers for the engines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from statemachine.exceptions import TransitionNotAllowed

from atomic_exchange.domain.exceptions import (
    AlreadyClaimedError,
    InvalidRefundError,
    InvalidStateTransitionError,
    SwapNotFoundError,
    UnauthorizedError,
)
from atomic_exchange.domain.identifiers import UINT_MAX
from atomic_exchange.infrastructure.ledger.keys import SwapKey

if TYPE_CHECKING:
    from atomic_exchange.domain.models import Swap
    from atomic_exchange.domain.state_machine import _StatusMachine
    from atomic_exchange.infrastructure.ledger.store import LedgerTransaction


def require_unsigned(**values: int) -> None:
    """Reject integers outside the unsigned 128-bit range of the protocol."""
    for name, value in values.items():
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")
        if value > UINT_MAX:
            raise ValueError(f"{name} exceeds the unsigned 128-bit maximum, got {value}")


def load_swap(txn: LedgerTransaction, swap_id: bytes) -> Swap:
    swap = txn.get(SwapKey(swap_id))
    if swap is None:
        raise SwapNotFoundError(swap_id.hex())
    return swap


def require_party(swap: Swap, caller: str, action: str) -> None:
    if not swap.is_party(caller):
        raise UnauthorizedError(caller, action)


def require_pending(swap: Swap) -> None:
    """Claimed is checked before refunded, matching the claim/refund order."""
    if swap.claimed:
        raise AlreadyClaimedError(f"Swap already claimed: {swap.swap_id.hex()}")
    if swap.refunded:
        raise InvalidRefundError(f"Swap already refunded: {swap.swap_id.hex()}")


def fire_transition(
    machine_cls: type[_StatusMachine], current_status: str, event_name: str
) -> str:
    """Validate and fire a state machine transition, returning the new status.

    Raises InvalidStateTransitionError if the transition is illegal.
    """
    current_status = str(current_status)
    sm = machine_cls(current_status)
    try:
        getattr(sm, event_name)()
    except TransitionNotAllowed as err:
        raise InvalidStateTransitionError(current_status, event_name) from err
    return sm.status
