"""Governance / fee treasury.

Holds the administrator identity and the accumulated protocol-fee balance
as one ledger record. Only the current administrator may reassign the role
or withdraw fees. Withdrawal adjusts bookkeeping only; asset custody is
external to the exchange.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from atomic_exchange.domain.enums import EventType
from atomic_exchange.domain.exceptions import InsufficientFundsError, UnauthorizedError
from atomic_exchange.domain.models import GovernanceState
from atomic_exchange.infrastructure.ledger.keys import GovernanceKey
from atomic_exchange.logging_config import get_logger
from atomic_exchange.services.guards import require_unsigned

if TYPE_CHECKING:
    from atomic_exchange.domain.context import CallContext
    from atomic_exchange.infrastructure.ledger.store import LedgerStore, LedgerTransaction

logger = get_logger(__name__)

_KEY = GovernanceKey()


class GovernanceTreasury:
    """Administrator and protocol-fee bookkeeping."""

    def __init__(self, store: LedgerStore, initial_admin: str) -> None:
        self._store = store
        if self._store.get(_KEY) is None:
            with self._store.transaction(EventType.ADMIN_CHANGED, height=0) as txn:
                txn.put(_KEY, GovernanceState(admin=initial_admin))
            logger.info("governance.initialized", admin=initial_admin)

    # ------------------------------------------------------------------
    # Admin-only operations
    # ------------------------------------------------------------------

    def set_admin(self, ctx: CallContext, new_admin: str) -> GovernanceState:
        """Hand the administrator role to another identity."""
        if not new_admin:
            raise ValueError("new admin identity must be non-empty")

        with self._store.transaction(EventType.ADMIN_CHANGED, ctx.height) as txn:
            state = self._require_admin(txn, ctx.caller, "set the contract admin")
            updated = replace(state, admin=new_admin)
            txn.put(_KEY, updated)

        logger.info("governance.admin_changed", old_admin=state.admin, new_admin=new_admin)
        return updated

    def withdraw_fees(self, ctx: CallContext, amount: int) -> GovernanceState:
        """Debit the accumulated protocol-fee balance."""
        require_unsigned(amount=amount)

        with self._store.transaction(EventType.FEES_WITHDRAWN, ctx.height) as txn:
            state = self._require_admin(txn, ctx.caller, "withdraw protocol fees")
            if amount > state.fee_balance:
                raise InsufficientFundsError(
                    f"Requested {amount} exceeds fee balance {state.fee_balance}"
                )
            updated = replace(state, fee_balance=state.fee_balance - amount)
            txn.put(_KEY, updated)

        logger.info(
            "governance.fees_withdrawn", amount=amount, remaining=updated.fee_balance
        )
        return updated

    # ------------------------------------------------------------------
    # Called inside another component's transaction
    # ------------------------------------------------------------------

    def credit(self, txn: LedgerTransaction, amount: int) -> GovernanceState:
        """Add protocol fees as part of the caller's transaction."""
        state = txn.get(_KEY)
        updated = replace(state, fee_balance=state.fee_balance + amount)
        txn.put(_KEY, updated)
        return updated

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def state(self) -> GovernanceState:
        return self._store.get(_KEY)

    def get_admin(self) -> str:
        return self.state().admin

    def get_fee_balance(self) -> int:
        return self.state().fee_balance

    def _require_admin(
        self, txn: LedgerTransaction, caller: str, action: str
    ) -> GovernanceState:
        state = txn.get(_KEY)
        if caller != state.admin:
            raise UnauthorizedError(caller, action)
        return state
