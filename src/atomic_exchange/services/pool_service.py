"""Mixing Pool Engine: pool creation, joining and windowed withdrawal.

A pool collects deposits until ``activation_threshold`` participants have
joined, at which point it activates (one-way) and closes to new entrants.
Withdrawal is only allowed inside

    [creation_height + execution_delay,
     creation_height + execution_delay + execution_window]

which separates deposit time from payout time and bounds how long funds can
sit in the pool.

Participant IDs are dense: the n-th join (0-based) gets ID n.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from atomic_exchange.domain.enums import EventType
from atomic_exchange.domain.exceptions import (
    AlreadyClaimedError,
    InsufficientFundsError,
    InvalidParticipantError,
    MixerNotFoundError,
    NotClaimableError,
    ParticipantLimitReachedError,
    PoolClosedError,
    TimelockActiveError,
    TimelockExpiredError,
    UnauthorizedError,
)
from atomic_exchange.domain.identifiers import derive_pool_id, sha256_digest
from atomic_exchange.domain.models import JoinReceipt, MixerParticipant, MixingPool
from atomic_exchange.domain.state_machine import ParticipantStateMachine, PoolStateMachine
from atomic_exchange.infrastructure.ledger.keys import ParticipantKey, PoolKey, PoolNonceKey
from atomic_exchange.logging_config import get_logger
from atomic_exchange.services.guards import fire_transition, require_unsigned

if TYPE_CHECKING:
    from atomic_exchange.config import ProtocolConstants
    from atomic_exchange.domain.context import CallContext
    from atomic_exchange.domain.identifiers import Digest
    from atomic_exchange.infrastructure.ledger.store import LedgerStore, LedgerTransaction

logger = get_logger(__name__)


class MixingPoolEngine:
    """Owns pool and participant records."""

    def __init__(
        self,
        store: LedgerStore,
        constants: ProtocolConstants,
        digest: Digest = sha256_digest,
    ) -> None:
        self._store = store
        self._constants = constants
        self._digest = digest

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_pool(
        self,
        ctx: CallContext,
        min_amount: int,
        max_amount: int,
        activation_threshold: int,
        execution_delay: int,
        execution_window: int,
    ) -> MixingPool:
        require_unsigned(
            min_amount=min_amount,
            max_amount=max_amount,
            activation_threshold=activation_threshold,
            execution_delay=execution_delay,
            execution_window=execution_window,
        )

        if min_amount < self._constants.min_swap_amount:
            raise InsufficientFundsError(
                f"Pool minimum {min_amount} is below the minimum swap amount "
                f"{self._constants.min_swap_amount}"
            )
        if max_amount < min_amount:
            raise InsufficientFundsError(
                f"Pool maximum {max_amount} is below its minimum {min_amount}"
            )
        if activation_threshold == 0:
            raise InvalidParticipantError("Activation threshold must be positive")
        if activation_threshold > self._constants.max_participants_per_mixer:
            raise InvalidParticipantError(
                f"Activation threshold {activation_threshold} can never be reached; "
                f"pools hold at most {self._constants.max_participants_per_mixer}"
            )

        with self._store.transaction(EventType.POOL_CREATED, ctx.height) as txn:
            nonce = txn.get(PoolNonceKey()) or 0
            pool_id = derive_pool_id(
                ctx.caller,
                ctx.height,
                nonce,
                min_amount,
                max_amount,
                activation_threshold,
                digest=self._digest,
            )
            pool = MixingPool(
                pool_id=pool_id,
                creator=ctx.caller,
                min_amount=min_amount,
                max_amount=max_amount,
                activation_threshold=activation_threshold,
                execution_delay=execution_delay,
                execution_window=execution_window,
                creation_height=ctx.height,
            )
            txn.put(PoolNonceKey(), nonce + 1)
            txn.put(PoolKey(pool_id), pool)

        logger.info(
            "pool.created",
            pool_id=pool_id.hex(),
            creator=ctx.caller,
            threshold=activation_threshold,
            window_opens_at=pool.window_opens_at,
            window_closes_at=pool.window_closes_at,
        )
        return pool

    # ------------------------------------------------------------------
    # Joining
    # ------------------------------------------------------------------

    def join_pool(
        self,
        ctx: CallContext,
        pool_id: bytes,
        amount: int,
        blinded_output_address: bytes,
    ) -> JoinReceipt:
        """Deposit into a pool; the join that reaches the threshold activates it."""
        with self._store.transaction(EventType.POOL_JOINED, ctx.height) as txn:
            pool = self._load_pool(txn, pool_id)

            if amount < pool.min_amount or amount > pool.max_amount:
                raise InsufficientFundsError(
                    f"Amount {amount} is outside the pool bounds "
                    f"[{pool.min_amount}, {pool.max_amount}]"
                )
            if pool.active:
                raise PoolClosedError(pool_id.hex())
            if pool.participant_count >= self._constants.max_participants_per_mixer:
                raise ParticipantLimitReachedError(
                    f"Pool already holds {pool.participant_count} participants"
                )

            participant_id = pool.participant_count
            txn.put(
                ParticipantKey(pool_id, participant_id),
                MixerParticipant(
                    pool_id=pool_id,
                    participant_id=participant_id,
                    participant=ctx.caller,
                    amount=amount,
                    blinded_output_address=blinded_output_address,
                    joined_height=ctx.height,
                ),
            )

            count = pool.participant_count + 1
            activates = count >= pool.activation_threshold
            if activates:
                fire_transition(PoolStateMachine, pool.status, "activate")
            updated = replace(
                pool,
                participant_count=count,
                total_amount=pool.total_amount + amount,
                active=activates,
            )
            txn.put(PoolKey(pool_id), updated)

        logger.info(
            "pool.joined",
            pool_id=pool_id.hex(),
            participant_id=participant_id,
            participant_count=updated.participant_count,
        )
        if activates:
            logger.info(
                "pool.activated",
                pool_id=pool_id.hex(),
                participant_count=updated.participant_count,
                total_amount=updated.total_amount,
            )
        return JoinReceipt(participant_id=participant_id, pool=updated)

    # ------------------------------------------------------------------
    # Withdrawal
    # ------------------------------------------------------------------

    def withdraw(self, ctx: CallContext, pool_id: bytes, participant_id: int) -> MixerParticipant:
        with self._store.transaction(EventType.MIXER_WITHDRAWN, ctx.height) as txn:
            pool = self._load_pool(txn, pool_id)

            entry = txn.get(ParticipantKey(pool_id, participant_id))
            if entry is None:
                raise InvalidParticipantError(
                    f"No participant {participant_id} in pool {pool_id.hex()}"
                )
            if ctx.caller != entry.participant:
                raise UnauthorizedError(ctx.caller, "withdraw this deposit")
            if not pool.active:
                raise NotClaimableError(f"Pool {pool_id.hex()} has not activated")
            if entry.withdrawn:
                raise AlreadyClaimedError(
                    f"Participant {participant_id} already withdrew"
                )
            if ctx.height < pool.window_opens_at:
                raise TimelockActiveError(
                    f"Withdrawal window opens at height {pool.window_opens_at}"
                )
            if ctx.height > pool.window_closes_at:
                raise TimelockExpiredError(
                    f"Withdrawal window closed at height {pool.window_closes_at}"
                )

            fire_transition(ParticipantStateMachine, entry.status, "withdraw")
            withdrawn = replace(entry, withdrawn=True)
            txn.put(ParticipantKey(pool_id, participant_id), withdrawn)

        logger.info("pool.withdrawn", pool_id=pool_id.hex(), participant_id=participant_id)
        return withdrawn

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def get_pool(self, pool_id: bytes) -> MixingPool | None:
        return self._store.get(PoolKey(pool_id))

    def get_participant(self, pool_id: bytes, participant_id: int) -> MixerParticipant | None:
        return self._store.get(ParticipantKey(pool_id, participant_id))

    def _load_pool(self, txn: LedgerTransaction, pool_id: bytes) -> MixingPool:
        pool = txn.get(PoolKey(pool_id))
        if pool is None:
            raise MixerNotFoundError(pool_id.hex())
        return pool
