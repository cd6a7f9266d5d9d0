"""Ledger infrastructure: versioned store, typed keys and journal."""

from atomic_exchange.infrastructure.ledger.journal import (
    Journal,
    JournalEntry,
    MemoryJournal,
    SqlJournal,
    open_journal,
)
from atomic_exchange.infrastructure.ledger.keys import (
    ApprovalKey,
    GovernanceKey,
    LedgerKey,
    ParticipantKey,
    PoolKey,
    PoolNonceKey,
    ProofKey,
    SwapKey,
)
from atomic_exchange.infrastructure.ledger.store import (
    LedgerStore,
    LedgerTransaction,
    Versioned,
)

__all__ = [
    "Journal",
    "JournalEntry",
    "MemoryJournal",
    "SqlJournal",
    "open_journal",
    "ApprovalKey",
    "GovernanceKey",
    "LedgerKey",
    "ParticipantKey",
    "PoolKey",
    "PoolNonceKey",
    "ProofKey",
    "SwapKey",
    "LedgerStore",
    "LedgerTransaction",
    "Versioned",
]
