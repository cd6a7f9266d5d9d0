"""Versioned key -> record ledger store.

All components read and write through a LedgerStore. Writes happen inside a
transaction that buffers them and commits all-or-nothing:

    with store.transaction(EventType.SWAP_CLAIMED, height) as txn:
        swap = txn.get(SwapKey(swap_id))
        txn.put(SwapKey(swap_id), replace(swap, claimed=True))

Any exception inside the block discards the buffer. On normal exit the
commit re-checks, under a lock, that every key the transaction touched is
still at the version it observed (optimistic compare-and-set). A conflict
raises ConcurrentModificationError; the store never retries on its own.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from atomic_exchange.domain.exceptions import ConcurrentModificationError
from atomic_exchange.infrastructure.ledger.journal import JournalEntry, MemoryJournal
from atomic_exchange.infrastructure.ledger.keys import (
    KEY_TYPES,
    decode_record,
    encode_record,
)
from atomic_exchange.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from atomic_exchange.infrastructure.ledger.journal import Journal
    from atomic_exchange.infrastructure.ledger.keys import LedgerKey

logger = get_logger(__name__)


@dataclass(frozen=True)
class Versioned:
    """A stored record and its version. Versions start at 1."""

    record: Any
    version: int


class LedgerTransaction:
    """Buffered view over the store for one operation.

    Reads see the transaction's own writes first.
    """

    def __init__(self, store: LedgerStore, operation: str, height: int) -> None:
        self._store = store
        self.operation = operation
        self.height = height
        self._observed: dict[LedgerKey, int] = {}
        self._writes: dict[LedgerKey, Any] = {}

    def _observe(self, key: LedgerKey) -> None:
        if key not in self._observed:
            self._observed[key] = self._store.version(key)

    def get(self, key: LedgerKey) -> Any | None:
        if key in self._writes:
            return self._writes[key]
        self._observe(key)
        return self._store.get(key)

    def exists(self, key: LedgerKey) -> bool:
        return self.get(key) is not None

    def put(self, key: LedgerKey, record: Any) -> None:
        if record is None:
            raise ValueError("ledger records are never deleted")
        self._observe(key)
        self._writes[key] = record

    @property
    def observed(self) -> dict[LedgerKey, int]:
        return dict(self._observed)

    @property
    def writes(self) -> dict[LedgerKey, Any]:
        return dict(self._writes)


class LedgerStore:
    """In-memory versioned table with an append-only journal behind it."""

    def __init__(self, journal: Journal | None = None) -> None:
        self._entries: dict[LedgerKey, Versioned] = {}
        self._journal: Journal = journal if journal is not None else MemoryJournal()
        self._commit_lock = threading.Lock()
        self._batch = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: LedgerKey) -> Any | None:
        entry = self._entries.get(key)
        return entry.record if entry is not None else None

    def version(self, key: LedgerKey) -> int:
        """Current version of a key, 0 if it has never been written."""
        entry = self._entries.get(key)
        return entry.version if entry is not None else 0

    def __contains__(self, key: LedgerKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def journal(self) -> Journal:
        return self._journal

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self, operation: str, height: int) -> Iterator[LedgerTransaction]:
        """Open a buffered transaction; commits only if the block exits cleanly."""
        txn = LedgerTransaction(self, str(operation), height)
        yield txn
        self._commit(txn)

    def compare_and_set(
        self,
        key: LedgerKey,
        expected_version: int,
        record: Any,
        operation: str,
        height: int,
    ) -> int:
        """Write a single record if its version still matches. Returns the new version."""
        txn = LedgerTransaction(self, str(operation), height)
        txn._observed[key] = expected_version
        txn._writes[key] = record
        self._commit(txn)
        return self.version(key)

    def _commit(self, txn: LedgerTransaction) -> None:
        if not txn.writes:
            return

        with self._commit_lock:
            for key, expected in txn.observed.items():
                actual = self.version(key)
                if actual != expected:
                    raise ConcurrentModificationError(key.render(), expected, actual)

            self._batch += 1
            entries = [
                JournalEntry(
                    batch=self._batch,
                    height=txn.height,
                    operation=txn.operation,
                    key_kind=key.kind,
                    key_parts=key.to_parts(),
                    version=self.version(key) + 1,
                    payload=encode_record(record),
                )
                for key, record in txn.writes.items()
            ]
            # Journal first: if the append fails nothing is applied.
            self._journal.append(entries)

            for key, record in txn.writes.items():
                self._entries[key] = Versioned(record=record, version=self.version(key) + 1)

        logger.debug(
            "ledger.committed",
            operation=txn.operation,
            batch=self._batch,
            height=txn.height,
            keys=len(entries),
        )

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    @classmethod
    def replay(cls, journal: Journal) -> LedgerStore:
        """Rebuild a store from the journal's committed entries."""
        store = cls(journal=journal)
        for entry in journal.entries():
            key = KEY_TYPES[entry.key_kind].from_parts(entry.key_parts)
            store._entries[key] = Versioned(
                record=decode_record(entry.key_kind, entry.payload),
                version=entry.version,
            )
            store._batch = max(store._batch, entry.batch)
        logger.info("ledger.replayed", keys=len(store), batches=store._batch)
        return store
