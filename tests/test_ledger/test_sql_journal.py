"""Tests for the SQLAlchemy-backed journal on an on-disk SQLite file."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError

from atomic_exchange.config import Settings
from atomic_exchange.domain.context import CallContext
from atomic_exchange.infrastructure.ledger import (
    JournalEntry,
    LedgerStore,
    MemoryJournal,
    SqlJournal,
    open_journal,
)
from atomic_exchange.services.exchange import AtomicExchange

pytestmark = pytest.mark.integration


def _url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'ledger.db'}"


def _entry(batch: int = 1) -> JournalEntry:
    return JournalEntry(
        batch=batch,
        height=3,
        operation="POOL_CREATED",
        key_kind="pool_nonce",
        key_parts=[],
        version=batch,
        payload={"value": batch},
    )


class TestSqlJournal:
    def test_append_and_read_back_in_order(self, tmp_path: Path) -> None:
        journal = SqlJournal(_url(tmp_path))
        journal.append([_entry(1)])
        journal.append([_entry(2)])
        assert [e.batch for e in journal.entries()] == [1, 2]
        assert journal.entries()[0] == _entry(1)
        journal.close()

    def test_entries_survive_reopen(self, tmp_path: Path) -> None:
        SqlJournal(_url(tmp_path)).append([_entry(1)])
        reopened = SqlJournal(_url(tmp_path))
        assert reopened.entries() == [_entry(1)]
        reopened.close()

    def test_transient_operational_error_is_retried(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        journal = SqlJournal(_url(tmp_path), retry_attempts=3)
        real_append = journal._append_once
        calls = {"n": 0}

        def flaky(entries: list[JournalEntry]) -> None:
            calls["n"] += 1
            if calls["n"] == 1:
                raise OperationalError("INSERT", {}, Exception("database is locked"))
            real_append(entries)

        monkeypatch.setattr(journal, "_append_once", flaky)
        journal.append([_entry(1)])

        assert calls["n"] == 2
        assert len(journal.entries()) == 1
        journal.close()

    def test_open_journal_selects_backend(self, tmp_path: Path) -> None:
        assert isinstance(open_journal(""), MemoryJournal)
        journal = open_journal(_url(tmp_path))
        assert isinstance(journal, SqlJournal)
        journal.close()


class TestExchangeRecovery:
    def test_state_rebuilt_from_persisted_journal(
        self, tmp_path: Path, hash_lock: bytes, preimage: bytes
    ) -> None:
        settings = Settings(journal_url=_url(tmp_path))
        first = AtomicExchange.from_settings(settings)
        swap_id = first.initiate_swap(
            CallContext("alice", 5),
            participant="bob",
            amount=10000,
            hash_lock=hash_lock,
            time_lock=100,
            swap_token="STX",
            target_chain="BTC",
            target_address=b"\x02" * 33,
        )
        first.close()

        second = AtomicExchange.from_settings(settings)
        assert second.get_swap(swap_id).amount == 10000
        assert second.get_protocol_fee_balance() == 20
        assert second.clock.current == 5
        second.claim_swap(CallContext("bob", 6), swap_id, preimage)
        assert second.get_swap(swap_id).claimed
        second.close()

    def test_replayed_store_matches_live_store(self, tmp_path: Path) -> None:
        journal = SqlJournal(_url(tmp_path))
        live = AtomicExchange(store=LedgerStore(journal=journal))
        live.create_mixing_pool(CallContext("carol", 1), 1000, 10000, 2, 10, 100)
        rebuilt = LedgerStore.replay(journal)
        assert len(rebuilt) == len(live.store)
        journal.close()
