"""Append-only journal of committed ledger write-sets.

Two implementations:
    - MemoryJournal: a list, for tests and ephemeral nodes.
    - SqlJournal:    SQLAlchemy 2.0 table ``journal_entries`` (SQLite by default).

Entries are never updated or deleted. Replaying them in order reproduces the
ledger store exactly, versions included.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import JSON, DateTime, Index, Integer, String, create_engine, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from atomic_exchange.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class JournalEntry:
    """One written key within a committed batch."""

    batch: int
    height: int
    operation: str
    key_kind: str
    key_parts: list[Any]
    version: int
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "batch": self.batch,
            "height": self.height,
            "operation": self.operation,
            "key_kind": self.key_kind,
            "key_parts": list(self.key_parts),
            "version": self.version,
            "payload": dict(self.payload),
        }


@runtime_checkable
class Journal(Protocol):
    """Storage for committed write-sets."""

    def append(self, entries: list[JournalEntry]) -> None: ...

    def entries(self) -> list[JournalEntry]: ...

    def close(self) -> None: ...


class MemoryJournal:
    """In-process journal. Lost when the process exits."""

    def __init__(self) -> None:
        self._entries: list[JournalEntry] = []

    def append(self, entries: list[JournalEntry]) -> None:
        self._entries.extend(entries)

    def entries(self) -> list[JournalEntry]:
        return list(self._entries)

    def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# SQL-backed journal
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    """Base class for journal ORM models."""

    pass


class JournalEntryRow(Base):
    """A row of the append-only ledger journal."""

    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    batch: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Commit sequence number; all rows of one transaction share it",
    )
    height: Mapped[int] = mapped_column(Integer, nullable=False)
    operation: Mapped[str] = mapped_column(String(32), nullable=False)
    key_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    key_parts: Mapped[list] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    __table_args__ = (Index("idx_journal_batch", "batch"),)

    def to_entry(self) -> JournalEntry:
        return JournalEntry(
            batch=self.batch,
            height=self.height,
            operation=self.operation,
            key_kind=self.key_kind,
            key_parts=list(self.key_parts),
            version=self.version,
            payload=dict(self.payload),
        )

    def __repr__(self) -> str:
        return (
            f"<JournalEntryRow batch={self.batch} op={self.operation} "
            f"key={self.key_kind}/{self.key_parts} v{self.version}>"
        )


class SqlJournal:
    """Journal persisted through SQLAlchemy.

    Usage:
        journal = SqlJournal("sqlite:///ledger.db")
        store = LedgerStore.replay(journal)
    """

    def __init__(self, url: str, echo: bool = False, retry_attempts: int = 3) -> None:
        self._engine = create_engine(url, echo=echo)
        self._retry_attempts = retry_attempts
        Base.metadata.create_all(self._engine)
        logger.info("journal.opened", url=self._engine.url.render_as_string(hide_password=True))

    def append(self, entries: list[JournalEntry]) -> None:
        if not entries:
            return
        appender = retry(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
            reraise=True,
        )(self._append_once)
        appender(entries)

    def _append_once(self, entries: list[JournalEntry]) -> None:
        with Session(self._engine) as session, session.begin():
            session.add_all(
                JournalEntryRow(
                    batch=e.batch,
                    height=e.height,
                    operation=e.operation,
                    key_kind=e.key_kind,
                    key_parts=list(e.key_parts),
                    version=e.version,
                    payload=dict(e.payload),
                )
                for e in entries
            )

    def entries(self) -> list[JournalEntry]:
        with Session(self._engine) as session:
            rows = session.scalars(select(JournalEntryRow).order_by(JournalEntryRow.id))
            return [row.to_entry() for row in rows]

    def close(self) -> None:
        self._engine.dispose()
        logger.info("journal.closed")


def open_journal(url: str = "", echo: bool = False, retry_attempts: int = 3) -> Journal:
    """Return a SqlJournal for a URL, or a MemoryJournal when the URL is empty."""
    if not url:
        return MemoryJournal()
    return SqlJournal(url, echo=echo, retry_attempts=retry_attempts)
