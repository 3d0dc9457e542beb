"""
Module: ledger_kernel.services.ledger_store
Responsibility: The async Ledger Store port the reporting core reads from,
    plus two implementations: an in-memory store for embedding and tests,
    and a SQLAlchemy store that runs LedgerSelector queries off the event
    loop.
Architecture position: Kernel > Services.  May import from selectors/,
    domain/ and db/.

Invariants enforced:
    - Read-only from the reporting core's point of view.  The in-memory
      store's mutators stand in for the CRUD layer.
    - No caching: every call reads current state, and SqlLedgerStore opens a
      fresh session per call, so two concurrent statement requests never
      share mutable state.
    - Returned lists are new objects; callers may sort or slice freely.

Failure modes:
    - LedgerStoreError for unknown dealers and database failures.
    - AggregationInputError for malformed rows (propagated from the
      selector, not wrapped).
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Callable, Iterable, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ledger_kernel.domain.ledger import DealerProfile, LedgerEntry
from ledger_kernel.exceptions import LedgerStoreError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.ledger_selector import LedgerSelector

logger = get_logger("services.ledger_store")

T = TypeVar("T")


class LedgerStore(Protocol):
    """Read access the reporting core needs from the persistence layer."""

    async def fetch_entries(
        self,
        dealer_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[LedgerEntry]:
        ...

    async def fetch_entries_by_dealer(
        self,
        date_to: date | None = None,
    ) -> dict[str, list[LedgerEntry]]:
        ...

    async def fetch_dealer(self, dealer_id: str) -> DealerProfile:
        ...

    async def fetch_dealers(self) -> list[DealerProfile]:
        ...


def _in_window(entry: LedgerEntry, date_from: date | None, date_to: date | None) -> bool:
    if date_from is not None and entry.occurred_on < date_from:
        return False
    if date_to is not None and entry.occurred_on > date_to:
        return False
    return True


class InMemoryLedgerStore:
    """
    Dict-backed ledger store.

    The mutators model the surrounding CRUD layer (create, administrative
    correction, delete on request).
    """

    def __init__(
        self,
        dealers: Iterable[DealerProfile] = (),
        entries: Iterable[LedgerEntry] = (),
    ):
        self._dealers: dict[str, DealerProfile] = {d.dealer_id: d for d in dealers}
        self._entries: dict[str, LedgerEntry] = {e.id: e for e in entries}

    def add_dealer(self, dealer: DealerProfile) -> None:
        self._dealers[dealer.dealer_id] = dealer

    def add_entry(self, entry: LedgerEntry) -> None:
        self._entries[entry.id] = entry

    def replace_entry(self, entry: LedgerEntry) -> None:
        """Administrative correction: update in place, no audit trail."""
        if entry.id not in self._entries:
            raise LedgerStoreError(entry.dealer_id, f"entry {entry.id} does not exist")
        self._entries[entry.id] = entry

    def delete_entry(self, entry_id: str) -> None:
        entry = self._entries.pop(entry_id, None)
        if entry is None:
            raise LedgerStoreError(None, f"entry {entry_id} does not exist")

    async def fetch_entries(
        self,
        dealer_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[LedgerEntry]:
        return [
            e for e in self._entries.values()
            if e.dealer_id == dealer_id and _in_window(e, date_from, date_to)
        ]

    async def fetch_entries_by_dealer(
        self,
        date_to: date | None = None,
    ) -> dict[str, list[LedgerEntry]]:
        grouped: dict[str, list[LedgerEntry]] = {}
        for entry in self._entries.values():
            if _in_window(entry, None, date_to):
                grouped.setdefault(entry.dealer_id, []).append(entry)
        return grouped

    async def fetch_dealer(self, dealer_id: str) -> DealerProfile:
        dealer = self._dealers.get(dealer_id)
        if dealer is None:
            raise LedgerStoreError(dealer_id, "unknown dealer")
        return dealer

    async def fetch_dealers(self) -> list[DealerProfile]:
        return sorted(
            (d for d in self._dealers.values() if d.is_active),
            key=lambda d: (d.shop_name, d.dealer_code),
        )


class SqlLedgerStore:
    """
    Ledger store backed by SQLAlchemy.

    Each call opens its own session from ``session_factory`` and runs the
    selector in a worker thread, so the event loop keeps running while the
    database answers.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    async def _read(self, dealer_id: str | None, query: Callable[[LedgerSelector], T]) -> T:
        def run() -> T:
            with self._session_factory() as session:
                return query(LedgerSelector(session))

        try:
            return await asyncio.to_thread(run)
        except SQLAlchemyError as e:
            logger.error(
                "ledger_store_read_failed",
                extra={"dealer_id": dealer_id},
                exc_info=True,
            )
            raise LedgerStoreError(dealer_id, str(e)) from e

    async def fetch_entries(
        self,
        dealer_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[LedgerEntry]:
        return await self._read(
            dealer_id,
            lambda sel: sel.entries_for_dealer(dealer_id, date_from, date_to),
        )

    async def fetch_entries_by_dealer(
        self,
        date_to: date | None = None,
    ) -> dict[str, list[LedgerEntry]]:
        return await self._read(None, lambda sel: sel.entries_by_dealer(date_to))

    async def fetch_dealer(self, dealer_id: str) -> DealerProfile:
        dealer = await self._read(dealer_id, lambda sel: sel.dealer(dealer_id))
        if dealer is None:
            raise LedgerStoreError(dealer_id, "unknown dealer")
        return dealer

    async def fetch_dealers(self) -> list[DealerProfile]:
        return await self._read(None, lambda sel: sel.dealers(active_only=True))
