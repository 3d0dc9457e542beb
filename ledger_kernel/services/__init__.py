"""Kernel services: the async ledger store port and its implementations."""

from ledger_kernel.services.ledger_store import (
    InMemoryLedgerStore,
    LedgerStore,
    SqlLedgerStore,
)

__all__ = [
    "InMemoryLedgerStore",
    "LedgerStore",
    "SqlLedgerStore",
]
