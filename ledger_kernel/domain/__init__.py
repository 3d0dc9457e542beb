"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.ledger import (
    AgingClassification,
    DealerBalance,
    DealerProfile,
    EntryKind,
    LedgerEntry,
)
from ledger_kernel.domain.values import (
    MONEY_QUANTUM,
    ZERO,
    discounted_price,
    format_date,
    format_inr,
    parse_amount,
    round_money,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "AgingClassification",
    "DealerBalance",
    "DealerProfile",
    "EntryKind",
    "LedgerEntry",
    "MONEY_QUANTUM",
    "ZERO",
    "discounted_price",
    "format_date",
    "format_inr",
    "parse_amount",
    "round_money",
]
