"""
Module: ledger_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines: balance aggregation, aging classification and
    document pagination.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel (domain, exceptions, logging).
    MUST NOT import ledger_reporting or ledger_delivery.

Invariants enforced:
    - Purity: engines never read the clock.  "Today" is a parameter.
    - Decimal-only arithmetic for all monetary amounts.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from ledger_engines import BalanceAggregator, AgingCalculator, paginate
"""

from ledger_engines.aging import DEFAULT_THRESHOLD_DAYS, AgingCalculator
from ledger_engines.balance import (
    BalanceAggregator,
    aggregate,
    coerce_entries,
    order_entries,
    running_balances,
    windowed_opening_balance,
)
from ledger_engines.pagination import Document, Page, Period, Subject, paginate
from ledger_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "AgingCalculator",
    "DEFAULT_THRESHOLD_DAYS",
    "BalanceAggregator",
    "aggregate",
    "coerce_entries",
    "order_entries",
    "running_balances",
    "windowed_opening_balance",
    "Document",
    "Page",
    "Period",
    "Subject",
    "paginate",
    "compute_input_fingerprint",
    "traced_engine",
]
