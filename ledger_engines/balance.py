"""
Module: ledger_engines.balance
Responsibility:
    Fold a dealer's ledger entries into a running balance, an opening
    balance for a reporting window, and the "first unpaid debit date" that
    anchors payment aging.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel.domain and ledger_kernel.exceptions.

Invariants enforced:
    - Entries are sorted by (occurred_on, recorded_at, id) before folding,
      whatever order the caller supplies.  Statement rows use the same
      ``running_balances`` generator, so printed running balances always
      match the aggregator.
    - balance == sum(DEBIT) - sum(CREDIT), computed in Decimal without
      rounding.
    - The first-unpaid-debit candidate is set when the running balance
      crosses from <= 0 to > 0 and cleared whenever it returns to <= 0.

Failure modes:
    - AggregationInputError for malformed records or entries belonging to
      another dealer.

Usage:
    from ledger_engines.balance import BalanceAggregator

    aggregator = BalanceAggregator()
    balance = aggregator.aggregate(entries)
    opening = aggregator.windowed_opening_balance(entries, date(2024, 4, 1))
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from ledger_kernel.domain.ledger import DealerBalance, LedgerEntry
from ledger_kernel.domain.values import ZERO
from ledger_kernel.exceptions import AggregationInputError
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.balance")


def coerce_entries(
    entries: Iterable[LedgerEntry | Mapping[str, Any]],
    dealer_id: str | None = None,
) -> list[LedgerEntry]:
    """
    Validate the aggregation boundary.

    Mappings are parsed with ``LedgerEntry.from_record``; anything else that
    is not a LedgerEntry is rejected.  When ``dealer_id`` is given (or
    inferred from the first entry) every entry must belong to it.
    """
    result: list[LedgerEntry] = []
    for raw in entries:
        if isinstance(raw, LedgerEntry):
            entry = raw
        elif isinstance(raw, Mapping):
            entry = LedgerEntry.from_record(raw)
        else:
            raise AggregationInputError(None, "entry", f"is not a ledger record: {type(raw).__name__}")

        if dealer_id is None:
            dealer_id = entry.dealer_id
        elif entry.dealer_id != dealer_id:
            raise AggregationInputError(
                entry.id, "dealer_id", f"belongs to {entry.dealer_id}, expected {dealer_id}",
            )
        result.append(entry)
    return result


def order_entries(entries: Iterable[LedgerEntry]) -> list[LedgerEntry]:
    """Entries in folding order: occurred_on, then recorded_at, then id."""
    return sorted(entries, key=lambda e: e.ordering_key)


def running_balances(
    entries: Iterable[LedgerEntry],
    opening: Decimal = ZERO,
) -> Iterator[tuple[LedgerEntry, Decimal]]:
    """Yield each entry (in folding order) with the running balance after it."""
    running = opening
    for entry in order_entries(entries):
        running += entry.signed_amount
        yield entry, running


class BalanceAggregator:
    """
    Derive dealer balances from ledger entries.

    Contract:
        Pure functions -- no I/O, no clock.  "Now" is simply "all entries
        supplied"; pass ``as_of`` to stop at a cutoff date (inclusive).
    Guarantees:
        - Shuffling the input list yields an identical DealerBalance.
        - windowed_opening_balance(entries, c) plus the signed sum of the
          entries on or after c equals aggregate(entries).balance.
    Non-goals:
        - Does not round; rounding belongs to display formatting.
        - Does not validate double-entry balance.
    """

    @traced_engine("balance", "1.0", fingerprint_fields=("entries", "as_of", "dealer_id"))
    def aggregate(
        self,
        entries: Iterable[LedgerEntry | Mapping[str, Any]],
        as_of: date | None = None,
        *,
        dealer_id: str | None = None,
    ) -> DealerBalance:
        """
        Fold entries into a DealerBalance.

        Args:
            entries: Ledger entries of one dealer, in any order.
            as_of: Optional inclusive cutoff on occurred_on.
            dealer_id: Expected dealer; inferred from the entries if omitted.

        Returns:
            DealerBalance with the signed balance and, while the balance is
            positive, the date the current unpaid run started.
        """
        validated = coerce_entries(entries, dealer_id)
        if dealer_id is None and validated:
            dealer_id = validated[0].dealer_id
        if as_of is not None:
            validated = [e for e in validated if e.occurred_on <= as_of]

        running = ZERO
        candidate: date | None = None
        for entry, after in running_balances(validated):
            if running <= ZERO < after:
                candidate = entry.occurred_on
            elif after <= ZERO:
                candidate = None
            running = after

        result = DealerBalance(
            dealer_id=dealer_id,
            balance=running,
            first_unpaid_debit_date=candidate if running > ZERO else None,
        )
        logger.debug(
            "dealer_balance_aggregated",
            extra={
                "dealer_id": dealer_id,
                "entry_count": len(validated),
                "balance": str(result.balance),
                "first_unpaid_debit_date": (
                    candidate.isoformat() if result.first_unpaid_debit_date else None
                ),
            },
        )
        return result

    def windowed_opening_balance(
        self,
        entries: Iterable[LedgerEntry | Mapping[str, Any]],
        cutoff: date,
    ) -> Decimal:
        """
        Signed (unclamped) balance of the entries strictly before ``cutoff``.

        This is the opening row of a statement whose window starts at
        ``cutoff``.
        """
        validated = coerce_entries(entries)
        opening = ZERO
        for _, running in running_balances(e for e in validated if e.occurred_on < cutoff):
            opening = running
        return opening

    @staticmethod
    def split_at(
        entries: Iterable[LedgerEntry],
        cutoff: date,
    ) -> tuple[list[LedgerEntry], list[LedgerEntry]]:
        """Partition entries into (before cutoff, on or after cutoff), each ordered."""
        ordered = order_entries(entries)
        before = [e for e in ordered if e.occurred_on < cutoff]
        after = [e for e in ordered if e.occurred_on >= cutoff]
        return before, after


_default_aggregator = BalanceAggregator()


def aggregate(
    entries: Iterable[LedgerEntry | Mapping[str, Any]],
    as_of: date | None = None,
    *,
    dealer_id: str | None = None,
) -> DealerBalance:
    """Module-level shortcut for ``BalanceAggregator().aggregate``."""
    return _default_aggregator.aggregate(entries, as_of, dealer_id=dealer_id)


def windowed_opening_balance(
    entries: Iterable[LedgerEntry | Mapping[str, Any]],
    cutoff: date,
) -> Decimal:
    """Module-level shortcut for ``BalanceAggregator().windowed_opening_balance``."""
    return _default_aggregator.windowed_opening_balance(entries, cutoff)
