"""
Module: ledger_engines.aging
Responsibility:
    Classify an outstanding dealer balance against the tenant's payment
    threshold: days elapsed since the current unpaid run began, days left
    before the threshold, and whether the account is overdue.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel.domain and ledger_kernel.exceptions.

Invariants enforced:
    - Purity: no clock access; "today" is always a parameter.
    - days_remaining = max(0, threshold - days_elapsed).
    - is_overdue <=> days_remaining == 0.

Failure modes:
    - AgingUndefinedError when the balance is not positive or no first
      unpaid debit date is known.  Callers check ``has_outstanding`` first.
    - ValueError for a negative threshold.

Usage:
    from ledger_engines.aging import AgingCalculator

    calculator = AgingCalculator()
    aging = calculator.classify(balance, today=date(2024, 1, 20), threshold_days=15)
"""

from __future__ import annotations

from datetime import date

from ledger_kernel.domain.ledger import AgingClassification, DealerBalance
from ledger_kernel.exceptions import AgingUndefinedError
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.aging")

DEFAULT_THRESHOLD_DAYS = 15


class AgingCalculator:
    """
    Calculate payment aging for outstanding balances.

    Contract:
        Pure functions -- no I/O, no database access.
    Guarantees:
        - ``calculate_age`` is deterministic for any (start, as_of) pair and
          never negative.
    Non-goals:
        - FIFO invoice-level aging.  The clock restarts whenever the running
          balance is cleared (see ledger_engines.balance).
    """

    DEFAULT_THRESHOLD_DAYS = DEFAULT_THRESHOLD_DAYS

    def calculate_age(self, start_date: date, as_of_date: date) -> int:
        """
        Whole days from ``start_date`` to ``as_of_date``.

        A future-dated debit counts as zero days elapsed.
        """
        return max(0, (as_of_date - start_date).days)

    def classify(
        self,
        balance: DealerBalance,
        today: date,
        threshold_days: int | None = None,
    ) -> AgingClassification:
        """
        Aging of a positive balance.

        Preconditions:
            - ``balance.balance > 0`` and ``first_unpaid_debit_date`` is set.
        Raises:
            AgingUndefinedError: If the preconditions do not hold.
            ValueError: If ``threshold_days`` is negative.
        """
        if threshold_days is None:
            threshold_days = self.DEFAULT_THRESHOLD_DAYS
        if threshold_days < 0:
            raise ValueError("threshold_days cannot be negative")
        if not balance.has_outstanding or balance.first_unpaid_debit_date is None:
            raise AgingUndefinedError(balance.dealer_id, balance.balance)

        days_elapsed = self.calculate_age(balance.first_unpaid_debit_date, today)
        days_remaining = max(0, threshold_days - days_elapsed)
        aging = AgingClassification(
            days_elapsed=days_elapsed,
            days_remaining=days_remaining,
            is_overdue=days_remaining == 0,
        )

        logger.debug(
            "aging_classified",
            extra={
                "dealer_id": balance.dealer_id,
                "first_unpaid_debit_date": balance.first_unpaid_debit_date.isoformat(),
                "today": today.isoformat(),
                "threshold_days": threshold_days,
                "days_elapsed": days_elapsed,
                "days_remaining": days_remaining,
            },
        )
        return aging

    def needs_alert(self, aging: AgingClassification, alert_after_days: int) -> bool:
        """True once the unpaid run has lasted at least ``alert_after_days``."""
        return aging.days_elapsed >= alert_after_days
