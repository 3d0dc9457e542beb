"""
Tests for the Aging Calculator.

Covers:
- Age calculation
- Threshold classification and the overdue boundary
- Undefined aging for settled accounts
- Dashboard alert rule
"""

from datetime import date
from decimal import Decimal

import pytest

from conftest import day
from ledger_engines.aging import DEFAULT_THRESHOLD_DAYS, AgingCalculator
from ledger_engines.balance import aggregate
from ledger_kernel.domain.ledger import AgingClassification, DealerBalance
from ledger_kernel.exceptions import AgingUndefinedError


def _balance(amount: str, first_unpaid: date | None) -> DealerBalance:
    return DealerBalance("dealer-1", Decimal(amount), first_unpaid)


class TestAgeCalculation:
    def setup_method(self):
        self.calculator = AgingCalculator()

    def test_whole_days(self):
        assert self.calculator.calculate_age(date(2024, 1, 1), date(2024, 1, 31)) == 30

    def test_same_day(self):
        assert self.calculator.calculate_age(date(2024, 1, 1), date(2024, 1, 1)) == 0

    def test_future_debit_clamped(self):
        assert self.calculator.calculate_age(date(2024, 2, 1), date(2024, 1, 1)) == 0


class TestClassification:
    def setup_method(self):
        self.calculator = AgingCalculator()

    def test_documented_example(self, example_entries):
        """Balance 300 since day 10, today day 20, threshold 15."""
        balance = aggregate(example_entries)
        aging = self.calculator.classify(balance, today=day(20), threshold_days=15)

        assert aging == AgingClassification(days_elapsed=10, days_remaining=5, is_overdue=False)

    def test_default_threshold(self):
        assert DEFAULT_THRESHOLD_DAYS == 15
        aging = self.calculator.classify(_balance("10", day(1)), today=day(1))
        assert aging.days_remaining == 15

    @pytest.mark.parametrize(
        "today_day, remaining, overdue",
        [(15, 1, False), (16, 0, True), (40, 0, True)],
    )
    def test_overdue_boundary(self, today_day, remaining, overdue):
        aging = self.calculator.classify(_balance("10", day(1)), day(today_day), 15)
        assert aging.days_remaining == remaining
        assert aging.is_overdue is overdue

    def test_zero_threshold_always_overdue(self):
        aging = self.calculator.classify(_balance("10", day(1)), day(1), 0)
        assert aging.is_overdue

    @pytest.mark.parametrize(
        "amount, first_unpaid",
        [("0", None), ("-50", None), ("10", None)],
    )
    def test_undefined_without_outstanding_balance(self, amount, first_unpaid):
        with pytest.raises(AgingUndefinedError) as exc_info:
            self.calculator.classify(_balance(amount, first_unpaid), day(20))
        assert exc_info.value.code == "AGING_UNDEFINED"

    def test_negative_threshold(self):
        with pytest.raises(ValueError):
            self.calculator.classify(_balance("10", day(1)), day(2), -1)


class TestAlertRule:
    def setup_method(self):
        self.calculator = AgingCalculator()

    def test_alert_from_tenth_day(self):
        assert not self.calculator.needs_alert(AgingClassification(9, 6, False), 10)
        assert self.calculator.needs_alert(AgingClassification(10, 5, False), 10)
