"""
Tests for the ledger domain types and value helpers.

Covers:
- LedgerEntry construction invariants
- Loose record parsing at the aggregation boundary
- Money parsing, half-up rounding and INR display
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from ledger_kernel.domain.ledger import DealerBalance, EntryKind, LedgerEntry
from ledger_kernel.domain.values import (
    discounted_price,
    format_date,
    format_inr,
    has_money_precision,
    parse_amount,
    round_money,
)
from ledger_kernel.exceptions import AggregationInputError


def _record(**overrides):
    record = {
        "id": "e1",
        "dealer_id": "d1",
        "amount": "250.00",
        "type": "DEBIT",
        "narration": "  ORD #ORD-12 ",
        "date": "2024-03-05",
        "created_at": "2024-03-05T10:15:00Z",
    }
    record.update(overrides)
    return record


class TestLedgerEntry:
    """Construction invariants."""

    def _entry(self, **overrides):
        fields = dict(
            id="e1",
            dealer_id="d1",
            amount=Decimal("10"),
            kind=EntryKind.DEBIT,
            narration="",
            occurred_on=date(2024, 1, 1),
            recorded_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        fields.update(overrides)
        return LedgerEntry(**fields)

    def test_signed_amount(self):
        assert self._entry().signed_amount == Decimal("10")
        assert self._entry(kind=EntryKind.CREDIT).signed_amount == Decimal("-10")

    def test_kind_string_coerced(self):
        assert self._entry(kind="CREDIT").kind is EntryKind.CREDIT

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), Decimal("1.005")])
    def test_rejects_bad_amounts(self, amount):
        with pytest.raises(AggregationInputError) as exc_info:
            self._entry(amount=amount)
        assert exc_info.value.field == "amount"

    def test_rejects_float_amount(self):
        with pytest.raises(AggregationInputError):
            self._entry(amount=10.0)

    def test_rejects_unknown_kind(self):
        with pytest.raises(AggregationInputError) as exc_info:
            self._entry(kind="REFUND")
        assert exc_info.value.code == "AGGREGATION_INPUT_ERROR"

    def test_rejects_datetime_occurred_on(self):
        with pytest.raises(AggregationInputError):
            self._entry(occurred_on=datetime(2024, 1, 1))

    def test_naive_recorded_at_is_utc(self):
        entry = self._entry(recorded_at=datetime(2024, 1, 1, 9, 30))
        assert entry.recorded_at.tzinfo is timezone.utc

    def test_ordering_key(self):
        entry = self._entry()
        assert entry.ordering_key == (entry.occurred_on, entry.recorded_at, "e1")


class TestFromRecord:
    """Loose store rows are parsed or rejected, never passed through."""

    def test_store_column_names(self):
        entry = LedgerEntry.from_record(_record())
        assert entry.kind is EntryKind.DEBIT
        assert entry.amount == Decimal("250.00")
        assert entry.occurred_on == date(2024, 3, 5)
        assert entry.recorded_at == datetime(2024, 3, 5, 10, 15, tzinfo=timezone.utc)
        assert entry.narration == "ORD #ORD-12"

    def test_domain_names_and_lowercase_kind(self):
        entry = LedgerEntry.from_record({
            "id": 7,
            "dealer_id": "d1",
            "amount": 99,
            "kind": "credit",
            "occurred_on": date(2024, 1, 2),
            "recorded_at": datetime(2024, 1, 2, 8, 0),
        })
        assert entry.id == "7"
        assert entry.kind is EntryKind.CREDIT
        assert entry.signed_amount == Decimal("-99")

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"amount": None}, "amount"),
            ({"amount": "NaN"}, "amount"),
            ({"amount": "abc"}, "amount"),
            ({"amount": "-1"}, "amount"),
            ({"amount": "1e30"}, "amount"),
            ({"amount": "1234567890123456789012345678901.5"}, "amount"),
            ({"amount": "0.001"}, "amount"),
            ({"type": "REVERSAL"}, "kind"),
            ({"date": None}, "occurred_on"),
            ({"date": "05/03/2024"}, "occurred_on"),
            ({"dealer_id": ""}, "dealer_id"),
            ({"id": None}, "id"),
        ],
    )
    def test_malformed_records(self, overrides, field):
        with pytest.raises(AggregationInputError) as exc_info:
            LedgerEntry.from_record(_record(**overrides))
        assert exc_info.value.field == field

    def test_trailing_zero_places_accepted(self):
        entry = LedgerEntry.from_record(_record(amount="12.5000"))
        assert entry.amount == Decimal("12.5")

    def test_largest_storable_amount_accepted(self):
        entry = LedgerEntry.from_record(_record(amount="999999999999.99"))
        assert entry.amount == Decimal("999999999999.99")

    @pytest.mark.parametrize("narration, expected", [(42, "42"), (None, ""), ("  ", "")])
    def test_narration_coerced_to_text(self, narration, expected):
        entry = LedgerEntry.from_record(_record(narration=narration))
        assert entry.narration == expected


class TestDealerBalance:
    def test_has_outstanding(self):
        assert DealerBalance("d1", Decimal("0.01"), date(2024, 1, 1)).has_outstanding
        assert not DealerBalance("d1", Decimal("0"), None).has_outstanding
        assert not DealerBalance("d1", Decimal("-5"), None).has_outstanding


class TestValues:
    def test_parse_amount_float_through_str(self):
        assert parse_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [True, "inf", "", "1,000"])
    def test_parse_amount_rejects(self, value):
        with pytest.raises(ValueError):
            parse_amount(value)

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("1.10"), True),
            (Decimal("1.100"), True),
            (Decimal("1E+30"), True),
            (Decimal("1.001"), False),
            (Decimal("1234567890123456789012345678901.125"), False),
        ],
    )
    def test_has_money_precision(self, amount, expected):
        assert has_money_precision(amount) is expected

    def test_round_money_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("2.344")) == Decimal("2.34")
        assert round_money(Decimal("-2.345")) == Decimal("-2.35")

    def test_discounted_price(self):
        assert discounted_price(Decimal("199.99"), Decimal("15")) == Decimal("169.99")
        assert discounted_price(Decimal("100"), Decimal("0")) == Decimal("100.00")

    def test_discounted_price_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            discounted_price(Decimal("100"), Decimal("101"))

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("0"), "₹0.00"),
            (Decimal("999"), "₹999.00"),
            (Decimal("1000"), "₹1,000.00"),
            (Decimal("123456.5"), "₹1,23,456.50"),
            (Decimal("1234567.5"), "₹12,34,567.50"),
            (Decimal("-4500"), "-₹4,500.00"),
        ],
    )
    def test_format_inr(self, amount, expected):
        assert format_inr(amount) == expected

    def test_format_inr_custom_symbol(self):
        assert format_inr(Decimal("1500"), symbol="Rs. ") == "Rs. 1,500.00"

    def test_format_date(self):
        assert format_date(date(2024, 3, 5)) == "05/03/2024"
