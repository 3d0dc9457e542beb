"""
Ledger -- dealer ledger entries and the views derived from them.

Responsibility:
    The closed DEBIT | CREDIT entry type with a strict Decimal amount, the
    dealer profile DTO read from the store, and the derived (never
    persisted) DealerBalance and AgingClassification values.

Architecture position:
    Kernel > Domain -- pure data definitions, zero I/O.

Invariants enforced:
    - ``LedgerEntry.amount`` is a positive Decimal with at most two
      decimal places.
    - ``LedgerEntry.kind`` is an ``EntryKind`` member.
    - ``recorded_at`` is timezone-aware (naive values are taken as UTC),
      so ``ordering_key`` is always comparable.

Failure modes:
    - AggregationInputError on any malformed field, raised at construction
      so bad rows never reach a running balance.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from ledger_kernel.domain.values import MAX_AMOUNT, ZERO, has_money_precision, parse_amount
from ledger_kernel.exceptions import AggregationInputError


class EntryKind(str, Enum):
    """Direction of a ledger movement against a dealer's account."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


def _narration(value: Any) -> str:
    # Loose rows may carry numbers or other scalars here.
    if value is None:
        return ""
    return str(value).strip()


def _parse_date(value: Any, entry_id: Any, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError as e:
            raise AggregationInputError(entry_id, field, f"is not an ISO date: {value!r}") from e
    raise AggregationInputError(entry_id, field, "is missing")


def _parse_timestamp(value: Any, entry_id: Any, field: str) -> datetime:
    if isinstance(value, str) and value:
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise AggregationInputError(entry_id, field, f"is not an ISO timestamp: {value!r}") from e
    if isinstance(value, datetime):
        return value
    raise AggregationInputError(entry_id, field, "is missing")


@dataclass(frozen=True)
class LedgerEntry:
    """
    One dated DEBIT or CREDIT movement against a dealer.

    Contract:
        Immutable.  Administrative corrections replace the whole entry in
        the store; the reporting core only ever reads entries.

    Guarantees:
        - ``amount`` > 0 with at most two decimal places.
        - ``ordering_key`` sorts by (occurred_on, recorded_at, id).
    """

    id: str
    dealer_id: str
    amount: Decimal
    kind: EntryKind
    narration: str
    occurred_on: date
    recorded_at: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise AggregationInputError(self.id, "amount", f"must be Decimal, got {type(self.amount).__name__}")
        if not self.amount.is_finite() or self.amount <= ZERO:
            raise AggregationInputError(self.id, "amount", f"must be positive, got {self.amount}")
        if self.amount > MAX_AMOUNT:
            raise AggregationInputError(self.id, "amount", f"exceeds {MAX_AMOUNT}: {self.amount}")
        if not has_money_precision(self.amount):
            raise AggregationInputError(self.id, "amount", f"has more than two decimal places: {self.amount}")
        if not isinstance(self.kind, EntryKind):
            try:
                object.__setattr__(self, "kind", EntryKind(str(self.kind).upper()))
            except ValueError as e:
                raise AggregationInputError(self.id, "kind", f"is unknown: {self.kind!r}") from e
        if isinstance(self.occurred_on, datetime) or not isinstance(self.occurred_on, date):
            raise AggregationInputError(self.id, "occurred_on", "must be a date")
        if not isinstance(self.recorded_at, datetime):
            raise AggregationInputError(self.id, "recorded_at", "must be a datetime")
        if self.recorded_at.tzinfo is None:
            object.__setattr__(self, "recorded_at", self.recorded_at.replace(tzinfo=timezone.utc))

    @property
    def is_debit(self) -> bool:
        return self.kind is EntryKind.DEBIT

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it moves the dealer balance (debits up, credits down)."""
        return self.amount if self.is_debit else -self.amount

    @property
    def ordering_key(self) -> tuple[date, datetime, str]:
        return (self.occurred_on, self.recorded_at, self.id)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> LedgerEntry:
        """
        Build an entry from a loosely typed store row.

        Accepts both the store column names (``type``, ``date``,
        ``created_at``) and the domain names (``kind``, ``occurred_on``,
        ``recorded_at``).

        Raises:
            AggregationInputError: If any field is missing or malformed.
        """
        entry_id = record.get("id")
        if entry_id is None or entry_id == "":
            raise AggregationInputError(None, "id", "is missing")
        dealer_id = record.get("dealer_id")
        if dealer_id is None or dealer_id == "":
            raise AggregationInputError(entry_id, "dealer_id", "is missing")

        raw_amount = record.get("amount")
        if raw_amount is None:
            raise AggregationInputError(entry_id, "amount", "is missing")
        try:
            amount = parse_amount(raw_amount)
        except ValueError as e:
            raise AggregationInputError(entry_id, "amount", f"is not a number: {raw_amount!r}") from e

        raw_kind = record.get("kind", record.get("type"))
        try:
            kind = EntryKind(str(raw_kind).upper())
        except ValueError as e:
            raise AggregationInputError(entry_id, "kind", f"is unknown: {raw_kind!r}") from e

        occurred_on = _parse_date(
            record.get("occurred_on", record.get("date")), entry_id, "occurred_on",
        )
        recorded_at = _parse_timestamp(
            record.get("recorded_at", record.get("created_at")), entry_id, "recorded_at",
        )

        return cls(
            id=str(entry_id),
            dealer_id=str(dealer_id),
            amount=amount,
            kind=kind,
            narration=_narration(record.get("narration")),
            occurred_on=occurred_on,
            recorded_at=recorded_at,
        )


@dataclass(frozen=True)
class DealerProfile:
    """The dealer fields the reporting core prints and dials."""

    dealer_id: str
    dealer_code: str
    shop_name: str
    mobile: str = ""
    owner_name: str = ""
    is_active: bool = True
    city: str = ""
    address: str = ""
    pincode: str = ""


@dataclass(frozen=True)
class DealerBalance:
    """
    Derived balance of one dealer.

    ``balance`` is sum(DEBIT) - sum(CREDIT).  ``first_unpaid_debit_date`` is
    only meaningful while ``balance > 0``.
    """

    dealer_id: str | None
    balance: Decimal
    first_unpaid_debit_date: date | None

    @property
    def has_outstanding(self) -> bool:
        return self.balance > ZERO


@dataclass(frozen=True)
class AgingClassification:
    """Elapsed and remaining days against the payment threshold."""

    days_elapsed: int
    days_remaining: int
    is_overdue: bool
