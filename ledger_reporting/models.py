"""
Reporting Domain Models (``ledger_reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for the rows and totals printed on ledger
statements, invoices, stock registries and dealership certificates, and
the single outcome a generate-and-deliver request reports back to the UI.

Architecture position
---------------------
**Reporting layer** -- pure data definitions with ZERO I/O.  Rows are
built by ``ledger_reporting.statements`` and paginated by
``ledger_engines.pagination``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``EntryRow`` has exactly one of ``debit`` / ``credit`` set.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from ledger_delivery.models import DeliveryOutcome
from ledger_kernel.domain.values import HUNDRED, ZERO, format_date, format_inr, round_money

NO_AMOUNT = "-"
DEFAULT_BRAND = "RCM"
WHOLE_PERCENT = Decimal("1")


# =========================================================================
# Ledger statement rows
# =========================================================================


class StatementRowKind(str, Enum):
    OPENING = "OPENING"
    ENTRY = "ENTRY"


@dataclass(frozen=True)
class OpeningRow:
    """Balance brought forward from before the statement window."""

    running_balance: Decimal
    label: str = "OPENING BALANCE"

    kind = StatementRowKind.OPENING
    is_opening = True

    @property
    def balance_display(self) -> str:
        return format_inr(self.running_balance)


@dataclass(frozen=True)
class EntryRow:
    """One ledger entry as printed, with the running balance after it."""

    sequence_no: int
    entry_id: str
    occurred_on: date
    narration: str
    debit: Decimal | None
    credit: Decimal | None
    running_balance: Decimal

    kind = StatementRowKind.ENTRY
    is_opening = False

    def __post_init__(self):
        if (self.debit is None) == (self.credit is None):
            raise ValueError("exactly one of debit or credit must be set")

    @property
    def date_display(self) -> str:
        return format_date(self.occurred_on)

    @property
    def debit_display(self) -> str:
        return format_inr(self.debit) if self.debit is not None else NO_AMOUNT

    @property
    def credit_display(self) -> str:
        return format_inr(self.credit) if self.credit is not None else NO_AMOUNT

    @property
    def balance_display(self) -> str:
        return format_inr(self.running_balance)


StatementRow = OpeningRow | EntryRow


@dataclass(frozen=True)
class StatementTotals:
    """Summary printed on the terminal page of a ledger statement."""

    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal


# =========================================================================
# Invoices
# =========================================================================


@dataclass(frozen=True)
class InvoiceLine:
    """One ordered product."""

    product_name: str
    quantity: Decimal
    rate: Decimal
    unit: str = "PCS"
    brand: str = ""
    variant: str = ""

    def __post_init__(self):
        if self.quantity <= ZERO:
            raise ValueError("quantity must be positive")
        if self.rate < ZERO:
            raise ValueError("rate cannot be negative")

    @property
    def amount(self) -> Decimal:
        return round_money(self.quantity * self.rate)


@dataclass(frozen=True)
class Invoice:
    """An order as it is billed to a dealer."""

    order_no: str
    dealer_id: str
    lines: tuple[InvoiceLine, ...]
    issued_on: date
    discount: Decimal = ZERO
    transport_charges: Decimal = ZERO
    received_amount: Decimal = ZERO

    def __post_init__(self):
        for name in ("discount", "transport_charges", "received_amount"):
            if getattr(self, name) < ZERO:
                raise ValueError(f"{name} cannot be negative")


@dataclass(frozen=True)
class InvoiceRow:
    """One printed invoice line, numbered across pages."""

    sequence_no: int
    product_name: str
    brand: str
    variant: str
    quantity: Decimal
    unit: str
    rate: Decimal
    amount: Decimal

    is_opening = False

    @property
    def rate_display(self) -> str:
        return format_inr(self.rate)

    @property
    def amount_display(self) -> str:
        return format_inr(self.amount)


@dataclass(frozen=True)
class InvoiceTotals:
    """Summary printed on the terminal page of an invoice."""

    subtotal: Decimal
    discount: Decimal
    transport_charges: Decimal
    final_total: Decimal
    received_amount: Decimal
    balance_due: Decimal


# =========================================================================
# Stock registry
# =========================================================================


class AssetType(str, Enum):
    """Product family a stock registry lists."""

    HARDWARE = "Hardware"
    RCM = "RCM"

    @property
    def shows_discount(self) -> bool:
        return self is AssetType.RCM


@dataclass(frozen=True)
class ProductVariant:
    size: str
    mrp: Decimal
    final_price: Decimal

    def __post_init__(self):
        if self.mrp < ZERO:
            raise ValueError("mrp cannot be negative")
        if self.final_price < ZERO:
            raise ValueError("final_price cannot be negative")

    @property
    def discount_percent(self) -> Decimal:
        """Whole-percent discount off MRP, half up; zero when MRP is zero."""
        if self.mrp == ZERO:
            return ZERO
        percent = (self.mrp - self.final_price) / self.mrp * HUNDRED
        return percent.quantize(WHOLE_PERCENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Product:
    """A catalogue product and its priced variants."""

    name: str
    sku: str
    variants: tuple[ProductVariant, ...] = ()
    brand: str = DEFAULT_BRAND


@dataclass(frozen=True)
class StockRow:
    """One product on the stock registry, numbered across pages."""

    sequence_no: int
    product_name: str
    sku: str
    brand: str
    variants: tuple[ProductVariant, ...]
    shows_discount: bool = False

    is_opening = False


@dataclass(frozen=True)
class StockTotals:
    """Counts printed on the terminal page of a stock registry."""

    product_count: int
    variant_count: int


# =========================================================================
# Dealership certificate
# =========================================================================


@dataclass(frozen=True)
class CertificateField:
    label: str
    value: str

    is_opening = False


@dataclass(frozen=True)
class CertificateSummary:
    issued_on: date
    signatory: str = "Authorized Signatory"

    @property
    def issued_display(self) -> str:
        return format_date(self.issued_on)


# =========================================================================
# Pipeline outcome
# =========================================================================


@dataclass(frozen=True)
class ReportOutcome:
    """
    The one notification a generate-and-deliver request produces.

    On failure ``error_code`` carries the ``code`` of the error and no
    artifact was handed to any channel.
    """

    success: bool
    message: str
    document_name: str | None = None
    delivery: DeliveryOutcome | None = None
    error_code: str | None = None

    @property
    def is_degraded(self) -> bool:
        return self.delivery is not None and self.delivery.is_degraded
