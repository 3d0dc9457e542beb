"""
Pure statement row builders.

These functions turn ledger entries, invoices, product catalogues and
dealer profiles into printable rows and totals.  ZERO I/O. ZERO side effects.

Statement rows are produced by the same ``running_balances`` fold the
BalanceAggregator uses, so the running balance printed on every row is
exactly the balance the aggregator computes at that point.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from ledger_engines.balance import running_balances
from ledger_kernel.domain.ledger import DealerProfile, LedgerEntry
from ledger_kernel.domain.values import ZERO
from ledger_reporting.models import (
    DEFAULT_BRAND,
    AssetType,
    CertificateField,
    EntryRow,
    Invoice,
    InvoiceRow,
    InvoiceTotals,
    OpeningRow,
    Product,
    StatementRow,
    StatementTotals,
    StockRow,
    StockTotals,
)

NOT_AVAILABLE = "N/A"
REGISTRY_PENDING = "REG-PENDING"


def build_statement_rows(
    entries: Iterable[LedgerEntry],
    opening_balance: Decimal = ZERO,
    default_narration: str = "TRANSACTION",
) -> list[StatementRow]:
    """
    Opening row followed by one row per entry in folding order.

    Entry rows are numbered from 1; the opening row carries no number.
    """
    rows: list[StatementRow] = [OpeningRow(running_balance=opening_balance)]
    for sequence_no, (entry, running) in enumerate(
        running_balances(entries, opening_balance), start=1,
    ):
        rows.append(
            EntryRow(
                sequence_no=sequence_no,
                entry_id=entry.id,
                occurred_on=entry.occurred_on,
                narration=entry.narration or default_narration,
                debit=entry.amount if entry.is_debit else None,
                credit=None if entry.is_debit else entry.amount,
                running_balance=running,
            )
        )
    return rows


def statement_totals(
    entries: Iterable[LedgerEntry],
    opening_balance: Decimal = ZERO,
) -> StatementTotals:
    total_debit = ZERO
    total_credit = ZERO
    for entry in entries:
        if entry.is_debit:
            total_debit += entry.amount
        else:
            total_credit += entry.amount
    return StatementTotals(
        opening_balance=opening_balance,
        total_debit=total_debit,
        total_credit=total_credit,
        closing_balance=opening_balance + total_debit - total_credit,
    )


def build_invoice_rows(invoice: Invoice) -> list[InvoiceRow]:
    return [
        InvoiceRow(
            sequence_no=index,
            product_name=line.product_name,
            brand=line.brand,
            variant=line.variant,
            quantity=line.quantity,
            unit=line.unit,
            rate=line.rate,
            amount=line.amount,
        )
        for index, line in enumerate(invoice.lines, start=1)
    ]


def invoice_totals(invoice: Invoice) -> InvoiceTotals:
    """Subtotal less discount plus transport; balance due after receipts."""
    subtotal = sum((line.amount for line in invoice.lines), ZERO)
    final_total = subtotal - invoice.discount + invoice.transport_charges
    return InvoiceTotals(
        subtotal=subtotal,
        discount=invoice.discount,
        transport_charges=invoice.transport_charges,
        final_total=final_total,
        received_amount=invoice.received_amount,
        balance_due=final_total - invoice.received_amount,
    )


def build_stock_rows(products: Iterable[Product], asset_type: AssetType) -> list[StockRow]:
    """One row per product, numbered from 1 in catalogue order."""
    return [
        StockRow(
            sequence_no=index,
            product_name=product.name,
            sku=product.sku,
            brand=product.brand or DEFAULT_BRAND,
            variants=product.variants,
            shows_discount=asset_type.shows_discount,
        )
        for index, product in enumerate(products, start=1)
    ]


def stock_totals(products: Iterable[Product]) -> StockTotals:
    products = list(products)
    return StockTotals(
        product_count=len(products),
        variant_count=sum(len(p.variants) for p in products),
    )


def build_certificate_fields(dealer: DealerProfile) -> list[CertificateField]:
    """The labelled dealer particulars a dealership certificate prints."""
    mobile = f"+91 {dealer.mobile}" if dealer.mobile else NOT_AVAILABLE
    address = ", ".join(part for part in (dealer.address, dealer.city) if part)
    if dealer.pincode:
        address = f"{address} - {dealer.pincode}" if address else dealer.pincode
    return [
        CertificateField("Shop Name", dealer.shop_name),
        CertificateField("Proprietor", dealer.owner_name or NOT_AVAILABLE),
        CertificateField("Mobile", mobile),
        CertificateField("City", dealer.city or NOT_AVAILABLE),
        CertificateField("Registry No.", dealer.dealer_code or REGISTRY_PENDING),
        CertificateField("Registered Address", address or NOT_AVAILABLE),
    ]
