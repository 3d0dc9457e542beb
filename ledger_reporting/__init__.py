"""
ledger_reporting -- statements, invoices, collection hub and the
generate-and-deliver pipeline.

Architecture position:
    Reporting -- top of the stack.  Imports ledger_engines, ledger_kernel,
    ledger_delivery and ledger_config.
"""

from ledger_reporting.collection import (
    CollectionItem,
    CollectionService,
    DashboardSummary,
    ReminderMode,
    reminder_caption,
)
from ledger_reporting.models import (
    EntryRow,
    Invoice,
    InvoiceLine,
    InvoiceRow,
    InvoiceTotals,
    OpeningRow,
    ReportOutcome,
    StatementRowKind,
    StatementTotals,
)
from ledger_reporting.rendering import RenderEngine, ReportLabRenderEngine
from ledger_reporting.service import StatementService
from ledger_reporting.statements import (
    build_invoice_rows,
    build_statement_rows,
    invoice_totals,
    statement_totals,
)

__all__ = [
    "CollectionItem",
    "CollectionService",
    "DashboardSummary",
    "ReminderMode",
    "reminder_caption",
    "EntryRow",
    "Invoice",
    "InvoiceLine",
    "InvoiceRow",
    "InvoiceTotals",
    "OpeningRow",
    "ReportOutcome",
    "StatementRowKind",
    "StatementTotals",
    "RenderEngine",
    "ReportLabRenderEngine",
    "StatementService",
    "build_invoice_rows",
    "build_statement_rows",
    "invoice_totals",
    "statement_totals",
]
