"""
Module: ledger_reporting.rendering
Responsibility:
    The render engine contract (Document in, DeliveryArtifact out) and a
    ReportLab implementation that draws ledger statements, invoices,
    stock registries and dealership certificates as A4 PDFs, one physical
    page per logical Page.

Architecture position:
    Reporting -- adapter at the edge.  Callers depend on ``RenderEngine``
    only; ReportLab is an implementation detail of this module.

Invariants enforced:
    - The page structure decided by the paginator is kept: every logical
      page ends with a page break and nothing is re-flowed.
    - Totals are drawn only on the terminal page; every other page ends
      with "Continued on next page...".
    - Drawing runs in a worker thread so the event loop is not blocked.

Failure modes:
    - RenderFailed for unsupported MIME types, unknown row or summary
      types, and any error raised by ReportLab.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import Any, Protocol
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ledger_delivery.artifacts import PDF_MIME, DeliveryArtifact, safe_filename
from ledger_engines.pagination import Document, Page
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.values import format_date, format_inr
from ledger_kernel.exceptions import RenderFailed
from ledger_kernel.logging_config import get_logger
from ledger_reporting.models import (
    CertificateField,
    CertificateSummary,
    EntryRow,
    InvoiceRow,
    InvoiceTotals,
    OpeningRow,
    StatementTotals,
    StockRow,
    StockTotals,
)

logger = get_logger("reporting.rendering")

CONTINUED_TEXT = "Continued on next page..."


class RenderEngine(Protocol):
    """Turns a logical Document into a binary artifact."""

    async def render(
        self,
        document: Document,
        mime_type: str,
        filename: str | None = None,
    ) -> DeliveryArtifact:
        """
        Raises:
            RenderFailed: If no bytes could be produced.
        """
        ...


# =============================================================================
# STYLING
# =============================================================================

GOLD = colors.HexColor("#CDA434")
INK = colors.HexColor("#0F172A")
OPENING_BG = colors.HexColor("#FDFAE6")


def get_document_styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name="EntityName", parent=styles["Title"], fontSize=16, textColor=INK,
        alignment=0, spaceAfter=2 * mm,
    ))
    styles.add(ParagraphStyle(
        name="DocHeader", parent=styles["Normal"], fontName="Helvetica-Bold",
        fontSize=9, textColor=INK, leading=12,
    ))
    styles.add(ParagraphStyle(
        name="Continued", parent=styles["Normal"], fontName="Helvetica-Oblique",
        fontSize=8, textColor=colors.grey, alignment=2,
    ))
    return styles


def get_row_table_style(highlight_first: bool) -> TableStyle:
    commands: list[tuple[Any, ...]] = [
        ("BACKGROUND", (0, 0), (-1, 0), INK),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.5, GOLD),
        ("ALIGN", (-3, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    if highlight_first:
        commands.append(("BACKGROUND", (0, 1), (-1, 1), OPENING_BG))
    return TableStyle(commands)


def get_certificate_table_style() -> TableStyle:
    return TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTNAME", (1, 0), (1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("LINEBELOW", (0, 0), (-1, -1), 0.5, GOLD),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ])


def get_totals_table_style() -> TableStyle:
    return TableStyle([
        ("BOX", (0, 0), (-1, -1), 1.5, GOLD),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ])


# =============================================================================
# REPORTLAB ENGINE
# =============================================================================


class ReportLabRenderEngine:
    """
    Draw Documents as A4 PDFs.

    Helvetica has no rupee glyph, so amounts are printed with the ASCII
    ``currency_symbol`` ("Rs. " by default).
    """

    LEDGER_HEADINGS = ("S.N.", "DATE", "NARRATION", "DEBIT", "CREDIT", "BALANCE")
    INVOICE_HEADINGS = ("S.N.", "PRODUCT", "VARIANT", "QTY", "RATE", "AMOUNT")
    STOCK_HEADINGS = ("SN", "PRODUCT ASSET DETAILS", "SIZE", "MRP", "DISC", "FINAL RATE")

    def __init__(
        self,
        entity_name: str,
        clock: Clock | None = None,
        currency_symbol: str = "Rs. ",
    ):
        self._entity_name = entity_name
        self._clock = clock or SystemClock()
        self._symbol = currency_symbol
        self.styles = get_document_styles()
        self.margin = 15 * mm

    async def render(
        self,
        document: Document,
        mime_type: str = PDF_MIME,
        filename: str | None = None,
    ) -> DeliveryArtifact:
        name = filename or safe_filename(f"{document.title or document.subject.descriptor}.pdf")
        if mime_type != PDF_MIME:
            raise RenderFailed(name, mime_type, "unsupported MIME type")

        generated_at = self._clock.now()
        data = await asyncio.to_thread(self._render_pdf, document, name, generated_at)
        logger.info(
            "document_rendered",
            extra={
                "suggested_filename": name,
                "page_count": document.page_count,
                "size_bytes": len(data),
            },
        )
        return DeliveryArtifact(mime_type=PDF_MIME, suggested_filename=name, data=data)

    def _render_pdf(self, document: Document, name: str, generated_at: datetime) -> bytes:
        buffer = BytesIO()
        try:
            doc = SimpleDocTemplate(
                buffer,
                pagesize=A4,
                leftMargin=self.margin,
                rightMargin=self.margin,
                topMargin=self.margin,
                bottomMargin=self.margin,
                title=document.title,
                author=self._entity_name,
            )
            story: list[Any] = []
            for page in document.pages:
                story.extend(self._build_page(document, page, generated_at))
                if not page.is_terminal:
                    story.append(PageBreak())
            doc.build(story)
        except RenderFailed:
            raise
        except Exception as e:
            logger.error("document_render_failed", extra={"suggested_filename": name}, exc_info=True)
            raise RenderFailed(name, PDF_MIME, str(e)) from e
        return buffer.getvalue()

    def _money(self, amount: Decimal | None) -> str:
        return "-" if amount is None else format_inr(amount, symbol=self._symbol)

    def _build_page(self, document: Document, page: Page, generated_at: datetime) -> list:
        elements: list[Any] = [
            Paragraph(escape(self._entity_name), self.styles["EntityName"]),
            Paragraph(
                f"{escape(document.title.upper())} | {page.label}",
                self.styles["DocHeader"],
            ),
            Paragraph(escape(document.subject.descriptor), self.styles["DocHeader"]),
        ]
        period = document.period
        if period is not None and (period.date_from or period.date_to):
            start = format_date(period.date_from) if period.date_from else "START"
            end = format_date(period.date_to) if period.date_to else format_date(generated_at.date())
            elements.append(Paragraph(f"PERIOD: {start} TO {end}", self.styles["DocHeader"]))
        elements.append(Spacer(1, 4 * mm))

        elements.append(self._build_rows_table(page.rows, document.summary))
        elements.append(Spacer(1, 4 * mm))

        if page.is_terminal:
            elements.append(self._build_totals_table(page.summary))
        else:
            elements.append(Paragraph(CONTINUED_TEXT, self.styles["Continued"]))
        return elements

    def _row_cells(self, row: Any) -> tuple[str, ...]:
        if isinstance(row, OpeningRow):
            return ("", "START", row.label, "-", "-", self._money(row.running_balance))
        if isinstance(row, EntryRow):
            return (
                str(row.sequence_no),
                row.date_display,
                row.narration,
                self._money(row.debit),
                self._money(row.credit),
                self._money(row.running_balance),
            )
        if isinstance(row, InvoiceRow):
            product = f"{row.product_name} ({row.brand})" if row.brand else row.product_name
            return (
                str(row.sequence_no),
                product,
                row.variant or "N/A",
                f"{row.quantity} {row.unit}",
                self._money(row.rate),
                self._money(row.amount),
            )
        if isinstance(row, StockRow):
            return self._stock_cells(row)
        if isinstance(row, CertificateField):
            return (row.label.upper(), row.value)
        raise RenderFailed(None, PDF_MIME, f"unsupported row type {type(row).__name__}")

    def _stock_cells(self, row: StockRow) -> tuple[str, ...]:
        # One line per variant inside each pricing cell.
        details = f"{row.product_name.upper()}\nSKU: {row.sku.upper()}\nBRAND: {row.brand.upper()}"
        sizes = "\n".join(v.size for v in row.variants) or "-"
        mrps = "\n".join(self._money(v.mrp) for v in row.variants) or "-"
        finals = "\n".join(self._money(v.final_price) for v in row.variants) or "-"
        if not row.shows_discount:
            return (str(row.sequence_no), details, sizes, mrps, finals)
        discounts = "\n".join(f"{v.discount_percent}%" for v in row.variants) or "-"
        return (str(row.sequence_no), details, sizes, mrps, discounts, finals)

    def _row_layout(self, rows: tuple, summary: Any) -> tuple[tuple[str, ...] | None, list[float]]:
        """Column headings (None for a headless table) and widths."""
        if isinstance(summary, InvoiceTotals):
            return self.INVOICE_HEADINGS, [12 * mm, 70 * mm, 24 * mm, 22 * mm, 26 * mm, 26 * mm]
        if isinstance(summary, StockTotals):
            if any(r.shows_discount for r in rows):
                return self.STOCK_HEADINGS, [12 * mm, 70 * mm, 22 * mm, 28 * mm, 18 * mm, 30 * mm]
            headings = tuple(h for h in self.STOCK_HEADINGS if h != "DISC")
            return headings, [12 * mm, 88 * mm, 22 * mm, 28 * mm, 30 * mm]
        if isinstance(summary, CertificateSummary):
            return None, [60 * mm, 120 * mm]
        return self.LEDGER_HEADINGS, [12 * mm, 28 * mm, 62 * mm, 26 * mm, 26 * mm, 26 * mm]

    def _build_rows_table(self, rows: tuple, summary: Any) -> Table:
        headings, widths = self._row_layout(rows, summary)
        body = [list(self._row_cells(r)) for r in rows]
        if headings is None:
            table = Table(body or [["", ""]], colWidths=widths)
            table.setStyle(get_certificate_table_style())
            return table
        table = Table([list(headings)] + body, colWidths=widths, repeatRows=1)
        highlight = bool(rows) and isinstance(rows[0], OpeningRow)
        table.setStyle(get_row_table_style(highlight))
        return table

    def _build_totals_table(self, summary: Any) -> Table:
        if isinstance(summary, StatementTotals):
            data = [
                ["OPENING", "DR TOTAL", "CR TOTAL", "CLOSING BALANCE"],
                [
                    self._money(summary.opening_balance),
                    self._money(summary.total_debit),
                    self._money(summary.total_credit),
                    self._money(summary.closing_balance),
                ],
            ]
        elif isinstance(summary, InvoiceTotals):
            data = [
                ["SUBTOTAL", "DISCOUNT", "TRANSPORT", "FINAL TOTAL", "RECEIVED", "BALANCE DUE"],
                [
                    self._money(summary.subtotal),
                    self._money(summary.discount),
                    self._money(summary.transport_charges),
                    self._money(summary.final_total),
                    self._money(summary.received_amount),
                    self._money(summary.balance_due),
                ],
            ]
        elif isinstance(summary, StockTotals):
            data = [
                ["PRODUCTS", "VARIANTS"],
                [str(summary.product_count), str(summary.variant_count)],
            ]
        elif isinstance(summary, CertificateSummary):
            data = [
                [f"ISSUED: {summary.issued_display}", summary.signatory.upper()],
            ]
        else:
            raise RenderFailed(None, PDF_MIME, f"unsupported summary type {type(summary).__name__}")
        table = Table(data)
        table.setStyle(get_totals_table_style())
        return table
