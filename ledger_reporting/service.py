"""
Statement Service (``ledger_reporting.service``).

Responsibility
--------------
Runs the generate-and-deliver pipeline: ledger read, balance fold, row
building, pagination, rendering and delivery.  Also builds invoices,
stock registries and dealership certificates, and sends payment reminders
through the same dispatcher.

Architecture position
---------------------
**Reporting layer** -- thin orchestration.  Financial logic lives in
``ledger_engines`` and ``ledger_reporting.statements``; I/O lives behind
the injected LedgerStore, RenderEngine and DeliveryDispatcher.
Constructor: ``store`` + ``render_engine`` + ``dispatcher`` + ``clock``
+ ``config``.

Invariants enforced
-------------------
* Exactly one ReportOutcome (and at most one ``notify`` call) per
  top-level request.
* Any ReportingCoreError becomes a failed outcome; no partially rendered
  artifact is ever handed to a channel.
* The text-only deep link outcome is disclosed in the message.
* No shared mutable state between requests: every call reads the store
  and builds its own document.

Failure modes
-------------
* Invalid windows (``date_to`` before ``date_from``), unknown reminder
  modes and unknown asset types -> InvalidReportRequest, raised before
  any read and reported as a failed outcome by the deliver methods.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date
from uuid import uuid4

from ledger_config.schema import ReportingConfig
from ledger_delivery.artifacts import (
    PDF_MIME,
    TEXT_MIME,
    DeliveryArtifact,
    certificate_caption,
    certificate_filename,
    invoice_caption,
    invoice_filename,
    ledger_caption,
    ledger_filename,
    safe_filename,
    stock_caption,
    stock_filename,
)
from ledger_delivery.dispatcher import DeliveryDispatcher
from ledger_delivery.models import (
    CancellationToken,
    DeliveryMethod,
    DeliveryOutcome,
    RecipientHint,
)
from ledger_engines.aging import AgingCalculator
from ledger_engines.balance import BalanceAggregator
from ledger_engines.pagination import Document, Period, Subject, paginate
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.ledger import DealerProfile
from ledger_kernel.domain.values import ZERO, format_date
from ledger_kernel.exceptions import InvalidReportRequest, ReportingCoreError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.services.ledger_store import LedgerStore
from ledger_reporting.collection import (
    CollectionItem,
    ReminderMode,
    parse_reminder_mode,
    reminder_caption,
)
from ledger_reporting.models import (
    AssetType,
    CertificateSummary,
    Invoice,
    Product,
    ReportOutcome,
)
from ledger_reporting.rendering import RenderEngine
from ledger_reporting.statements import (
    build_certificate_fields,
    build_invoice_rows,
    build_statement_rows,
    build_stock_rows,
    invoice_totals,
    statement_totals,
    stock_totals,
)

logger = get_logger("reporting.service")

LEDGER_TITLE = "Ledger Statement"
INVOICE_TITLE = "Dealer Invoice"
STOCK_TITLE = "Stock Registry"
STOCK_DESCRIPTOR = "OFFICIAL INVENTORY LOG"
CERTIFICATE_TITLE = "Certificate of Dealership"

Notifier = Callable[[ReportOutcome], None]


def _period(date_from: date | None, date_to: date | None) -> Period:
    try:
        return Period(date_from, date_to)
    except ValueError as e:
        raise InvalidReportRequest("period", str(e)) from e


def _asset_type(asset_type: AssetType | str) -> AssetType:
    try:
        return AssetType(asset_type)
    except ValueError as e:
        raise InvalidReportRequest("asset_type", f"is unknown: {asset_type!r}") from e


class StatementService:
    """
    Generate documents for a dealer and deliver them.

    Contract
    --------
    * ``build_*`` methods return a paginated Document and raise on error.
    * ``generate_and_deliver``, ``send_reminder`` and the ``deliver_*``
      methods never raise ReportingCoreError; they return a ReportOutcome.

    Non-goals
    ---------
    * Does NOT mutate the ledger.
    * Does NOT impose timeouts; wrap calls with ``asyncio.wait_for`` and
      treat expiry as a failure.
    """

    def __init__(
        self,
        store: LedgerStore,
        render_engine: RenderEngine,
        dispatcher: DeliveryDispatcher,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
        notify: Notifier | None = None,
    ):
        self._store = store
        self._render_engine = render_engine
        self._dispatcher = dispatcher
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig()
        self._notify = notify
        self._aggregator = BalanceAggregator()
        self._aging = AgingCalculator()

    # =========================================================================
    # Documents
    # =========================================================================

    async def _ledger_document(
        self,
        dealer_id: str,
        date_from: date | None,
        date_to: date | None,
    ) -> tuple[Document, DealerProfile]:
        period = _period(date_from, date_to)
        dealer = await self._store.fetch_dealer(dealer_id)
        entries = await self._store.fetch_entries(dealer_id, None, date_to)

        if date_from is not None:
            opening = self._aggregator.windowed_opening_balance(entries, date_from)
            _, window = self._aggregator.split_at(entries, date_from)
        else:
            opening = ZERO
            window = entries

        rows = build_statement_rows(window, opening, self._config.default_narration)
        totals = statement_totals(window, opening)
        document = paginate(
            rows,
            self._config.ledger_rows_per_page,
            totals,
            subject=Subject(
                descriptor=f"{dealer.shop_name} ({dealer.dealer_code})",
                dealer_id=dealer.dealer_id,
                reference=dealer.dealer_code,
            ),
            period=period,
            title=LEDGER_TITLE,
        )
        logger.info(
            "statement_paginated",
            extra={
                "entry_count": len(window),
                "page_count": document.page_count,
                "closing_balance": str(totals.closing_balance),
            },
        )
        return document, dealer

    async def build_ledger_document(
        self,
        dealer_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Document:
        """Paginated ledger statement, opening balance first."""
        document, _ = await self._ledger_document(dealer_id, date_from, date_to)
        return document

    async def _invoice_document(self, invoice: Invoice) -> tuple[Document, DealerProfile]:
        dealer = await self._store.fetch_dealer(invoice.dealer_id)
        document = paginate(
            build_invoice_rows(invoice),
            self._config.invoice_rows_per_page,
            invoice_totals(invoice),
            subject=Subject(
                descriptor=(
                    f"{dealer.shop_name} | ORD NO: #{invoice.order_no} | "
                    f"DATE: {format_date(invoice.issued_on)}"
                ),
                dealer_id=dealer.dealer_id,
                reference=invoice.order_no,
            ),
            title=INVOICE_TITLE,
        )
        return document, dealer

    async def build_invoice_document(self, invoice: Invoice) -> Document:
        document, _ = await self._invoice_document(invoice)
        return document

    def build_stock_document(
        self,
        products: Iterable[Product],
        asset_type: AssetType | str,
    ) -> Document:
        """Paginated stock registry; reads nothing from the ledger store."""
        asset_type = _asset_type(asset_type)
        products = list(products)
        document = paginate(
            build_stock_rows(products, asset_type),
            self._config.stock_rows_per_page,
            stock_totals(products),
            subject=Subject(descriptor=STOCK_DESCRIPTOR, reference=asset_type.value),
            title=f"{asset_type.value} {STOCK_TITLE}",
        )
        logger.info(
            "stock_registry_paginated",
            extra={
                "asset_type": asset_type.value,
                "product_count": len(products),
                "page_count": document.page_count,
            },
        )
        return document

    async def _certificate_document(self, dealer_id: str) -> tuple[Document, DealerProfile]:
        dealer = await self._store.fetch_dealer(dealer_id)
        fields = build_certificate_fields(dealer)
        document = paginate(
            fields,
            len(fields),
            CertificateSummary(issued_on=self._clock.today()),
            subject=Subject(
                descriptor=dealer.shop_name,
                dealer_id=dealer.dealer_id,
                reference=dealer.dealer_code,
            ),
            title=CERTIFICATE_TITLE,
        )
        return document, dealer

    async def build_certificate_document(self, dealer_id: str) -> Document:
        """Single-page dealership certificate issued today."""
        document, _ = await self._certificate_document(dealer_id)
        return document

    # =========================================================================
    # Generate and deliver
    # =========================================================================

    async def generate_and_deliver(
        self,
        dealer_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
        recipient_phone: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> ReportOutcome:
        """
        Build, render and deliver a ledger statement.

        ``recipient_phone`` defaults to the dealer's mobile number; pass an
        empty string to skip the messaging deep link.
        """
        with LogContext.bind(correlation_id=uuid4().hex, dealer_id=dealer_id):
            try:
                document, dealer = await self._ledger_document(dealer_id, date_from, date_to)
                filename = ledger_filename(dealer.dealer_code)
                artifact = await self._render_engine.render(document, PDF_MIME, filename)
                hint = RecipientHint(
                    phone_number=self._phone_for(dealer, recipient_phone),
                    caption=ledger_caption(dealer.shop_name, document.period),
                )
                delivery = await self._dispatcher.deliver(artifact, hint, cancel)
            except ReportingCoreError as e:
                return self._failed(e)
            return self._delivered(filename, delivery)

    async def deliver_invoice(
        self,
        invoice: Invoice,
        recipient_phone: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> ReportOutcome:
        with LogContext.bind(correlation_id=uuid4().hex, dealer_id=invoice.dealer_id):
            try:
                document, dealer = await self._invoice_document(invoice)
                filename = invoice_filename(invoice.order_no, dealer.shop_name)
                artifact = await self._render_engine.render(document, PDF_MIME, filename)
                hint = RecipientHint(
                    phone_number=self._phone_for(dealer, recipient_phone),
                    caption=invoice_caption(
                        invoice.order_no, dealer.shop_name, document.summary.final_total,
                    ),
                )
                delivery = await self._dispatcher.deliver(artifact, hint, cancel)
            except ReportingCoreError as e:
                return self._failed(e)
            return self._delivered(filename, delivery)

    async def deliver_stock_report(
        self,
        products: Iterable[Product],
        asset_type: AssetType | str,
        recipient_phone: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> ReportOutcome:
        with LogContext.bind(correlation_id=uuid4().hex):
            try:
                document = self.build_stock_document(products, asset_type)
                filename = stock_filename(document.subject.reference)
                artifact = await self._render_engine.render(document, PDF_MIME, filename)
                hint = RecipientHint(
                    phone_number=recipient_phone or None,
                    caption=stock_caption(
                        document.subject.reference, document.summary.product_count,
                    ),
                )
                delivery = await self._dispatcher.deliver(artifact, hint, cancel)
            except ReportingCoreError as e:
                return self._failed(e)
            return self._delivered(filename, delivery)

    async def deliver_certificate(
        self,
        dealer_id: str,
        recipient_phone: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> ReportOutcome:
        with LogContext.bind(correlation_id=uuid4().hex, dealer_id=dealer_id):
            try:
                document, dealer = await self._certificate_document(dealer_id)
                filename = certificate_filename(dealer.shop_name)
                artifact = await self._render_engine.render(document, PDF_MIME, filename)
                hint = RecipientHint(
                    phone_number=self._phone_for(dealer, recipient_phone),
                    caption=certificate_caption(dealer.shop_name),
                )
                delivery = await self._dispatcher.deliver(artifact, hint, cancel)
            except ReportingCoreError as e:
                return self._failed(e)
            return self._delivered(filename, delivery)

    async def send_reminder(
        self,
        dealer_id: str,
        mode: ReminderMode | str = ReminderMode.STANDARD,
        cancel: CancellationToken | None = None,
    ) -> ReportOutcome:
        """
        Send a payment reminder as text.

        Fails with AGING_UNDEFINED when the dealer has nothing outstanding
        and with INVALID_REPORT_REQUEST for an unknown mode.
        """
        with LogContext.bind(correlation_id=uuid4().hex, dealer_id=dealer_id):
            try:
                mode = parse_reminder_mode(mode)
                dealer = await self._store.fetch_dealer(dealer_id)
                entries = await self._store.fetch_entries(dealer_id)
                balance = self._aggregator.aggregate(entries, dealer_id=dealer_id)
                aging = self._aging.classify(
                    balance, self._clock.today(), self._config.alert_threshold_days,
                )
                caption = reminder_caption(CollectionItem(dealer, balance, aging), mode)
                filename = safe_filename(f"REMINDER-{dealer.dealer_code}.txt")
                artifact = DeliveryArtifact(
                    mime_type=TEXT_MIME,
                    suggested_filename=filename,
                    data=caption.encode("utf-8"),
                )
                delivery = await self._dispatcher.deliver(
                    artifact,
                    RecipientHint(phone_number=dealer.mobile or None, caption=caption),
                    cancel,
                )
            except ReportingCoreError as e:
                return self._failed(e)
            return self._delivered(filename, delivery)

    # =========================================================================
    # Notification
    # =========================================================================

    @staticmethod
    def _phone_for(dealer: DealerProfile, recipient_phone: str | None) -> str | None:
        phone = dealer.mobile if recipient_phone is None else recipient_phone
        return phone or None

    def _emit(self, outcome: ReportOutcome) -> ReportOutcome:
        if self._notify is not None:
            self._notify(outcome)
        return outcome

    def _delivered(self, filename: str, delivery: DeliveryOutcome) -> ReportOutcome:
        if delivery.method is DeliveryMethod.CANCELLED:
            message = f"Sharing {filename} was cancelled."
        elif delivery.method is DeliveryMethod.DEEP_LINK_TEXT_ONLY:
            message = (
                f"{filename} was saved to {delivery.location}. Only the message "
                f"text was sent; attach the file manually."
            )
        elif delivery.method is DeliveryMethod.LOCAL:
            message = f"{filename} was saved to {delivery.location}."
        else:
            message = f"{filename} was shared."

        logger.info(
            "report_delivered",
            extra={
                "suggested_filename": filename,
                "method": delivery.method.value,
                "is_degraded": delivery.is_degraded,
            },
        )
        return self._emit(ReportOutcome(
            success=delivery.method is not DeliveryMethod.CANCELLED,
            message=message,
            document_name=filename,
            delivery=delivery,
        ))

    def _failed(self, error: ReportingCoreError) -> ReportOutcome:
        logger.error(
            "report_failed",
            extra={"error_code": error.code},
            exc_info=error,
        )
        return self._emit(ReportOutcome(
            success=False,
            message=str(error),
            document_name=getattr(error, "suggested_filename", None)
            or getattr(error, "document_name", None),
            error_code=error.code,
        ))
