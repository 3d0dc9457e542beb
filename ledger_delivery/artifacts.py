"""
Module: ledger_delivery.artifacts
Responsibility:
    The rendered artifact handed from the render engine to the delivery
    dispatcher, deterministic file names derived from document identity,
    and the caption text that travels with a shared document.

Architecture position:
    Delivery -- data definitions and pure helpers, zero I/O.

Invariants enforced:
    - A DeliveryArtifact carries bytes or a handle (a path the host can
      read), never neither.  Aggregation and pagination never see it.
    - File names are a pure function of subject identifiers, so regenerating
      the same document yields the same name.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from ledger_engines.pagination import Period
from ledger_kernel.domain.values import format_date, format_inr

PDF_MIME = "application/pdf"
PNG_MIME = "image/png"
TEXT_MIME = "text/plain"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


@dataclass(frozen=True)
class DeliveryArtifact:
    """Rendered bytes (or a host-readable handle) plus how to name them."""

    mime_type: str
    suggested_filename: str
    data: bytes | None = None
    handle: str | None = None

    def __post_init__(self):
        if self.data is None and self.handle is None:
            raise ValueError("artifact needs data or a handle")
        if not self.mime_type:
            raise ValueError("mime_type is required")
        if not self.suggested_filename:
            raise ValueError("suggested_filename is required")

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")

    def read_bytes(self) -> bytes:
        """Artifact content, reading the handle if no bytes are held."""
        if self.data is not None:
            return self.data
        return Path(self.handle).read_bytes()

    @property
    def size(self) -> int:
        return len(self.read_bytes())

    def to_base64(self) -> str:
        """Plain base64 (no ``data:`` URI prefix), as native bridges expect."""
        return base64.b64encode(self.read_bytes()).decode("ascii")


def safe_filename(name: str) -> str:
    """Replace characters that are unsafe in a file name with ``_``."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name.strip())
    return cleaned or "document"


def ledger_filename(dealer_code: str) -> str:
    """``LEDGER-<dealer-code>.pdf``"""
    return safe_filename(f"LEDGER-{dealer_code}.pdf")


def invoice_filename(order_no: str | int, dealer_name: str) -> str:
    """``ORD-<order-no>-<dealer-name>.pdf``"""
    return safe_filename(f"ORD-{order_no}-{dealer_name}.pdf")


def stock_filename(asset_type: str) -> str:
    """``ASSETS-<asset-type>.pdf``"""
    return safe_filename(f"ASSETS-{asset_type}.pdf")


def certificate_filename(shop_name: str) -> str:
    """``CERT-<shop-name>.pdf``"""
    return safe_filename(f"CERT-{shop_name}.pdf")


def ledger_caption(shop_name: str, period: Period | None = None) -> str:
    caption = f"*ACCOUNT STATEMENT*\n\nHello *{shop_name}*,\n\nPlease find your ledger statement attached."
    if period is not None and (period.date_from or period.date_to):
        start = format_date(period.date_from) if period.date_from else "START"
        end = format_date(period.date_to) if period.date_to else "TODAY"
        caption += f"\nPeriod: {start} to {end}"
    return caption


def invoice_caption(order_no: str | int, shop_name: str, total: Decimal) -> str:
    return (
        f"*ORDER INVOICE*\n\nHello *{shop_name}*,\n\n"
        f"Your invoice for order *#ORD-{order_no}* is attached.\n"
        f"Total Amount: {format_inr(total)}"
    )


def stock_caption(asset_type: str, product_count: int) -> str:
    return f"*{asset_type.upper()} STOCK REGISTRY*\n\nOfficial inventory log of {product_count} products attached."


def certificate_caption(shop_name: str) -> str:
    return f"*CERTIFICATE OF DEALERSHIP*\n\nHello *{shop_name}*,\n\nYour dealership certificate is attached."
