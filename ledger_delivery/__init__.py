"""
ledger_delivery -- rendered artifacts and the channels that deliver them.

Responsibility:
    DeliveryArtifact and deterministic file naming, the channel ports a
    host runtime implements, and the DeliveryDispatcher that picks the best
    available channel with fallback down to a local save.

Architecture position:
    Delivery -- imports ledger_kernel, ledger_engines and ledger_config.
    MUST NOT import ledger_reporting.
"""

from ledger_delivery.artifacts import (
    PDF_MIME,
    PNG_MIME,
    TEXT_MIME,
    DeliveryArtifact,
    invoice_caption,
    invoice_filename,
    ledger_caption,
    ledger_filename,
    safe_filename,
)
from ledger_delivery.channels import (
    FilesystemPersistence,
    LocalPersistence,
    MessagingLauncher,
    NativeBridge,
    PlatformShareSurface,
)
from ledger_delivery.dispatcher import DeliveryDispatcher
from ledger_delivery.messaging import build_deep_link, normalize_phone
from ledger_delivery.models import (
    CancellationToken,
    DeliveryMethod,
    DeliveryOutcome,
    RecipientHint,
)

__all__ = [
    "PDF_MIME",
    "PNG_MIME",
    "TEXT_MIME",
    "DeliveryArtifact",
    "invoice_caption",
    "invoice_filename",
    "ledger_caption",
    "ledger_filename",
    "safe_filename",
    "FilesystemPersistence",
    "LocalPersistence",
    "MessagingLauncher",
    "NativeBridge",
    "PlatformShareSurface",
    "DeliveryDispatcher",
    "build_deep_link",
    "normalize_phone",
    "CancellationToken",
    "DeliveryMethod",
    "DeliveryOutcome",
    "RecipientHint",
]
