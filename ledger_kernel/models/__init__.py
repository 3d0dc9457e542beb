"""ORM models for the dealer ledger store."""

from ledger_kernel.models.dealer import DealerRecord
from ledger_kernel.models.ledger_entry import LedgerEntryRecord

__all__ = [
    "DealerRecord",
    "LedgerEntryRecord",
]
