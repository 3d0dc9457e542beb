"""Read-only query selectors over the ledger store."""

from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector

__all__ = [
    "BaseSelector",
    "LedgerSelector",
]
