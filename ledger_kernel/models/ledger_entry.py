"""
Module: ledger_kernel.models.ledger_entry
Responsibility: ORM persistence for dealer ledger movements.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - amount is Numeric(14, 2) and must be positive (ck_ledger_amount_positive).
    - kind is DEBIT or CREDIT (ck_ledger_kind).
    Rows written outside these constraints (legacy imports) are still
    rejected by LedgerEntry.from_record when read.

Failure modes:
    - IntegrityError on constraint violations at write time.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, UUIDString


class LedgerEntryRecord(Base):
    """One DEBIT or CREDIT row in the `ledger` table."""

    __tablename__ = "ledger"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_ledger_amount_positive"),
        CheckConstraint("kind IN ('DEBIT', 'CREDIT')", name="ck_ledger_kind"),
        Index("idx_ledger_dealer_date", "dealer_id", "occurred_on"),
    )

    dealer_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("dealers.id"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    kind: Mapped[str] = mapped_column(String(10), nullable=False)

    narration: Mapped[str] = mapped_column(Text, nullable=False, default="")

    occurred_on: Mapped[date] = mapped_column(Date, nullable=False)

    recorded_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )

    def to_record(self) -> dict:
        """Plain mapping consumed by LedgerEntry.from_record."""
        return {
            "id": self.id,
            "dealer_id": self.dealer_id,
            "amount": self.amount,
            "kind": self.kind,
            "narration": self.narration,
            "occurred_on": self.occurred_on,
            "recorded_at": self.recorded_at,
        }

    def __repr__(self) -> str:
        return f"<LedgerEntryRecord {self.kind} {self.amount} on {self.occurred_on}>"
