"""
Module: ledger_kernel.models.dealer
Responsibility: ORM persistence for dealers (the shops whose accounts the
    ledger tracks).  Only the columns the reporting core reads are mapped;
    the CRUD screens own the rest of the dealer lifecycle.
Architecture position: Kernel > Models.  May import from db/base.py only.

Failure modes:
    - IntegrityError on duplicate dealer_code (uq_dealer_code constraint).
"""

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


class DealerRecord(Base):
    """
    A dealer account.

    Guarantees:
        - dealer_code is unique and is what statement file names carry.
        - mobile is stored as entered; the delivery layer normalizes it.
    """

    __tablename__ = "dealers"

    __table_args__ = (
        UniqueConstraint("dealer_code", name="uq_dealer_code"),
        Index("idx_dealer_active", "is_active"),
    )

    dealer_code: Mapped[str] = mapped_column(String(50), nullable=False)

    shop_name: Mapped[str] = mapped_column(String(255), nullable=False)

    owner_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    mobile: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    city: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    address: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    pincode: Mapped[str] = mapped_column(String(12), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<DealerRecord {self.dealer_code}: {self.shop_name}>"
