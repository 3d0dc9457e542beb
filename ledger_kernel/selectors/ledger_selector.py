"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only ledger and dealer queries.  Balances are never
    stored: every balance, opening balance and aging figure is derived from
    the rows returned here at request time.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/base.py.

Invariants enforced:
    - Rows come back ordered by (occurred_on, recorded_at, id), the same
      ordering the Balance Aggregator applies.  The aggregator re-sorts
      anyway; the ORDER BY keeps printed history stable for callers that
      list rows directly.
    - Every row passes through LedgerEntry.from_record, so malformed legacy
      rows raise AggregationInputError instead of leaking downstream.

Failure modes:
    - LedgerStoreError when a dealer id is not a UUID.
    - AggregationInputError for malformed rows.
"""

from collections import defaultdict
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.ledger import DealerProfile, LedgerEntry
from ledger_kernel.exceptions import LedgerStoreError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.dealer import DealerRecord
from ledger_kernel.models.ledger_entry import LedgerEntryRecord
from ledger_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.ledger")


def _as_uuid(dealer_id: str | UUID) -> UUID:
    if isinstance(dealer_id, UUID):
        return dealer_id
    try:
        return UUID(str(dealer_id))
    except ValueError as e:
        raise LedgerStoreError(dealer_id, "dealer id is not a UUID") from e


def _to_profile(row: DealerRecord) -> DealerProfile:
    return DealerProfile(
        dealer_id=str(row.id),
        dealer_code=row.dealer_code,
        shop_name=row.shop_name,
        mobile=row.mobile or "",
        owner_name=row.owner_name or "",
        is_active=row.is_active,
        city=row.city or "",
        address=row.address or "",
        pincode=row.pincode or "",
    )


class LedgerSelector(BaseSelector[LedgerEntryRecord]):
    """
    Read-only access to dealers and their ledger rows.

    All methods return domain DTOs (LedgerEntry, DealerProfile).
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def entries_for_dealer(
        self,
        dealer_id: str | UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[LedgerEntry]:
        """
        Ledger rows of one dealer, optionally bounded by occurred_on.

        Both bounds are inclusive.
        """
        stmt = select(LedgerEntryRecord).where(
            LedgerEntryRecord.dealer_id == _as_uuid(dealer_id)
        )
        if date_from is not None:
            stmt = stmt.where(LedgerEntryRecord.occurred_on >= date_from)
        if date_to is not None:
            stmt = stmt.where(LedgerEntryRecord.occurred_on <= date_to)
        stmt = stmt.order_by(
            LedgerEntryRecord.occurred_on,
            LedgerEntryRecord.recorded_at,
            LedgerEntryRecord.id,
        )

        rows = self.session.scalars(stmt).all()
        logger.debug(
            "ledger_rows_selected",
            extra={
                "dealer_id": str(dealer_id),
                "date_from": date_from.isoformat() if date_from else None,
                "date_to": date_to.isoformat() if date_to else None,
                "row_count": len(rows),
            },
        )
        return [LedgerEntry.from_record(row.to_record()) for row in rows]

    def entries_by_dealer(self, date_to: date | None = None) -> dict[str, list[LedgerEntry]]:
        """All ledger rows grouped by dealer id (collection hub input)."""
        stmt = select(LedgerEntryRecord)
        if date_to is not None:
            stmt = stmt.where(LedgerEntryRecord.occurred_on <= date_to)
        stmt = stmt.order_by(
            LedgerEntryRecord.dealer_id,
            LedgerEntryRecord.occurred_on,
            LedgerEntryRecord.recorded_at,
            LedgerEntryRecord.id,
        )

        grouped: dict[str, list[LedgerEntry]] = defaultdict(list)
        for row in self.session.scalars(stmt):
            entry = LedgerEntry.from_record(row.to_record())
            grouped[entry.dealer_id].append(entry)
        return dict(grouped)

    def dealer(self, dealer_id: str | UUID) -> DealerProfile | None:
        """Dealer profile, or None if unknown."""
        row = self.session.get(DealerRecord, _as_uuid(dealer_id))
        if row is None:
            return None
        return _to_profile(row)

    def dealers(self, active_only: bool = True) -> list[DealerProfile]:
        """Dealer profiles ordered by shop name."""
        stmt = select(DealerRecord)
        if active_only:
            stmt = stmt.where(DealerRecord.is_active.is_(True))
        stmt = stmt.order_by(DealerRecord.shop_name, DealerRecord.dealer_code)
        return [_to_profile(row) for row in self.session.scalars(stmt)]
