"""
Collection hub: which dealers owe money and how urgently.

Responsibility
--------------
Combines the ledger store, the BalanceAggregator and the AgingCalculator
into the collection queue and dashboard figures, and builds the payment
reminder text sent to a dealer.

Invariants enforced
-------------------
* Only dealers with a positive balance are classified; aging is never
  requested for a settled account.
* "Today" comes from the injected Clock.
* Every call reads the store afresh; nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ledger_config.schema import ReportingConfig
from ledger_engines.aging import AgingCalculator
from ledger_engines.balance import BalanceAggregator
from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.ledger import AgingClassification, DealerBalance, DealerProfile
from ledger_kernel.domain.values import ZERO, format_inr
from ledger_kernel.exceptions import InvalidReportRequest
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.ledger_store import LedgerStore

logger = get_logger("reporting.collection")

TOP_DUES_LIMIT = 5


class ReminderMode(str, Enum):
    STANDARD = "STANDARD"
    URGENT = "URGENT"


@dataclass(frozen=True)
class CollectionItem:
    """A dealer with an outstanding balance and its aging."""

    dealer: DealerProfile
    balance: DealerBalance
    aging: AgingClassification

    @property
    def amount(self) -> Decimal:
        return self.balance.balance


@dataclass(frozen=True)
class DashboardSummary:
    total_outstanding: Decimal
    dealers_with_dues: int
    alerts: tuple[CollectionItem, ...]
    top_dues: tuple[CollectionItem, ...]


class CollectionService:
    """
    Collection queue and dashboard figures over a LedgerStore.

    Contract:
        Async; suspends only at the store reads.
    """

    def __init__(
        self,
        store: LedgerStore,
        clock: Clock,
        config: ReportingConfig | None = None,
        aggregator: BalanceAggregator | None = None,
        aging: AgingCalculator | None = None,
    ):
        self._store = store
        self._clock = clock
        self._config = config or ReportingConfig()
        self._aggregator = aggregator or BalanceAggregator()
        self._aging = aging or AgingCalculator()

    async def collection_queue(self) -> list[CollectionItem]:
        """Dealers with dues, most urgent first (days remaining, then shop name)."""
        today = self._clock.today()
        dealers = await self._store.fetch_dealers()
        entries_by_dealer = await self._store.fetch_entries_by_dealer()

        items: list[CollectionItem] = []
        for dealer in dealers:
            balance = self._aggregator.aggregate(
                entries_by_dealer.get(dealer.dealer_id, []),
                dealer_id=dealer.dealer_id,
            )
            if not balance.has_outstanding:
                continue
            aging = self._aging.classify(
                balance, today, self._config.alert_threshold_days,
            )
            items.append(CollectionItem(dealer=dealer, balance=balance, aging=aging))

        items.sort(key=lambda i: (i.aging.days_remaining, i.dealer.shop_name))
        logger.info(
            "collection_queue_built",
            extra={
                "today": today.isoformat(),
                "dealer_count": len(dealers),
                "with_dues": len(items),
                "overdue": sum(1 for i in items if i.aging.is_overdue),
            },
        )
        return items

    async def dashboard_summary(self) -> DashboardSummary:
        queue = await self.collection_queue()
        alerts = tuple(
            item for item in queue
            if self._aging.needs_alert(item.aging, self._config.dashboard_alert_days)
        )
        top_dues = tuple(
            sorted(queue, key=lambda i: (-i.amount, i.dealer.shop_name))[:TOP_DUES_LIMIT]
        )
        return DashboardSummary(
            total_outstanding=sum((i.amount for i in queue), ZERO),
            dealers_with_dues=len(queue),
            alerts=alerts,
            top_dues=top_dues,
        )


def parse_reminder_mode(mode: ReminderMode | str) -> ReminderMode:
    """
    Raises:
        InvalidReportRequest: If the mode is not a ReminderMode value.
    """
    try:
        return ReminderMode(mode)
    except ValueError as e:
        raise InvalidReportRequest("mode", f"is unknown: {mode!r}") from e


def reminder_caption(item: CollectionItem, mode: ReminderMode | str = ReminderMode.STANDARD) -> str:
    """Payment reminder text for a messaging app (``*`` marks bold)."""
    mode = parse_reminder_mode(mode)
    shop = item.dealer.shop_name
    amount = format_inr(item.amount)
    days = item.aging.days_remaining
    if mode is ReminderMode.URGENT:
        return (
            f"*URGENT: PAYMENT OVERDUE*\n\n"
            f"Hello *{shop}*,\n\n"
            f"Your account has reached a *CRITICAL* state with an outstanding "
            f"balance of *{amount}*.\n\n"
            f"*Overdue Amount:* {amount}\n"
            f"*Status:* *URGENT ACTION REQUIRED*\n"
            f"*Deadline:* *{days} Days*"
        )
    return (
        f"*PAYMENT REMINDER*\n\n"
        f"Hello *{shop}*,\n\n"
        f"This is a friendly reminder that your balance of *{amount}* is outstanding.\n\n"
        f"*Pending Amount:* *{amount}*\n"
        f"*Remaining Time:* *{days} Days*"
    )
