"""
Pytest fixtures for the reporting core test suite.

Provides:
- Structured logging configured for the whole session, plus a capture fixture
- Deterministic clock
- Ledger entry / dealer factories
- SQLite in-memory SQLAlchemy sessions for the selector and SQL store tests
- Recording fakes for the delivery ports
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from ledger_config import reset_active_config
from ledger_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.ledger import DealerProfile, EntryKind, LedgerEntry
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.services.ledger_store import InMemoryLedgerStore

# Day 1 of the examples used throughout the tests.
DAY_ONE = date(2024, 1, 1)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture(autouse=True)
def _reset_config():
    reset_active_config()
    yield
    reset_active_config()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "delivery_succeeded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Clock
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock fixed at noon UTC on DAY_ONE."""
    return DeterministicClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


# =============================================================================
# Domain factories
# =============================================================================


def day(n: int) -> date:
    """Calendar date of example day ``n`` (day 1 == DAY_ONE)."""
    return date.fromordinal(DAY_ONE.toordinal() + n - 1)


def make_entry(
    kind: EntryKind | str,
    amount: str | int | Decimal,
    occurred_on: date,
    *,
    dealer_id: str = "dealer-1",
    narration: str = "",
    recorded_at: datetime | None = None,
    entry_id: str | None = None,
) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id or uuid4().hex,
        dealer_id=dealer_id,
        amount=Decimal(str(amount)),
        kind=EntryKind(kind),
        narration=narration,
        occurred_on=occurred_on,
        recorded_at=recorded_at
        or datetime.combine(occurred_on, datetime.min.time(), tzinfo=timezone.utc),
    )


def make_dealer(
    dealer_id: str = "dealer-1",
    *,
    dealer_code: str = "D001",
    shop_name: str = "Sharma Hardware",
    mobile: str = "9876543210",
    is_active: bool = True,
) -> DealerProfile:
    return DealerProfile(
        dealer_id=dealer_id,
        dealer_code=dealer_code,
        shop_name=shop_name,
        mobile=mobile,
        owner_name="R. Sharma",
        is_active=is_active,
        city="Jaipur",
        address="12 Johari Bazaar",
        pincode="302003",
    )


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def example_entries() -> list[LedgerEntry]:
    """DEBIT 500 on day 1, CREDIT 500 on day 5, DEBIT 300 on day 10."""
    return [
        make_entry("DEBIT", "500", day(1)),
        make_entry("CREDIT", "500", day(5)),
        make_entry("DEBIT", "300", day(10)),
    ]


@pytest.fixture
def memory_store(example_entries) -> InMemoryLedgerStore:
    return InMemoryLedgerStore(dealers=[make_dealer()], entries=example_entries)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_engine():
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    session = get_session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def session_factory(db_engine):
    return get_session_factory()


# =============================================================================
# Delivery port fakes
# =============================================================================


class RecordingBridge:
    """Native host bridge that records every share_file call."""

    def __init__(self, max_payload_bytes: int | None = None, error: Exception | None = None):
        self.max_payload_bytes = max_payload_bytes
        self.error = error
        self.calls: list[dict] = []

    def share_file(self, payload_base64, filename, mime_type, caption, phone_number):
        self.calls.append({
            "payload_base64": payload_base64,
            "filename": filename,
            "mime_type": mime_type,
            "caption": caption,
            "phone_number": phone_number,
        })
        if self.error is not None:
            raise self.error


class FakeShareSurface:
    def __init__(self, accepts: bool = True, error: Exception | None = None):
        self.accepts = accepts
        self.error = error
        self.shared: list[tuple[list, str]] = []

    def can_share(self, mime_type: str) -> bool:
        return self.accepts

    async def share(self, files, caption):
        if self.error is not None:
            raise self.error
        self.shared.append((files, caption))


class RecordingLauncher:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.urls: list[str] = []

    async def open_url(self, url: str) -> None:
        if self.error is not None:
            raise self.error
        self.urls.append(url)


class RecordingPersistence:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.saved: list = []
        self.copied: list[str] = []

    async def save(self, artifact) -> str:
        if self.error is not None:
            raise self.error
        self.saved.append(artifact)
        return f"downloads/{artifact.suggested_filename}"

    async def copy_text(self, text: str) -> str:
        if self.error is not None:
            raise self.error
        self.copied.append(text)
        return "clipboard"
