"""
Module: ledger_engines.pagination
Responsibility:
    Split an ordered sequence of printable rows into fixed-capacity pages.
    Only the last page carries the summary totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Knows nothing about what
    a row contains beyond the optional ``is_opening`` flag, so ledger
    statements and invoices share it.

Invariants enforced:
    - An opening row (``row.is_opening``) always sits at row 0 of page 0.
    - Exactly one page is terminal, and it is the last page.
    - ``summary`` is set iff ``is_terminal``.
    - Zero rows still produce one (terminal) page.
    - Stateless and deterministic: identical inputs give equal Documents.

Failure modes:
    - InvalidCapacity when capacity is not a positive int.
    - ValueError for more than one opening row or a missing summary.

Usage:
    from ledger_engines.pagination import paginate

    document = paginate(rows, capacity=17, totals=totals, subject=subject)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Generic, TypeVar

from ledger_kernel.exceptions import InvalidCapacity
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.pagination")

RowT = TypeVar("RowT")
SummaryT = TypeVar("SummaryT")


@dataclass(frozen=True)
class Subject:
    """Who or what a document is about (dealer, order, stock scope)."""

    descriptor: str
    dealer_id: str | None = None
    reference: str | None = None


@dataclass(frozen=True)
class Period:
    """Reporting window; either bound may be open."""

    date_from: date | None = None
    date_to: date | None = None

    def __post_init__(self) -> None:
        if (
            self.date_from is not None
            and self.date_to is not None
            and self.date_to < self.date_from
        ):
            raise ValueError("date_to cannot be earlier than date_from")


@dataclass(frozen=True)
class Page(Generic[RowT, SummaryT]):
    """One printable page of a document."""

    page_index: int
    page_count: int
    rows: tuple[RowT, ...]
    is_terminal: bool
    summary: SummaryT | None = None

    @property
    def label(self) -> str:
        return f"PAGE {self.page_index + 1} OF {self.page_count}"

    @property
    def continues(self) -> bool:
        """True if another page follows ("Continued on next page...")."""
        return not self.is_terminal


@dataclass(frozen=True)
class Document(Generic[RowT, SummaryT]):
    """
    Logical, paginated document handed to the render engine.

    Header/footer context (title, subject, period) lives here once; every
    page is rendered with it.
    """

    pages: tuple[Page[RowT, SummaryT], ...]
    subject: Subject
    period: Period | None = None
    title: str = ""

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def terminal_page(self) -> Page[RowT, SummaryT]:
        return self.pages[-1]

    @property
    def summary(self) -> SummaryT | None:
        return self.terminal_page.summary

    @property
    def rows(self) -> tuple[RowT, ...]:
        """All rows in print order."""
        return tuple(row for page in self.pages for row in page.rows)


def _is_opening(row: Any) -> bool:
    return bool(getattr(row, "is_opening", False))


def _validate_capacity(capacity: Any) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise InvalidCapacity(capacity)
    return capacity


@traced_engine("pagination", "1.0", fingerprint_fields=("capacity", "rows"))
def paginate(
    rows: Sequence[RowT],
    capacity: int,
    totals: SummaryT,
    *,
    subject: Subject | None = None,
    period: Period | None = None,
    title: str = "",
) -> Document[RowT, SummaryT]:
    """
    Paginate rows into a Document.

    Args:
        rows: Printable rows in order.  An opening row, if any, is moved
            to the front.
        capacity: Maximum rows per page, dictated by the physical page size.
        totals: Summary printed on the terminal page only.
        subject: Document subject (header context).
        period: Optional reporting window (header context).
        title: Document title (header context).

    Raises:
        InvalidCapacity: If capacity is not a positive int.
        ValueError: If more than one opening row is supplied or totals is None.
    """
    capacity = _validate_capacity(capacity)
    if totals is None:
        raise ValueError("totals are required for the terminal page")

    openings = [r for r in rows if _is_opening(r)]
    if len(openings) > 1:
        raise ValueError("a document can have at most one opening row")
    ordered = openings + [r for r in rows if not _is_opening(r)]

    chunks = [
        tuple(ordered[start:start + capacity])
        for start in range(0, len(ordered), capacity)
    ] or [()]
    page_count = len(chunks)
    last = page_count - 1

    pages = tuple(
        Page(
            page_index=index,
            page_count=page_count,
            rows=chunk,
            is_terminal=index == last,
            summary=totals if index == last else None,
        )
        for index, chunk in enumerate(chunks)
    )

    logger.info(
        "document_paginated",
        extra={
            "subject": subject.descriptor if subject else None,
            "row_count": len(ordered),
            "capacity": capacity,
            "page_count": page_count,
            "has_opening_row": bool(openings),
        },
    )
    return Document(
        pages=pages,
        subject=subject or Subject(descriptor=""),
        period=period,
        title=title,
    )
