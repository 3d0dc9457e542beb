"""
Typed Exception Hierarchy for the Reporting Core.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A "generate and deliver" request must end in exactly one success or one
failure notification.  The UI layer decides what to show by catching the
exception TYPE and reading its CODE, never by parsing message text.

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a class-level CODE attribute (machine-readable)
  3. Carries structured DATA as attributes (dealer_id, capacity, ...)

Example:
    try:
        document = paginate(rows, capacity, totals)
    except InvalidCapacity as e:
        log.error("bad page size", extra={"capacity": e.capacity})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ReportingCoreError (base)
    |
    +-- AggregationError
    |   +-- AggregationInputError
    |   +-- AgingUndefinedError
    |
    +-- PaginationError
    |   +-- InvalidCapacity
    |
    +-- RenderError
    |   +-- RenderFailed
    |
    +-- DeliveryError
    |   +-- ChannelUnavailable
    |   +-- ShareDismissed
    |   +-- DeliveryFailed
    |
    +-- InvalidReportRequest
    |
    +-- LedgerStoreError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                     | When Raised
-------------|--------------------------|------------------------------------------
Aggregation  | AGGREGATION_INPUT_ERROR  | Malformed ledger entry (amount, kind, date)
             | AGING_UNDEFINED          | Aging requested for a non-positive balance
-------------|--------------------------|------------------------------------------
Pagination   | INVALID_CAPACITY         | Page capacity <= 0 (caller bug)
-------------|--------------------------|------------------------------------------
Render       | RENDER_FAILED            | Render engine could not produce bytes
-------------|--------------------------|------------------------------------------
Delivery     | CHANNEL_UNAVAILABLE      | One channel's precondition not met (internal)
             | SHARE_DISMISSED          | User closed the platform share surface
             | DELIVERY_FAILED          | Every channel, local save included, failed
-------------|--------------------------|------------------------------------------
Request      | INVALID_REPORT_REQUEST   | Inverted date window or unknown reminder mode
-------------|--------------------------|------------------------------------------
Store        | LEDGER_STORE_ERROR       | Ledger read failed or dealer unknown
-------------|--------------------------|------------------------------------------
Config       | CONFIGURATION_ERROR      | Invalid or unknown configuration key

===============================================================================
PROPAGATION
===============================================================================

ChannelUnavailable never leaves the Delivery Dispatcher: it only advances
the fallback chain.  Everything else propagates to the pipeline service,
which turns it into a single labeled failure outcome.
"""

from __future__ import annotations

from typing import Any


class ReportingCoreError(Exception):
    """
    Base exception for all reporting core errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "REPORTING_CORE_ERROR"


# Aggregation-related exceptions


class AggregationError(ReportingCoreError):
    """Base exception for balance aggregation errors."""

    code: str = "AGGREGATION_ERROR"


class AggregationInputError(AggregationError):
    """
    A ledger entry is malformed.

    Raised at the aggregation boundary so that NaN-like values never
    reach running balances or rendered statements.
    """

    code: str = "AGGREGATION_INPUT_ERROR"

    def __init__(self, entry_id: Any, field: str, reason: str):
        self.entry_id = str(entry_id) if entry_id is not None else None
        self.field = field
        self.reason = reason
        super().__init__(
            f"Invalid ledger entry {self.entry_id}: {field} {reason}"
        )


class AgingUndefinedError(AggregationError):
    """Aging was requested for a dealer without an outstanding balance."""

    code: str = "AGING_UNDEFINED"

    def __init__(self, dealer_id: Any, balance: Any):
        self.dealer_id = str(dealer_id) if dealer_id is not None else None
        self.balance = str(balance)
        super().__init__(
            f"Aging is undefined for dealer {self.dealer_id} "
            f"with balance {self.balance}"
        )


# Pagination-related exceptions


class PaginationError(ReportingCoreError):
    """Base exception for statement pagination errors."""

    code: str = "PAGINATION_ERROR"


class InvalidCapacity(PaginationError):
    """Page capacity must be a positive row count."""

    code: str = "INVALID_CAPACITY"

    def __init__(self, capacity: Any):
        self.capacity = capacity
        super().__init__(f"Page capacity must be a positive integer, got {capacity!r}")


# Render-related exceptions


class RenderError(ReportingCoreError):
    """Base exception for render engine errors."""

    code: str = "RENDER_ERROR"


class RenderFailed(RenderError):
    """The render engine could not produce an artifact."""

    code: str = "RENDER_FAILED"

    def __init__(self, document_name: str | None, mime_type: str, reason: str):
        self.document_name = document_name
        self.mime_type = mime_type
        self.reason = reason
        super().__init__(
            f"Rendering {document_name or 'document'} as {mime_type} failed: {reason}"
        )


# Delivery-related exceptions


class DeliveryError(ReportingCoreError):
    """Base exception for delivery errors."""

    code: str = "DELIVERY_ERROR"


class ChannelUnavailable(DeliveryError):
    """
    A single delivery channel cannot be used right now.

    Never surfaced to the user; the dispatcher moves on to the next channel.
    """

    code: str = "CHANNEL_UNAVAILABLE"

    def __init__(self, channel: str, reason: str):
        self.channel = channel
        self.reason = reason
        super().__init__(f"Channel {channel} unavailable: {reason}")


class ShareDismissed(DeliveryError):
    """The user closed the platform share surface without choosing a target."""

    code: str = "SHARE_DISMISSED"

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"Share via {channel} was dismissed by the user")


class DeliveryFailed(DeliveryError):
    """Every channel failed, including local persistence."""

    code: str = "DELIVERY_FAILED"

    def __init__(self, suggested_filename: str, attempts: tuple[tuple[str, str], ...]):
        self.suggested_filename = suggested_filename
        self.attempts = attempts
        super().__init__(
            f"Could not deliver {suggested_filename} "
            f"after {len(attempts)} channel attempt(s)"
        )


# Request-related exceptions


class InvalidReportRequest(ReportingCoreError):
    """A caller asked for a document or reminder with unusable parameters."""

    code: str = "INVALID_REPORT_REQUEST"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid report request: {field} {reason}")


# Store-related exceptions


class LedgerStoreError(ReportingCoreError):
    """The ledger store could not answer a read."""

    code: str = "LEDGER_STORE_ERROR"

    def __init__(self, dealer_id: Any, reason: str):
        self.dealer_id = str(dealer_id) if dealer_id is not None else None
        self.reason = reason
        super().__init__(f"Ledger read for dealer {self.dealer_id} failed: {reason}")


# Configuration-related exceptions


class ConfigurationError(ReportingCoreError):
    """A configuration value is invalid or unknown."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration {key}: {reason}")
