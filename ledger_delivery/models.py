"""
Delivery outcome types.

Contract:
    Every ``DeliveryDispatcher.deliver`` call returns exactly one
    DeliveryOutcome or raises DeliveryFailed.  A text-only deep link is a
    successful but degraded outcome and must be disclosed to the user.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum


class DeliveryMethod(str, Enum):
    """How an artifact finally reached the user."""

    NATIVE = "native"
    PLATFORM = "platform"
    DEEP_LINK_TEXT_ONLY = "deep_link_text_only"
    LOCAL = "local"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RecipientHint:
    """Who the artifact is for and what to say with it."""

    phone_number: str | None = None
    caption: str | None = None


@dataclass(frozen=True)
class DeliveryOutcome:
    """
    Result of one dispatch.

    ``attempts`` lists the (channel, reason) pairs of channels that were
    skipped before the winning one, for diagnostics only.
    """

    method: DeliveryMethod
    location: str | None = None
    url: str | None = None
    attempts: tuple[tuple[str, str], ...] = ()

    @property
    def is_degraded(self) -> bool:
        """True when only caption text was sent; the file was not attached."""
        return self.method is DeliveryMethod.DEEP_LINK_TEXT_ONLY

    @property
    def is_cancelled(self) -> bool:
        return self.method is DeliveryMethod.CANCELLED


class CancellationToken:
    """
    Caller-side abort signal.

    Checked before each channel attempt.  An attempt already in flight is
    awaited, not interrupted.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Suspend until ``cancel`` is called."""
        await self._event.wait()
