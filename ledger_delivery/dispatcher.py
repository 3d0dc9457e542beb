"""
Module: ledger_delivery.dispatcher
Responsibility:
    Hand a rendered artifact to the user through the best channel the
    current runtime offers, falling back in strict priority order:
    native bridge, platform share surface, messaging deep link (text
    only, when a phone number is known), local persistence.

Architecture position:
    Delivery -- the single prioritized-channel state machine.  Platform
    primitives arrive as constructor-injected ports so the dispatcher is
    testable with fakes.

Invariants enforced:
    - First success wins; every ChannelUnavailable falls through to the
      next channel and is recorded in ``attempts``.
    - Cancellation is checked before each attempt.  An attempt that has
      started is awaited to completion.
    - A dismissed platform share ends the dispatch as cancelled.  No
      download fallback follows.
    - No persisted state: repeated ``deliver`` calls for the same artifact
      are safe.

Failure modes:
    - DeliveryFailed when no channel, local persistence included, succeeds.

Usage:
    dispatcher = DeliveryDispatcher(
        native=host_bridge,
        persistence=FilesystemPersistence("downloads"),
    )
    outcome = await dispatcher.deliver(artifact, RecipientHint(caption="Ledger"))
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ledger_config.schema import DeliveryConfig
from ledger_delivery.artifacts import DeliveryArtifact
from ledger_delivery.channels import (
    Channel,
    DeepLinkChannel,
    LocalPersistChannel,
    LocalPersistence,
    MessagingLauncher,
    NativeBridgeChannel,
    PlatformShareChannel,
    PlatformShareSurface,
)
from ledger_delivery.models import (
    CancellationToken,
    DeliveryMethod,
    DeliveryOutcome,
    RecipientHint,
)
from ledger_kernel.exceptions import ChannelUnavailable, DeliveryFailed, ShareDismissed
from ledger_kernel.logging_config import LogContext, get_logger

logger = get_logger("delivery.dispatcher")


class DeliveryDispatcher:
    """
    Prioritized fallback over delivery channels.

    Contract:
        ``deliver`` returns a DeliveryOutcome or raises DeliveryFailed.
    Guarantees:
        - At most one channel delivers the artifact, except that the
          deep link channel also saves it locally.
    """

    def __init__(
        self,
        native: Any | None = None,
        platform: PlatformShareSurface | None = None,
        messaging: MessagingLauncher | None = None,
        persistence: LocalPersistence | None = None,
        config: DeliveryConfig | None = None,
    ):
        self._config = config or DeliveryConfig()
        local = LocalPersistChannel(persistence)
        self._channels: tuple[Channel, ...] = (
            NativeBridgeChannel(native, self._config.native_max_payload_bytes),
            PlatformShareChannel(platform),
            DeepLinkChannel(messaging, local, self._config),
            local,
        )

    @property
    def channels(self) -> tuple[Channel, ...]:
        return self._channels

    async def deliver(
        self,
        artifact: DeliveryArtifact,
        hint: RecipientHint | None = None,
        cancel: CancellationToken | None = None,
    ) -> DeliveryOutcome:
        """
        Deliver ``artifact`` through the first viable channel.

        Raises:
            DeliveryFailed: If every channel was unavailable.
        """
        hint = hint or RecipientHint()
        attempts: list[tuple[str, str]] = []

        with LogContext.bind(document_name=artifact.suggested_filename):
            for channel in self._channels:
                if cancel is not None and cancel.is_cancelled:
                    logger.info(
                        "delivery_cancelled",
                        extra={"before_channel": channel.name, "attempt_count": len(attempts)},
                    )
                    return DeliveryOutcome(
                        method=DeliveryMethod.CANCELLED, attempts=tuple(attempts),
                    )

                with LogContext.bind(channel=channel.name):
                    try:
                        outcome = await channel.attempt(artifact, hint)
                    except ChannelUnavailable as exc:
                        attempts.append((channel.name, exc.reason))
                        logger.info(
                            "delivery_channel_unavailable",
                            extra={"reason": exc.reason},
                        )
                        continue
                    except ShareDismissed:
                        logger.info("delivery_share_dismissed")
                        return DeliveryOutcome(
                            method=DeliveryMethod.CANCELLED, attempts=tuple(attempts),
                        )

                    logger.info(
                        "delivery_succeeded",
                        extra={
                            "method": outcome.method.value,
                            "is_degraded": outcome.is_degraded,
                            "attempt_count": len(attempts),
                        },
                    )
                    return replace(outcome, attempts=tuple(attempts))

        logger.error(
            "delivery_failed",
            extra={
                "suggested_filename": artifact.suggested_filename,
                "attempts": attempts,
            },
        )
        raise DeliveryFailed(artifact.suggested_filename, tuple(attempts))
