"""
Module: ledger_delivery.channels
Responsibility:
    Ports for the platform primitives a delivery can use (native host
    bridge, platform share surface, messaging URL launcher, local
    persistence) and one channel adapter per primitive.

Architecture position:
    Delivery -- adapters at the edge.  Ports are injected into the
    DeliveryDispatcher; nothing here looks up ambient globals.

Invariants enforced:
    - A channel whose precondition does not hold raises ChannelUnavailable
      before touching the host.
    - Any other failure raised by a port is converted to
      ChannelUnavailable with the original exception chained, so the
      dispatcher can fall through.  ShareDismissed is the one exception
      that passes through unchanged.

Failure modes:
    - ChannelUnavailable (always recoverable by the next channel).
    - ShareDismissed (the user closed the platform share surface).
"""

from __future__ import annotations

import asyncio
import inspect
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from ledger_config.schema import DeliveryConfig
from ledger_delivery.artifacts import DeliveryArtifact, safe_filename
from ledger_delivery.messaging import deep_link_for
from ledger_delivery.models import DeliveryMethod, DeliveryOutcome, RecipientHint
from ledger_kernel.exceptions import ChannelUnavailable, ReportingCoreError
from ledger_kernel.logging_config import get_logger

logger = get_logger("delivery.channels")


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


@runtime_checkable
class NativeBridge(Protocol):
    """File-share primitive exposed by an embedding host."""

    def share_file(
        self,
        payload_base64: str,
        filename: str,
        mime_type: str,
        caption: str,
        phone_number: str,
    ) -> Any:
        """Hand the payload to the host share sheet.  May return an awaitable."""
        ...


@runtime_checkable
class PlatformShareSurface(Protocol):
    """Runtime-native "share a file" capability."""

    def can_share(self, mime_type: str) -> bool:
        ...

    async def share(self, files: list[DeliveryArtifact], caption: str) -> None:
        """Raises ShareDismissed if the user closes the surface."""
        ...


@runtime_checkable
class MessagingLauncher(Protocol):
    """Opens a messaging deep link."""

    async def open_url(self, url: str) -> None:
        ...


@runtime_checkable
class LocalPersistence(Protocol):
    """Download trigger or clipboard write."""

    async def save(self, artifact: DeliveryArtifact) -> str:
        """Store the artifact and return where it went."""
        ...

    async def copy_text(self, text: str) -> str:
        ...


class FilesystemPersistence:
    """
    LocalPersistence writing into a download directory.

    Copied text is kept in ``clipboard.txt`` in the same directory.
    """

    CLIPBOARD_FILE = "clipboard.txt"

    def __init__(self, download_dir: Path | str):
        self._download_dir = Path(download_dir)

    def _write(self, filename: str, data: bytes) -> str:
        self._download_dir.mkdir(parents=True, exist_ok=True)
        target = self._download_dir / safe_filename(filename)
        target.write_bytes(data)
        return str(target)

    async def save(self, artifact: DeliveryArtifact) -> str:
        return await asyncio.to_thread(
            self._write, artifact.suggested_filename, artifact.read_bytes(),
        )

    async def copy_text(self, text: str) -> str:
        return await asyncio.to_thread(
            self._write, self.CLIPBOARD_FILE, text.encode("utf-8"),
        )


# ---------------------------------------------------------------------------
# Channel adapters
# ---------------------------------------------------------------------------


class Channel(ABC):
    """One concrete mechanism for handing an artifact to the user."""

    name: str = "channel"

    @abstractmethod
    async def attempt(
        self,
        artifact: DeliveryArtifact,
        hint: RecipientHint,
    ) -> DeliveryOutcome:
        """
        Deliver through this channel.

        Raises:
            ChannelUnavailable: If the channel cannot be used.
        """
        ...

    def _unavailable(self, reason: str) -> ChannelUnavailable:
        return ChannelUnavailable(self.name, reason)


class NativeBridgeChannel(Channel):
    """Share through the embedding host's bridge object."""

    name = "native"

    def __init__(self, bridge: Any | None, max_payload_bytes: int | None = None):
        self._bridge = bridge
        self._max_payload_bytes = max_payload_bytes

    def _limit(self) -> int | None:
        if self._max_payload_bytes is not None:
            return self._max_payload_bytes
        return getattr(self._bridge, "max_payload_bytes", None)

    async def attempt(self, artifact, hint):
        share_file = getattr(self._bridge, "share_file", None)
        if self._bridge is None or not callable(share_file):
            raise self._unavailable("no host bridge")

        try:
            payload = artifact.to_base64()
        except OSError as exc:
            raise self._unavailable(f"artifact unreadable: {exc}") from exc

        limit = self._limit()
        if limit is not None and len(payload) > limit:
            raise self._unavailable(f"payload of {len(payload)} bytes exceeds host limit {limit}")

        try:
            result = share_file(
                payload,
                safe_filename(artifact.suggested_filename),
                artifact.mime_type,
                hint.caption or "",
                hint.phone_number or "",
            )
            if inspect.isawaitable(result):
                await result
        except ReportingCoreError:
            raise
        except Exception as exc:
            raise self._unavailable(f"host bridge failed: {exc}") from exc
        return DeliveryOutcome(method=DeliveryMethod.NATIVE)


class PlatformShareChannel(Channel):
    """Share through the OS share surface with the file attached."""

    name = "platform"

    def __init__(self, surface: PlatformShareSurface | None):
        self._surface = surface

    async def attempt(self, artifact, hint):
        if self._surface is None:
            raise self._unavailable("no share surface")
        try:
            accepted = self._surface.can_share(artifact.mime_type)
        except Exception as exc:
            raise self._unavailable(f"capability check failed: {exc}") from exc
        if not accepted:
            raise self._unavailable(f"cannot share {artifact.mime_type}")

        try:
            await self._surface.share([artifact], hint.caption or "")
        except ReportingCoreError:
            raise
        except Exception as exc:
            raise self._unavailable(f"share failed: {exc}") from exc
        return DeliveryOutcome(method=DeliveryMethod.PLATFORM)


class LocalPersistChannel(Channel):
    """Universal fallback: download the file (or copy text) locally."""

    name = "local"

    def __init__(self, persistence: LocalPersistence | None):
        self._persistence = persistence

    async def persist(self, artifact: DeliveryArtifact) -> str:
        if self._persistence is None:
            raise self._unavailable("no local persistence")
        try:
            if artifact.is_text:
                return await self._persistence.copy_text(artifact.read_bytes().decode("utf-8"))
            return await self._persistence.save(artifact)
        except Exception as exc:
            raise self._unavailable(f"local write failed: {exc}") from exc

    async def attempt(self, artifact, hint):
        location = await self.persist(artifact)
        return DeliveryOutcome(method=DeliveryMethod.LOCAL, location=location)


class DeepLinkChannel(Channel):
    """
    Text-only messaging deep link.

    The artifact is saved locally first so the user has the file before
    switching to the messaging app.  The resulting outcome is degraded.
    """

    name = "deep_link"

    def __init__(
        self,
        launcher: MessagingLauncher | None,
        local: LocalPersistChannel,
        config: DeliveryConfig,
    ):
        self._launcher = launcher
        self._local = local
        self._config = config

    async def attempt(self, artifact, hint):
        if not hint.phone_number:
            raise self._unavailable("no recipient phone number")
        if self._launcher is None:
            raise self._unavailable("no messaging launcher")
        url = deep_link_for(hint.phone_number, hint.caption or "", self._config)
        if url is None:
            raise self._unavailable("recipient phone number is unusable")

        location = await self._local.persist(artifact)
        try:
            await self._launcher.open_url(url)
        except Exception as exc:
            raise self._unavailable(f"could not open deep link: {exc}") from exc

        logger.warning(
            "delivery_degraded_to_text_only",
            extra={"suggested_filename": artifact.suggested_filename, "location": location},
        )
        return DeliveryOutcome(
            method=DeliveryMethod.DEEP_LINK_TEXT_ONLY,
            location=location,
            url=url,
        )
