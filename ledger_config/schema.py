"""
Tenant configuration schema.

Defines the reviewable settings a tenant (one distributor business) can
change without touching code: the name printed on documents, the payment
aging threshold, physical page capacities and how phone numbers are turned
into messaging deep links.  YAML files are parsed into these types by the
loader; services receive them through constructor injection.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Self

from ledger_kernel.exceptions import ConfigurationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("config.schema")


def _reject_unknown(section: str, cls: type, data: dict[str, Any]) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"{section}.{unknown[0]}", "unknown key")


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportingConfig:
    """
    Settings for statements, invoices and the collection hub.

    Page capacities are physical constraints of the A4 layouts the render
    engine draws; they are not computed from content.
    """

    # Printed in every document header
    entity_name: str = "Distributor"

    currency: str = "INR"

    # Days a dealer may carry an unpaid balance before it is overdue
    alert_threshold_days: int = 15

    # Dashboard "collection alert" once this many days have elapsed
    dashboard_alert_days: int = 10

    ledger_rows_per_page: int = 17
    invoice_rows_per_page: int = 14
    stock_rows_per_page: int = 8

    # Narration printed when an entry has none
    default_narration: str = "TRANSACTION"

    def __post_init__(self):
        if len(self.currency) != 3:
            raise ValueError("currency must be a 3-letter ISO 4217 code")
        if self.alert_threshold_days < 0:
            raise ValueError("alert_threshold_days cannot be negative")
        if self.dashboard_alert_days < 0:
            raise ValueError("dashboard_alert_days cannot be negative")
        if self.ledger_rows_per_page <= 0:
            raise ValueError("ledger_rows_per_page must be positive")
        if self.invoice_rows_per_page <= 0:
            raise ValueError("invoice_rows_per_page must be positive")
        if self.stock_rows_per_page <= 0:
            raise ValueError("stock_rows_per_page must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        _reject_unknown("reporting", cls, data)
        return cls(**data)


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeliveryConfig:
    """Settings for the delivery dispatcher and its channels."""

    country_code: str = "91"

    # Phone numbers are reduced to their last N digits before the
    # country code is prepended.
    local_number_digits: int = 10

    deep_link_template: str = "whatsapp://send?phone={phone}&text={text}"

    # Host bridge payload limit in bytes; None means no known limit.
    native_max_payload_bytes: int | None = None

    download_dir: str = "downloads"

    def __post_init__(self):
        if not self.country_code.isdigit():
            raise ValueError("country_code must contain digits only")
        if self.local_number_digits <= 0:
            raise ValueError("local_number_digits must be positive")
        if "{phone}" not in self.deep_link_template or "{text}" not in self.deep_link_template:
            raise ValueError("deep_link_template must contain {phone} and {text}")
        if self.native_max_payload_bytes is not None and self.native_max_payload_bytes <= 0:
            raise ValueError("native_max_payload_bytes must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        _reject_unknown("delivery", cls, data)
        return cls(**data)


# ---------------------------------------------------------------------------
# Tenant
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TenantConfig:
    """Complete configuration of one tenant."""

    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    delivery: DeliveryConfig = field(default_factory=DeliveryConfig)

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("tenant_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Create config from a nested dictionary.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        _reject_unknown("tenant", cls, data)
        logger.info(
            "tenant_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        sections: dict[str, Any] = {}
        for name, parser in (
            ("reporting", ReportingConfig.from_dict),
            ("delivery", DeliveryConfig.from_dict),
        ):
            raw = data.get(name) or {}
            if not isinstance(raw, dict):
                raise ConfigurationError(name, "must be a mapping")
            try:
                sections[name] = parser(raw)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(name, str(e)) from e
        return cls(**sections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "reporting": {f.name: getattr(self.reporting, f.name) for f in fields(self.reporting)},
            "delivery": {f.name: getattr(self.delivery, f.name) for f in fields(self.delivery)},
        }
