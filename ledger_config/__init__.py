"""
ledger_config -- single public entrypoint for tenant configuration.

Responsibility:
    Provides ``get_active_config()``, the way services obtain the tenant
    configuration at runtime.  The file named by ``$LEDGER_CONFIG_PATH``
    is loaded once and cached; without it the defaults apply.

Architecture position:
    Configuration -- sits above ``ledger_kernel``.  The kernel and the
    engines MUST NEVER import from ``ledger_config``; services receive the
    relevant section by constructor injection.

Failure modes:
    - ``FileNotFoundError`` -- ``$LEDGER_CONFIG_PATH`` points nowhere.
    - ``ConfigurationError`` -- unknown keys or invalid values.
"""

from __future__ import annotations

import os
import threading

from ledger_config.loader import compute_checksum, load_config
from ledger_config.schema import DeliveryConfig, ReportingConfig, TenantConfig
from ledger_kernel.logging_config import get_logger

CONFIG_PATH_ENV = "LEDGER_CONFIG_PATH"

_logger = get_logger("config")
_active: TenantConfig | None = None
_lock = threading.Lock()


def get_active_config() -> TenantConfig:
    """Return the cached tenant configuration, loading it on first use."""
    global _active
    with _lock:
        if _active is None:
            path = os.environ.get(CONFIG_PATH_ENV)
            _active = load_config(path) if path else TenantConfig.with_defaults()
            _logger.info(
                "active_config_resolved",
                extra={
                    "source": path or "defaults",
                    "checksum": compute_checksum(_active),
                },
            )
        return _active


def reset_active_config() -> None:
    """Drop the cached configuration. FOR TESTING ONLY."""
    global _active
    with _lock:
        _active = None


__all__ = [
    "CONFIG_PATH_ENV",
    "DeliveryConfig",
    "ReportingConfig",
    "TenantConfig",
    "compute_checksum",
    "get_active_config",
    "load_config",
    "reset_active_config",
]
