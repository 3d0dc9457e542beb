"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a tenant YAML file and parses it into the frozen
``ledger_config.schema.TenantConfig``.  Runtime callers go through
``ledger_config.get_active_config()``; tests and tooling may call
``load_config`` directly.

Invariants enforced
-------------------
* Unknown keys are rejected, never ignored, so a typo cannot silently
  fall back to a default.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import TenantConfig
from ledger_kernel.exceptions import ConfigurationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("config.loader")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def load_config(path: Path | str) -> TenantConfig:
    """Load and validate a tenant configuration file."""
    path = Path(path)
    config = TenantConfig.from_dict(load_yaml_file(path))
    logger.info(
        "tenant_config_loaded",
        extra={"path": str(path), "checksum": compute_checksum(config)},
    )
    return config


def compute_checksum(config: TenantConfig | dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical configuration always produces identical checksums.
    """
    data = config.to_dict() if isinstance(config, TenantConfig) else config
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
