from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from carrier_tracking.detection import SUPPORTED_CARRIERS, pattern_for
from carrier_tracking.errors import ConfigError
from carrier_tracking.models import CarrierConfig

from .env import endpoint_override

CARRIER_CONFIG_DIR = Path(__file__).resolve().parent / "carriers"

# carrier id -> file name under CARRIER_CONFIG_DIR
CONFIG_FILES: Dict[str, str] = {
    "UPS": "ups.json",
    "FedEx": "fedex.json",
    "USPS": "usps.json",
}

logger = logging.getLogger("carrier_tracking.config.carriers")


def load_carrier_config(carrier: str, config_dir: Optional[Path] = None) -> CarrierConfig:
    """Read one carrier's JSON file and return a CarrierConfig.

    The detection pattern always comes from carrier_tracking.detection so
    that detection and configuration cannot disagree. A `<CARRIER>_API_ENDPOINT`
    env var replaces the file's `apiEndpoint`.
    """
    base = Path(config_dir) if config_dir else CARRIER_CONFIG_DIR
    file_name = CONFIG_FILES.get(carrier)
    if not file_name:
        raise ConfigError(f"No configuration file registered for carrier {carrier}")

    path = base / file_name
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Carrier config not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Carrier config unreadable: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Carrier config must be a JSON object: {path}")

    override = endpoint_override(carrier)
    if override:
        data = {**data, "apiEndpoint": override}

    try:
        return CarrierConfig.from_dict(data, pattern=pattern_for(carrier))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid carrier config {path}: {e}") from e


def minimal_carrier_config(carrier: str) -> CarrierConfig:
    """Config used when a carrier's file is missing: detection only, no API, no mocks."""
    pattern = pattern_for(carrier)
    if pattern is None:
        raise ConfigError(f"Unknown carrier: {carrier}")
    return CarrierConfig(name=carrier, pattern=pattern)


def load_carrier_configs(
    carriers: Iterable[str] = SUPPORTED_CARRIERS,
    config_dir: Optional[Path] = None,
) -> Dict[str, CarrierConfig]:
    """Load every carrier's config, substituting a minimal one on failure."""
    configs: Dict[str, CarrierConfig] = {}
    for carrier in carriers:
        try:
            configs[carrier] = load_carrier_config(carrier, config_dir)
        except ConfigError as e:
            logger.warning("%s; using minimal config for %s", e, carrier)
            configs[carrier] = minimal_carrier_config(carrier)
    return configs


__all__ = [
    "CARRIER_CONFIG_DIR",
    "CONFIG_FILES",
    "load_carrier_config",
    "load_carrier_configs",
    "minimal_carrier_config",
]
