"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is missing.

Usage:
    from certification.config.app_config import load_app_config

    config = load_app_config()
    config.limits.max_evaluators_per_course
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@dataclass
class LimitsConfig:
    """Quotas applied to every course."""

    max_evaluators_per_course: int = 5
    max_places_per_course: int = 100
    base_course_fee: Decimal = Decimal("0.01")  # advisory, never a floor
    setters_require_admin: bool = True


@dataclass
class MetadataConfig:
    """Collection-level metadata pointers."""

    contract_uri: str = "ipfs://certification/contract.json"


@dataclass
class AppConfig:
    """Application-wide configuration."""

    limits: LimitsConfig = field(default_factory=LimitsConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    bootstrap_admin: str | None = None
    paths: dict[str, str] = field(default_factory=dict)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "limits": {
            "max_evaluators_per_course": 5,
            "max_places_per_course": 100,
            "base_course_fee": "0.01",
            "setters_require_admin": True,
        },
        "metadata": {
            "contract_uri": "ipfs://certification/contract.json",
        },
        "bootstrap_admin": None,
        "paths": {
            "state_dir": "data/state",
            "config_dir": "data/config",
        },
    }


def parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object.

    Missing keys take their default values, so partial files are valid.
    """
    limits_data = data.get("limits") or {}
    limits = LimitsConfig(
        max_evaluators_per_course=int(limits_data.get("max_evaluators_per_course", 5)),
        max_places_per_course=int(limits_data.get("max_places_per_course", 100)),
        base_course_fee=Decimal(str(limits_data.get("base_course_fee", "0.01"))),
        setters_require_admin=bool(limits_data.get("setters_require_admin", True)),
    )

    metadata_data = data.get("metadata") or {}
    metadata = MetadataConfig(
        contract_uri=metadata_data.get("contract_uri", "ipfs://certification/contract.json"),
    )

    return AppConfig(
        limits=limits,
        metadata=metadata,
        bootstrap_admin=data.get("bootstrap_admin"),
        paths=data.get("paths") or {},
    )


def load_app_config(
    force_reload: bool = False,
    config_file: Path | None = None,
) -> AppConfig:
    """Load application config, using defaults when no file exists.

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_file: Alternative YAML file. Defaults to CONFIG_FILE.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload and config_file is None:
        return _cached_config

    path = config_file or CONFIG_FILE
    data: dict[str, Any]

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    config = parse_config(data)
    if config_file is None:
        _cached_config = config
    return config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
