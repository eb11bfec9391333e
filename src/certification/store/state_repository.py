"""Platform state persistence.

Stores the whole platform state as one JSON document:
    {data_dir}/state/certification_state_v1.json

The document carries a "$schema" marker; a file with another schema is
ignored (logged) and a fresh platform is returned.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import structlog

from certification.config.app_config import AppConfig, load_app_config
from certification.core.platform import CertificationPlatform

logger = structlog.get_logger(__name__)

STATE_FILENAME = "certification_state_v1.json"
STATE_SCHEMA = "certification_state_v1"


def get_data_dir() -> Path:
    """Data directory from CERTIFY_DATA_DIR, defaulting to ./data."""
    return Path(os.environ.get("CERTIFY_DATA_DIR", "data"))


def state_path(data_dir: Path | None = None) -> Path:
    return (data_dir or get_data_dir()) / "state" / STATE_FILENAME


def state_exists(data_dir: Path | None = None) -> bool:
    return state_path(data_dir).exists()


def load_platform(
    data_dir: Path | None = None,
    config: AppConfig | None = None,
) -> CertificationPlatform:
    """Load the platform from disk, or build a fresh one from config.

    Args:
        data_dir: Base data directory. Defaults to get_data_dir()
        config: Configuration for a fresh platform. Defaults to load_app_config()

    Returns:
        CertificationPlatform with the saved state applied
    """
    platform = CertificationPlatform.from_config(config or load_app_config())
    path = state_path(data_dir)

    if not path.exists():
        logger.debug("platform_state_missing", path=str(path))
        return platform

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if data.get("$schema") != STATE_SCHEMA:
        logger.warning(
            "platform_state_invalid_schema",
            expected=STATE_SCHEMA,
            got=data.get("$schema"),
        )
        return platform

    platform.load_dict(data)
    logger.debug("platform_state_loaded", path=str(path))
    return platform


def save_platform(platform: CertificationPlatform, data_dir: Path | None = None) -> Path:
    """Persist the platform state to disk.

    Writes to a temporary file first and renames it over the old state.

    Returns:
        Path to saved state file
    """
    path = state_path(data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {"$schema": STATE_SCHEMA, **platform.to_dict()}
    tmp_path = path.with_suffix(".json.tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    tmp_path.replace(path)

    logger.info("platform_state_saved", path=str(path))
    return path
