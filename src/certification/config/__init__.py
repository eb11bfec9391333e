"""Configuration package for the certification system."""

from certification.config.app_config import (
    AppConfig,
    LimitsConfig,
    MetadataConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "LimitsConfig",
    "MetadataConfig",
    "clear_config_cache",
    "load_app_config",
]
