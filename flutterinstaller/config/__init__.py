"""Configuration loading for the Flutter installer."""

from .settings import (
    DEFAULT_MANIFEST_BASE_URL,
    DEFAULT_CONFIG_FILENAME,
    ConfigError,
    InstallerConfig,
    load_config,
    load_yaml_config,
)

__all__ = [
    "DEFAULT_MANIFEST_BASE_URL",
    "DEFAULT_CONFIG_FILENAME",
    "ConfigError",
    "InstallerConfig",
    "load_config",
    "load_yaml_config",
]
