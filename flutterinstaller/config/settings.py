"""YAML/environment configuration for the Flutter installer.

Settings are layered, lowest precedence first:

1. built-in defaults
2. flutter-installer.yaml (or the file given with --config)
3. agent variables from the environment (Agent.TempDirectory, Agent.ToolsDirectory)
4. explicit overrides (CLI flags)
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from flutterinstaller.core.exceptions import AgentEnvironmentError

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_BASE_URL = (
    "https://storage.googleapis.com/flutter_infra_release/releases"
)
DEFAULT_CONFIG_FILENAME = "flutter-installer.yaml"

# Agent variables in their environment-variable form
TEMP_DIRECTORY_VARIABLE = "AGENT_TEMPDIRECTORY"
TOOLS_DIRECTORY_VARIABLES = ("AGENT_TOOLSDIRECTORY", "RUNNER_TOOL_CACHE")


class ConfigError(AgentEnvironmentError):
    """Configuration parsing or validation error."""

    pass


@dataclass
class InstallerConfig:
    """Runtime settings for one install task invocation."""

    manifest_base_url: str = DEFAULT_MANIFEST_BASE_URL
    cache_dir: Optional[Path] = None
    temp_dir: Optional[Path] = None
    timeout: int = 60  # seconds, per HTTP request
    verify_checksum: bool = True
    lock_timeout: int = 300  # seconds, per cache entry lock

    def require_temp_dir(self) -> Path:
        """
        Agent temp directory used for downloads and extraction.

        Raises:
            AgentEnvironmentError: If no temp directory was provided
        """
        if not self.temp_dir:
            raise AgentEnvironmentError("Agent.TempDirectory is not set")
        return Path(self.temp_dir)

    def resolve_cache_dir(self) -> Path:
        """Tool cache root, falling back to the per-user default."""
        if self.cache_dir:
            return Path(self.cache_dir)
        return Path.home() / ".flutterinstaller" / "tools"


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> InstallerConfig:
    """
    Build the effective configuration.

    Args:
        config_path: YAML file to read. When None, ./flutter-installer.yaml
            is used if it exists.
        environ: Environment mapping (default: os.environ)
        overrides: Values that win over every other source; None values are ignored

    Returns:
        Effective InstallerConfig

    Raises:
        ConfigError: If the YAML file is missing (when given explicitly) or invalid

    Example:
        >>> config = load_config(overrides={"timeout": 120})
        >>> config.timeout
        120
    """
    if environ is None:
        environ = os.environ

    config = InstallerConfig()

    if config_path is not None:
        config = replace(config, **load_yaml_config(Path(config_path), required=True))
    else:
        default_file = Path.cwd() / DEFAULT_CONFIG_FILENAME
        if default_file.exists():
            config = replace(config, **load_yaml_config(default_file))

    config = replace(config, **_environment_values(environ))

    if overrides:
        values = {key: value for key, value in overrides.items() if value is not None}
        config = replace(config, **_validate(values, source="overrides"))

    return config


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and validate a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Validated settings (empty dict if file doesn't exist and not required)

    Raises:
        ConfigError: If the file is required but missing, or is invalid
    """
    if not config_file.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {config_file}")

    return _validate(data, source=str(config_file))


def _environment_values(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Settings provided by the agent through environment variables."""
    values: Dict[str, Any] = {}

    temp_dir = environ.get(TEMP_DIRECTORY_VARIABLE)
    if temp_dir:
        values["temp_dir"] = Path(temp_dir)

    for name in TOOLS_DIRECTORY_VARIABLES:
        if environ.get(name):
            values["cache_dir"] = Path(environ[name])
            break

    return values


def _validate(data: Dict[str, Any], source: str) -> Dict[str, Any]:
    """Check keys and coerce value types."""
    known = {f.name for f in fields(InstallerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys in {source}: {', '.join(unknown)}")

    values = dict(data)

    for key in ("cache_dir", "temp_dir"):
        if values.get(key) is not None:
            values[key] = Path(values[key]).expanduser()

    for key in ("timeout", "lock_timeout"):
        if key in values:
            value = values[key]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"'{key}' must be a positive integer in {source}")

    if "verify_checksum" in values and not isinstance(values["verify_checksum"], bool):
        raise ConfigError(f"'verify_checksum' must be true or false in {source}")

    if "manifest_base_url" in values:
        url = values["manifest_base_url"]
        if not isinstance(url, str) or not url:
            raise ConfigError(f"'manifest_base_url' must be a non-empty string in {source}")
        values["manifest_base_url"] = url.rstrip("/")

    return values


__all__ = [
    "DEFAULT_MANIFEST_BASE_URL",
    "DEFAULT_CONFIG_FILENAME",
    "ConfigError",
    "InstallerConfig",
    "load_config",
    "load_yaml_config",
]
