"""
Shared utilities for CLI commands.
"""

import logging
from typing import Dict

from flutterinstaller.config.settings import InstallerConfig, load_config

logger = logging.getLogger(__name__)


def build_config(args) -> InstallerConfig:
    """
    Effective configuration for a command, with CLI flags applied last.

    Args:
        args: Parsed command-line arguments

    Returns:
        InstallerConfig
    """
    overrides = {
        "manifest_base_url": getattr(args, "manifest_url", None),
        "cache_dir": getattr(args, "cache_dir", None),
        "temp_dir": getattr(args, "temp_dir", None),
    }
    if getattr(args, "no_verify", False):
        overrides["verify_checksum"] = False

    return load_config(getattr(args, "config", None), overrides=overrides)


def task_inputs(args) -> Dict[str, str]:
    """
    Task inputs given on the command line.

    Only flags that were actually passed are returned, so INPUT_* variables
    still apply to the rest.
    """
    inputs = {
        "channel": getattr(args, "channel", None),
        "version": getattr(args, "sdk_version", None),
        "customVersion": getattr(args, "custom_version", None),
    }
    return {name: value for name, value in inputs.items() if value is not None}
