"""
List command implementation.

Lists Flutter SDKs present in the tool cache.
"""

import logging

from flutterinstaller.cli.utils import build_config
from flutterinstaller.core.platform import find_architecture
from flutterinstaller.core.tool_cache import ToolCache
from flutterinstaller.sdk.installer import TOOL_NAME

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = build_config(args)
    arch = args.arch or find_architecture()
    cache = ToolCache(config.resolve_cache_dir(), lock_timeout=config.lock_timeout)

    versions = cache.list_versions(TOOL_NAME, arch)
    if not versions:
        print(f"No cached {TOOL_NAME} SDKs for {arch} in {cache.root}")
        return 0

    for version_spec in versions:
        print(f"{version_spec}\t{cache.entry_path(TOOL_NAME, version_spec, arch)}")

    return 0
