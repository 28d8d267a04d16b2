"""
Resolve command implementation.

Shows the release the install command would pick, without downloading it.
"""

import logging

from flutterinstaller.cli.utils import build_config, task_inputs
from flutterinstaller.core.platform import find_architecture
from flutterinstaller.pipeline.agent import PipelineAgent
from flutterinstaller.sdk.installer import FlutterSdkInstaller
from flutterinstaller.sdk.selector import LATEST

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    # Flags win over INPUT_* variables; unset selections preview latest stable
    agent = PipelineAgent(inputs=task_inputs(args))
    channel = agent.get_input("channel") or "stable"
    version = agent.get_input("version") or LATEST
    custom_version = agent.get_input("customVersion")
    arch = args.arch or find_architecture()

    installer = FlutterSdkInstaller(build_config(args))
    resolved = installer.resolve(channel, version, custom_version, arch)
    cached = installer.find_cached(resolved, arch)

    print(f"Channel:      {resolved.channel}")
    print(f"Version spec: {resolved.version_spec}")
    print(f"Architecture: {arch}")
    print(f"Release hash: {resolved.release.hash}")
    if resolved.release.release_date:
        print(f"Released:     {resolved.release.release_date}")
    print(f"Download URL: {resolved.download_url}")
    print(f"Cached:       {cached if cached else 'no'}")

    return 0
