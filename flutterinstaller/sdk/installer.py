"""
Flutter SDK installation task.

This module orchestrates the install task end to end:
1. Detect the host architecture
2. Fetch the release manifest and select a release
3. Look the release up in the local tool cache
4. On a miss, download, extract and cache it, then look it up again
5. Publish FlutterToolPath and report the task result

Every step runs after the previous one completes; errors are only caught
by run_task, which turns them into a failed task result.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

from flutterinstaller.config.settings import InstallerConfig
from flutterinstaller.core.download import DownloadProgress, download_file
from flutterinstaller.core.exceptions import CacheError
from flutterinstaller.core.filesystem import (
    create_extract_folder,
    extract_archive,
    safe_rmtree,
)
from flutterinstaller.core.platform import find_architecture
from flutterinstaller.core.tool_cache import ToolCache
from flutterinstaller.pipeline.agent import PipelineAgent, TaskResult
from flutterinstaller.sdk.manifest import fetch_manifest
from flutterinstaller.sdk.selector import ResolvedSdk, select_release

logger = logging.getLogger(__name__)

TOOL_NAME = "Flutter"
EXE_RELATIVE_PATH = "flutter/bin"
TOOL_PATH_VARIABLE = "FlutterToolPath"
SUCCESS_MESSAGE = "Installed"


@dataclass
class InstallResult:
    """Result of making an SDK available in the tool cache."""

    resolved: ResolvedSdk
    arch: str
    tool_path: Path
    """Root of the cached installation"""

    was_cached: bool
    """Whether the SDK was already cached (no download needed)"""

    download_time: float = 0.0
    extraction_time: float = 0.0


class FlutterSdkInstaller:
    """
    Resolves Flutter releases and materializes them in the tool cache.

    Example:
        >>> installer = FlutterSdkInstaller(load_config())
        >>> resolved = installer.resolve("stable", "latest", "", "linux")
        >>> result = installer.ensure_installed(resolved, "linux")
        >>> print(result.tool_path)
    """

    def __init__(
        self,
        config: InstallerConfig,
        tool_cache: Optional[ToolCache] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.tool_cache = tool_cache or ToolCache(
            config.resolve_cache_dir(), lock_timeout=config.lock_timeout
        )
        self.session = session

    def resolve(
        self, channel: str, version: str, custom_version: str, arch: str
    ) -> ResolvedSdk:
        """
        Fetch the manifest for arch and select the release to install.

        Raises:
            ManifestFetchError: If the manifest cannot be fetched or parsed
            NoMatchingReleaseError: If no release matches
        """
        manifest = fetch_manifest(
            arch,
            base_url=self.config.manifest_base_url,
            timeout=self.config.timeout,
            session=self.session,
        )
        return select_release(manifest, channel, version, custom_version)

    def find_cached(self, resolved: ResolvedSdk, arch: str) -> Optional[Path]:
        """Installation path of a resolved release, None on a cache miss."""
        logger.debug(
            f"Trying to get ({TOOL_NAME},{resolved.version_spec}, {arch}) "
            "tool from local cache"
        )
        return self.tool_cache.find_local_tool(TOOL_NAME, resolved.version_spec, arch)

    def ensure_installed(self, resolved: ResolvedSdk, arch: str) -> InstallResult:
        """
        Return the cached installation, downloading it first on a miss.

        Raises:
            AgentEnvironmentError: If a download is needed and no temp dir is set
            DownloadError: If the archive cannot be downloaded
            ExtractionError: If the archive cannot be extracted
            CacheError: If the installation is still missing after caching
        """
        tool_path = self.find_cached(resolved, arch)
        if tool_path is not None:
            logger.info(f"Flutter {resolved.version_spec} found in tool cache")
            return InstallResult(
                resolved=resolved, arch=arch, tool_path=tool_path, was_cached=True
            )

        download_time, extraction_time = self._download_and_cache(resolved, arch)

        tool_path = self.find_cached(resolved, arch)
        if tool_path is None:
            raise CacheError(
                f"{TOOL_NAME} {resolved.version_spec} ({arch}) is missing from "
                "the tool cache after caching it"
            )

        return InstallResult(
            resolved=resolved,
            arch=arch,
            tool_path=tool_path,
            was_cached=False,
            download_time=download_time,
            extraction_time=extraction_time,
        )

    def _download_and_cache(self, resolved: ResolvedSdk, arch: str):
        """Download, extract and cache one release; returns phase timings."""
        temp_dir = self.config.require_temp_dir()
        download_dir = create_extract_folder(temp_dir)
        extracted_dir = None

        try:
            # Phase 1: Download
            url = resolved.download_url
            logger.debug(f"Starting download archive from '{url}'")
            download_start = time.time()

            archive = download_file(
                url,
                download_dir / resolved.archive_name,
                expected_sha256=resolved.release.sha256
                if self.config.verify_checksum
                else None,
                progress_callback=_log_progress,
                timeout=self.config.timeout,
                session=self.session,
            )
            download_time = time.time() - download_start
            logger.debug(f"Succeeded to download '{archive}' archive from '{url}'")

            # Phase 2: Extract
            extraction_start = time.time()
            extracted_dir = extract_archive(archive, temp_dir)
            extraction_time = time.time() - extraction_start
            logger.debug(f"Extracted to '{extracted_dir}' '{url}' archive")

            # Phase 3: Cache
            logger.debug(
                f"Adding '{extracted_dir}' to cache "
                f"({TOOL_NAME},{resolved.version_spec}, {arch})"
            )
            self.tool_cache.cache_dir(
                extracted_dir, TOOL_NAME, resolved.version_spec, arch
            )

            return download_time, extraction_time

        finally:
            for path in (download_dir, extracted_dir):
                if path is not None:
                    _remove_temp(path, temp_dir)


def _log_progress(progress: DownloadProgress) -> None:
    logger.info(f"Downloading Flutter SDK: {progress}")


def _remove_temp(path: Path, temp_dir: Path) -> None:
    try:
        safe_rmtree(path, require_prefix=temp_dir)
    except OSError as e:
        logger.warning(f"Could not remove temporary directory {path}: {e}")


def publish_environment(agent: PipelineAgent, install_root: Path) -> Path:
    """
    Point FlutterToolPath at the SDK's bin directory.

    Returns:
        The published path
    """
    full_path = Path(install_root) / EXE_RELATIVE_PATH
    agent.debug(f"Set {TOOL_PATH_VARIABLE} with '{full_path}'")
    agent.set_variable(TOOL_PATH_VARIABLE, str(full_path))
    return full_path


def run_task(
    agent: PipelineAgent,
    config: InstallerConfig,
    installer: Optional[FlutterSdkInstaller] = None,
    arch: Optional[str] = None,
) -> TaskResult:
    """
    Run the install task and report its result to the agent.

    Args:
        agent: Pipeline agent providing inputs and receiving results
        config: Effective configuration
        installer: Installer to use (built from config if None)
        arch: Architecture token (detected if None)

    Returns:
        TaskResult.SUCCEEDED or TaskResult.FAILED
    """
    try:
        arch = arch or find_architecture()

        channel = agent.get_input("channel", required=True)
        version = agent.get_input("version", required=True)
        custom_version = agent.get_input("customVersion")

        installer = installer or FlutterSdkInstaller(config)
        resolved = installer.resolve(channel, version, custom_version, arch)
        result = installer.ensure_installed(resolved, arch)

        publish_environment(agent, result.tool_path)

    except Exception as e:
        logger.error(f"Flutter installation failed: {e}")
        logger.debug("Failure details", exc_info=True)
        agent.set_result(TaskResult.FAILED, str(e))
        return TaskResult.FAILED

    agent.set_result(TaskResult.SUCCEEDED, SUCCESS_MESSAGE)
    return TaskResult.SUCCEEDED


__all__ = [
    "TOOL_NAME",
    "EXE_RELATIVE_PATH",
    "TOOL_PATH_VARIABLE",
    "InstallResult",
    "FlutterSdkInstaller",
    "publish_environment",
    "run_task",
]
