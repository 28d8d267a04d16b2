"""
Flutter SDK release resolution and installation.

Available Components:
--------------------
- ReleaseManifest / SdkRelease: parsed releases_<arch>.json
- select_release: picks the release for a channel/version request
- FlutterSdkInstaller: tool cache lookup with download/extract/cache on miss
- run_task: the complete pipeline task
"""

from .manifest import SdkRelease, ReleaseManifest, manifest_url, fetch_manifest
from .selector import LATEST, ResolvedSdk, select_release, strip_version_marker
from .installer import (
    TOOL_NAME,
    EXE_RELATIVE_PATH,
    TOOL_PATH_VARIABLE,
    InstallResult,
    FlutterSdkInstaller,
    publish_environment,
    run_task,
)

__all__ = [
    "SdkRelease",
    "ReleaseManifest",
    "manifest_url",
    "fetch_manifest",
    "LATEST",
    "ResolvedSdk",
    "select_release",
    "strip_version_marker",
    "TOOL_NAME",
    "EXE_RELATIVE_PATH",
    "TOOL_PATH_VARIABLE",
    "InstallResult",
    "FlutterSdkInstaller",
    "publish_environment",
    "run_task",
]
