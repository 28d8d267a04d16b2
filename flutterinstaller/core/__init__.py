"""
Core functionality for the Flutter installer.

This package contains the foundational modules the SDK installer depends on:
platform detection, downloads, archive extraction and the local tool cache.
"""

from .platform import (
    ARCH_MACOS,
    ARCH_LINUX,
    ARCH_WINDOWS,
    SUPPORTED_ARCHITECTURES,
    find_architecture,
)

from .tool_cache import ToolCache

from .exceptions import (
    ErrorKind,
    FlutterInstallerError,
    ManifestFetchError,
    NoMatchingReleaseError,
    DownloadError,
    ChecksumError,
    ExtractionError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
    CacheError,
    CacheLockTimeout,
    AgentEnvironmentError,
    InputRequiredError,
)

__all__ = [
    "ARCH_MACOS",
    "ARCH_LINUX",
    "ARCH_WINDOWS",
    "SUPPORTED_ARCHITECTURES",
    "find_architecture",
    "ToolCache",
    "ErrorKind",
    "FlutterInstallerError",
    "ManifestFetchError",
    "NoMatchingReleaseError",
    "DownloadError",
    "ChecksumError",
    "ExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "CacheError",
    "CacheLockTimeout",
    "AgentEnvironmentError",
    "InputRequiredError",
]
