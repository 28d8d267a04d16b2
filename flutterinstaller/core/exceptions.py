"""
Centralized exception hierarchy for the Flutter installer.

Every failure the task can report belongs to exactly one ErrorKind, so
callers and tests can branch on the category instead of matching messages.
"""

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure categories reported by the installer."""

    MANIFEST_FETCH = "manifest_fetch"
    NO_MATCHING_RELEASE = "no_matching_release"
    DOWNLOAD = "download"
    EXTRACTION = "extraction"
    CACHE = "cache"
    ENVIRONMENT = "environment"


# ============================================================================
# Base Exceptions
# ============================================================================


class FlutterInstallerError(Exception):
    """Base exception for all installer errors."""

    kind: ErrorKind


# ============================================================================
# Release Catalog Exceptions
# ============================================================================


class ManifestFetchError(FlutterInstallerError):
    """Release manifest could not be fetched or parsed."""

    kind = ErrorKind.MANIFEST_FETCH


class NoMatchingReleaseError(FlutterInstallerError):
    """No release in the manifest matches the requested channel/version."""

    kind = ErrorKind.NO_MATCHING_RELEASE

    def __init__(
        self,
        channel: str,
        version: str,
        custom_version: str = "",
        current_hash=None,
    ):
        self.channel = channel
        self.version = version
        self.custom_version = custom_version
        self.current_hash = current_hash

        msg = f"No Flutter release found for channel '{channel}'"
        if custom_version and version != "latest":
            msg += f" with version 'v{custom_version}'"
        if current_hash is None:
            msg += " (channel has no current release)"
        else:
            msg += f" (current release hash {current_hash})"
        super().__init__(msg)


# ============================================================================
# Download Exceptions
# ============================================================================


class DownloadError(FlutterInstallerError):
    """Archive download failed."""

    kind = ErrorKind.DOWNLOAD


class ChecksumError(DownloadError):
    """Downloaded archive does not match the manifest checksum."""

    pass


# ============================================================================
# Extraction Exceptions
# ============================================================================


class ExtractionError(FlutterInstallerError):
    """Failed to extract an archive."""

    kind = ErrorKind.EXTRACTION


class UnsupportedArchiveFormat(ExtractionError):
    """Archive format cannot be handled on this host."""

    pass


class InsecureArchiveError(ExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Tool Cache Exceptions
# ============================================================================


class CacheError(FlutterInstallerError):
    """Tool cache could not store or return an installation."""

    kind = ErrorKind.CACHE


class CacheLockTimeout(CacheError):
    """Raised when a cache entry lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Agent Environment Exceptions
# ============================================================================


class AgentEnvironmentError(FlutterInstallerError):
    """A value the pipeline agent must provide is missing."""

    kind = ErrorKind.ENVIRONMENT


class InputRequiredError(AgentEnvironmentError):
    """Raised when a required task input is not supplied."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Input required: {name}")


__all__ = [
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
