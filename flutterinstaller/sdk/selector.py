"""
Release selection.

Picks exactly one SdkRelease from a manifest for a requested channel and
version, and derives the version spec used as the tool cache key.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from flutterinstaller.core.exceptions import NoMatchingReleaseError
from flutterinstaller.sdk.manifest import ReleaseManifest, SdkRelease

logger = logging.getLogger(__name__)

LATEST = "latest"
VERSION_MARKER = "v"


@dataclass(frozen=True)
class ResolvedSdk:
    """A selected release plus everything needed to fetch and cache it."""

    release: SdkRelease
    base_url: str
    sem_ver: str
    channel: str

    @property
    def version_spec(self) -> str:
        """Cache key, e.g. '2.5.0-stable'."""
        return f"{self.sem_ver}-{self.channel}"

    @property
    def download_url(self) -> str:
        return f"{self.base_url}/{self.release.archive}"

    @property
    def archive_name(self) -> str:
        return self.release.archive.rsplit("/", 1)[-1]


def strip_version_marker(version: str) -> str:
    """
    Drop the single leading marker character of a manifest version.

    Example:
        >>> strip_version_marker("v2.5.0")
        '2.5.0'
    """
    return version[1:]


def _find_release(
    manifest: ReleaseManifest, current_hash: Optional[str], version: Optional[str] = None
) -> Optional[SdkRelease]:
    # Manifest order is authoritative: first match wins
    for release in manifest.releases:
        if release.hash != current_hash:
            continue
        if version is not None and release.version != version:
            continue
        return release
    return None


def select_release(
    manifest: ReleaseManifest,
    channel: str,
    version: str,
    custom_version: str = "",
) -> ResolvedSdk:
    """
    Select the release to install.

    With version 'latest' or no custom version, the channel's current
    release is selected. Otherwise the current release must also carry the
    exact version 'v<custom_version>'.

    Args:
        manifest: Parsed release manifest
        channel: Release channel ('stable', 'beta', 'dev')
        version: Version mode; 'latest' or anything else for an explicit version
        custom_version: Explicit semantic version without marker, e.g. '2.5.0'

    Returns:
        ResolvedSdk for the selected release

    Raises:
        NoMatchingReleaseError: If no release matches
    """
    current_hash = manifest.current_hash(channel)
    logger.debug(f"Last version hash '{current_hash}'")

    if version == LATEST or custom_version == "":
        release = _find_release(manifest, current_hash)
    else:
        release = _find_release(
            manifest, current_hash, f"{VERSION_MARKER}{custom_version}"
        )

    if release is None:
        raise NoMatchingReleaseError(channel, version, custom_version, current_hash)

    sem_ver = custom_version or strip_version_marker(release.version)

    resolved = ResolvedSdk(
        release=release,
        base_url=manifest.base_url,
        sem_ver=sem_ver,
        channel=channel,
    )
    logger.info(f"Selected Flutter {resolved.version_spec} ({release.archive})")
    return resolved


__all__ = [
    "LATEST",
    "ResolvedSdk",
    "strip_version_marker",
    "select_release",
]
