"""
Flutter release manifest client.

Flutter publishes one JSON manifest per host architecture listing every
released SDK build and the current release hash of each channel:

    {
      "base_url": "https://storage.googleapis.com/flutter_infra_release/releases",
      "current_release": {"stable": "H1", "beta": "H2", "dev": "H3"},
      "releases": [
        {"hash": "H1", "channel": "stable", "version": "v2.5.0",
         "archive": "stable/linux/flutter_linux_2.5.0-stable.tar.xz",
         "sha256": "...", "release_date": "2021-09-08T..."},
        ...
      ]
    }
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException

from flutterinstaller.config.settings import DEFAULT_MANIFEST_BASE_URL
from flutterinstaller.core.exceptions import ManifestFetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SdkRelease:
    """One published SDK build for one architecture."""

    hash: str
    channel: str
    version: str
    archive: str
    sha256: str = ""
    release_date: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SdkRelease":
        """Build from a manifest entry; unknown keys are ignored."""
        return cls(
            hash=str(data.get("hash", "")),
            channel=str(data.get("channel", "")),
            version=str(data.get("version", "")),
            archive=str(data.get("archive", "")),
            sha256=str(data.get("sha256", "") or ""),
            release_date=str(data.get("release_date", "") or ""),
        )


@dataclass
class ReleaseManifest:
    """Parsed release manifest for one architecture."""

    base_url: str
    current_release: Dict[str, str] = field(default_factory=dict)
    releases: List[SdkRelease] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ReleaseManifest":
        """
        Build from the decoded manifest document.

        Raises:
            ManifestFetchError: If required keys are missing or mistyped
        """
        if not isinstance(data, dict):
            raise ManifestFetchError("Release manifest is not a JSON object")

        missing = [
            key for key in ("base_url", "current_release", "releases") if key not in data
        ]
        if missing:
            raise ManifestFetchError(
                f"Release manifest is missing keys: {', '.join(missing)}"
            )

        if not isinstance(data["current_release"], dict):
            raise ManifestFetchError("'current_release' must be an object")
        if not isinstance(data["releases"], list):
            raise ManifestFetchError("'releases' must be an array")

        return cls(
            base_url=str(data["base_url"]),
            current_release={
                str(channel): str(release_hash)
                for channel, release_hash in data["current_release"].items()
            },
            releases=[
                SdkRelease.from_dict(item)
                for item in data["releases"]
                if isinstance(item, dict)
            ],
        )

    def current_hash(self, channel: str) -> Optional[str]:
        """Current release hash for channel, None when the channel is unknown."""
        return self.current_release.get(channel)


def manifest_url(arch: str, base_url: str = DEFAULT_MANIFEST_BASE_URL) -> str:
    """
    URL of the release manifest for an architecture.

    Example:
        >>> manifest_url("linux", "https://example.com/releases")
        'https://example.com/releases/releases_linux.json'
    """
    return f"{base_url.rstrip('/')}/releases_{arch}.json"


def fetch_manifest(
    arch: str,
    base_url: str = DEFAULT_MANIFEST_BASE_URL,
    timeout: int = 60,
    session: Optional[requests.Session] = None,
) -> ReleaseManifest:
    """
    Fetch and parse the release manifest. A single attempt is made.

    Args:
        arch: Architecture token ('linux', 'macos', 'windows')
        base_url: Origin hosting releases_<arch>.json
        timeout: Request timeout in seconds
        session: Optional requests session

    Returns:
        Parsed ReleaseManifest

    Raises:
        ManifestFetchError: On network failure, HTTP error status or malformed JSON
    """
    url = manifest_url(arch, base_url)
    logger.debug(f"Finding latest version from '{url}'")

    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
    except RequestException as e:
        raise ManifestFetchError(f"Failed to fetch release manifest '{url}': {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise ManifestFetchError(f"Release manifest '{url}' is not valid JSON: {e}") from e

    manifest = ReleaseManifest.from_dict(data)
    logger.debug(
        f"Loaded {len(manifest.releases)} releases for {arch} "
        f"({len(manifest.current_release)} channels)"
    )
    return manifest


__all__ = ["SdkRelease", "ReleaseManifest", "manifest_url", "fetch_manifest"]
