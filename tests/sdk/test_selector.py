"""
Tests for release selection.
"""

import pytest

from flutterinstaller.core.exceptions import ErrorKind, NoMatchingReleaseError
from flutterinstaller.sdk.manifest import ReleaseManifest
from flutterinstaller.sdk.selector import (
    LATEST,
    ResolvedSdk,
    select_release,
    strip_version_marker,
)
from tests.fixtures.sdk import BASE_URL


def test_strip_version_marker():
    assert strip_version_marker("v2.5.0") == "2.5.0"
    assert strip_version_marker("v2.6.0-0.1.pre") == "2.6.0-0.1.pre"


class TestSelectLatest:
    """version == 'latest' selects the channel's current release."""

    def test_stable(self, release_manifest):
        resolved = select_release(release_manifest, "stable", LATEST)

        assert resolved.release.hash == "H1"
        assert resolved.sem_ver == "2.5.0"
        assert resolved.version_spec == "2.5.0-stable"
        assert resolved.download_url == f"{BASE_URL}/a.zip"
        assert resolved.archive_name == "a.zip"

    def test_beta(self, release_manifest):
        resolved = select_release(release_manifest, "beta", LATEST)

        assert resolved.version_spec == "2.5.0-5.3.pre-beta"

    def test_empty_custom_version_behaves_as_latest(self, release_manifest):
        resolved = select_release(release_manifest, "dev", "custom", "")

        assert resolved.release.hash == "H3"

    def test_custom_version_used_for_spec_with_latest(self, release_manifest):
        resolved = select_release(release_manifest, "stable", LATEST, "2.5.0+hotfix")

        assert resolved.release.hash == "H1"
        assert resolved.version_spec == "2.5.0+hotfix-stable"

    def test_unknown_channel(self, release_manifest):
        with pytest.raises(NoMatchingReleaseError, match="channel 'master'") as exc_info:
            select_release(release_manifest, "master", LATEST)

        assert exc_info.value.kind is ErrorKind.NO_MATCHING_RELEASE

    def test_deterministic(self, release_manifest):
        first = select_release(release_manifest, "stable", LATEST)
        second = select_release(release_manifest, "stable", LATEST)

        assert first == second


class TestSelectExplicitVersion:
    """An explicit version must match the current release exactly."""

    def test_current_release_matches(self, release_manifest):
        resolved = select_release(release_manifest, "stable", "custom", "2.5.0")

        assert resolved.release.hash == "H1"
        assert resolved.version_spec == "2.5.0-stable"

    def test_older_release_is_not_selected(self, release_manifest):
        with pytest.raises(NoMatchingReleaseError):
            select_release(release_manifest, "stable", "custom", "2.2.3")

    def test_version_mismatch(self, release_manifest):
        with pytest.raises(NoMatchingReleaseError, match="9.9.9"):
            select_release(release_manifest, "stable", "custom", "9.9.9")


def test_first_match_in_manifest_order_wins(manifest_data):
    """Test duplicate hashes resolve to the earliest manifest entry."""
    manifest_data["releases"].insert(
        0,
        {
            "hash": "H1",
            "channel": "stable",
            "version": "v2.5.0",
            "archive": "first.zip",
        },
    )
    manifest = ReleaseManifest.from_dict(manifest_data)

    resolved = select_release(manifest, "stable", LATEST)

    assert resolved.release.archive == "first.zip"
    assert isinstance(resolved, ResolvedSdk)
