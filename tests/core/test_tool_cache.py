"""
Unit tests for the local tool cache.
"""

from unittest.mock import patch

import pytest
from filelock import Timeout

from flutterinstaller.core.exceptions import CacheError, CacheLockTimeout, ErrorKind
from flutterinstaller.core.tool_cache import ToolCache


@pytest.fixture
def extracted_sdk(tmp_path):
    """Directory shaped like an extracted Flutter archive."""
    root = tmp_path / "extracted"
    (root / "flutter" / "bin").mkdir(parents=True)
    (root / "flutter" / "bin" / "flutter").write_text("#!/bin/sh\n")
    return root


@pytest.fixture
def cache(tmp_path):
    return ToolCache(tmp_path / "cache", lock_timeout=1)


class TestLayout:
    """Cache entry addressing."""

    def test_entry_path(self, cache):
        assert cache.entry_path("Flutter", "2.5.0-stable", "linux") == (
            cache.root / "Flutter" / "2.5.0-stable" / "linux"
        )

    def test_marker_path(self, cache):
        assert cache.marker_path("Flutter", "2.5.0-stable", "linux") == (
            cache.root / "Flutter" / "2.5.0-stable" / "linux.complete"
        )


class TestFindLocalTool:
    """Cache lookups."""

    def test_miss_on_empty_cache(self, cache):
        assert cache.find_local_tool("Flutter", "2.5.0-stable", "linux") is None

    def test_hit_after_store(self, cache, extracted_sdk):
        stored = cache.cache_dir(extracted_sdk, "Flutter", "2.5.0-stable", "linux")

        found = cache.find_local_tool("Flutter", "2.5.0-stable", "linux")

        assert found == stored
        assert (found / "flutter" / "bin" / "flutter").is_file()

    def test_entry_without_marker_is_a_miss(self, cache):
        """Test a half-copied installation is never returned."""
        cache.entry_path("Flutter", "2.5.0-stable", "linux").mkdir(parents=True)

        assert cache.find_local_tool("Flutter", "2.5.0-stable", "linux") is None

    def test_keys_are_isolated(self, cache, extracted_sdk):
        cache.cache_dir(extracted_sdk, "Flutter", "2.5.0-stable", "linux")

        assert cache.find_local_tool("Flutter", "2.5.0-beta", "linux") is None
        assert cache.find_local_tool("Flutter", "2.5.0-stable", "macos") is None
        assert cache.find_local_tool("Dart", "2.5.0-stable", "linux") is None


class TestCacheDir:
    """Storing installations."""

    def test_writes_marker(self, cache, extracted_sdk):
        cache.cache_dir(extracted_sdk, "Flutter", "2.5.0-stable", "linux")

        assert cache.marker_path("Flutter", "2.5.0-stable", "linux").is_file()

    def test_source_is_left_in_place(self, cache, extracted_sdk):
        cache.cache_dir(extracted_sdk, "Flutter", "2.5.0-stable", "linux")

        assert (extracted_sdk / "flutter" / "bin" / "flutter").exists()

    def test_replaces_stale_entry(self, cache, extracted_sdk):
        stale = cache.entry_path("Flutter", "2.5.0-stable", "linux")
        stale.mkdir(parents=True)
        (stale / "leftover").write_text("partial")

        cache.cache_dir(extracted_sdk, "Flutter", "2.5.0-stable", "linux")

        assert not (stale / "leftover").exists()
        assert (stale / "flutter" / "bin" / "flutter").exists()

    def test_missing_source(self, cache, tmp_path):
        with pytest.raises(CacheError, match="Source directory not found") as exc_info:
            cache.cache_dir(tmp_path / "nope", "Flutter", "2.5.0-stable", "linux")

        assert exc_info.value.kind is ErrorKind.CACHE

    def test_copy_failure_raises_cache_error(self, cache, extracted_sdk):
        with patch(
            "flutterinstaller.core.tool_cache.shutil.copytree",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(CacheError, match="disk full"):
                cache.cache_dir(extracted_sdk, "Flutter", "2.5.0-stable", "linux")

        assert cache.find_local_tool("Flutter", "2.5.0-stable", "linux") is None

    def test_lock_timeout(self, cache, extracted_sdk):
        with patch(
            "flutterinstaller.core.tool_cache.FileLock.acquire",
            side_effect=Timeout("lockfile"),
        ):
            with pytest.raises(CacheLockTimeout, match="Could not acquire cache lock"):
                cache.cache_dir(extracted_sdk, "Flutter", "2.5.0-stable", "linux")


class TestListVersions:
    """Listing cached versions."""

    def test_empty(self, cache):
        assert cache.list_versions("Flutter", "linux") == []

    def test_lists_completed_entries_only(self, cache, extracted_sdk):
        cache.cache_dir(extracted_sdk, "Flutter", "2.5.0-stable", "linux")
        cache.cache_dir(extracted_sdk, "Flutter", "2.2.3-stable", "linux")
        cache.entry_path("Flutter", "2.6.0-beta", "linux").mkdir(parents=True)

        assert cache.list_versions("Flutter", "linux") == [
            "2.2.3-stable",
            "2.5.0-stable",
        ]
        assert cache.list_versions("Flutter", "macos") == []
