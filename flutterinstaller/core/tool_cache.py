"""
Local tool cache for downloaded SDK installations.

Installations are addressed by (tool name, version spec, architecture) and
laid out the same way the pipeline agent's own tool library does it:

    <root>/<name>/<version_spec>/<arch>/          installation
    <root>/<name>/<version_spec>/<arch>.complete  marker written last

An entry without its marker is treated as absent, so a half-copied
installation left behind by a crashed run is never returned. Stores are
serialized across processes with a per-entry file lock.
"""

import logging
import shutil
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from filelock import FileLock, Timeout

from flutterinstaller.core.exceptions import CacheError, CacheLockTimeout
from flutterinstaller.core.filesystem import atomic_write, safe_rmtree

logger = logging.getLogger(__name__)


class ToolCache:
    """
    Directory-backed cache of tool installations.

    Example:
        >>> cache = ToolCache(Path('/opt/hostedtoolcache'))
        >>> cache.find_local_tool('Flutter', '3.0.0-stable', 'linux')
        >>> cache.cache_dir(Path('/tmp/extract'), 'Flutter', '3.0.0-stable', 'linux')
        PosixPath('/opt/hostedtoolcache/Flutter/3.0.0-stable/linux')
    """

    def __init__(self, root: Union[str, Path], lock_timeout: int = 300):
        """
        Initialize tool cache.

        Args:
            root: Cache root directory (created on first store)
            lock_timeout: Timeout in seconds for acquiring an entry lock
        """
        self.root = Path(root)
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized tool cache at {self.root}")

    def entry_path(self, name: str, version_spec: str, arch: str) -> Path:
        """Installation directory for an entry."""
        return self.root / name / version_spec / arch

    def marker_path(self, name: str, version_spec: str, arch: str) -> Path:
        """Completion marker for an entry."""
        return self.root / name / version_spec / f"{arch}.complete"

    @contextmanager
    def _lock(self, name: str, version_spec: str, arch: str):
        """
        Acquire the exclusive lock for one cache entry.

        Raises:
            CacheLockTimeout: If lock cannot be acquired within timeout
        """
        lock_path = self.root / name / version_spec / f"{arch}.lock"
        lock_path.parent.mkdir(parents=True, exist_ok=True)

        lock = FileLock(lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                logger.debug(f"Acquired cache lock: {lock_path}")
                yield
            logger.debug(f"Released cache lock: {lock_path}")

        except Timeout as e:
            raise CacheLockTimeout(
                f"Could not acquire cache lock {lock_path} within "
                f"{self.lock_timeout} seconds"
            ) from e

    def find_local_tool(
        self, name: str, version_spec: str, arch: str
    ) -> Optional[Path]:
        """
        Look up a completed installation.

        Returns:
            Installation path, or None on a cache miss
        """
        path = self.entry_path(name, version_spec, arch)

        if path.is_dir() and self.marker_path(name, version_spec, arch).is_file():
            logger.debug(f"Found tool in cache {name} {version_spec} {arch}")
            return path

        logger.debug(f"Tool not in cache: {name} {version_spec} {arch}")
        return None

    def cache_dir(
        self, source_dir: Union[str, Path], name: str, version_spec: str, arch: str
    ) -> Path:
        """
        Copy an extracted directory into the cache and mark it complete.

        Any stale, incomplete entry for the same key is replaced.

        Args:
            source_dir: Directory holding the extracted tool
            name: Tool name
            version_spec: Version key
            arch: Architecture token

        Returns:
            Path to the cached installation

        Raises:
            CacheError: If the source is missing or copying fails
            CacheLockTimeout: If another process holds the entry too long
        """
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise CacheError(f"Source directory not found: {source_dir}")

        dest = self.entry_path(name, version_spec, arch)
        marker = self.marker_path(name, version_spec, arch)

        logger.info(f"Caching tool {name} {version_spec} {arch}")

        with self._lock(name, version_spec, arch):
            try:
                marker.unlink(missing_ok=True)
                if dest.exists():
                    safe_rmtree(dest, require_prefix=self.root)

                shutil.copytree(source_dir, dest, symlinks=True)
                atomic_write(marker, datetime.now().isoformat())

            except (OSError, ValueError) as e:
                raise CacheError(
                    f"Failed to cache {name} {version_spec} {arch}: {e}"
                ) from e

        return dest

    def list_versions(self, name: str, arch: str) -> List[str]:
        """
        Version specs with a completed installation for arch.

        Example:
            >>> cache.list_versions('Flutter', 'linux')
            ['2.5.0-stable', '3.0.0-stable']
        """
        tool_root = self.root / name
        if not tool_root.is_dir():
            return []

        return sorted(
            version_dir.name
            for version_dir in tool_root.iterdir()
            if version_dir.is_dir()
            and self.find_local_tool(name, version_dir.name, arch) is not None
        )


__all__ = ["ToolCache"]
