"""
File system utilities for the Flutter installer.

This module provides the file operations the install task relies on:
- Archive extraction routed by file extension (zip, 7z, tar via external tool)
- Fresh uuid-named working directories under the agent temp directory
- Safe file operations (atomic writes, safe deletion)
"""

import logging
import os
import shutil
import stat
import subprocess
import tempfile
import uuid
import zipfile
from pathlib import Path
from typing import Callable, Union

import py7zr

from flutterinstaller.core.exceptions import (
    ExtractionError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"

Extractor = Callable[[Path, Path], Path]


class FilesystemError(OSError):
    """Base exception for low-level filesystem operations."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def create_extract_folder(temp_dir: Union[str, Path]) -> Path:
    """
    Create a fresh, uniquely named directory under temp_dir.

    Args:
        temp_dir: Parent directory (normally Agent.TempDirectory)

    Returns:
        Path to the new, empty directory
    """
    dest = Path(temp_dir) / str(uuid.uuid4())
    dest.mkdir(parents=True, exist_ok=False)
    return dest


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_zip(archive_path: Path, destination: Path) -> Path:
    """Extract a ZIP archive, restoring unix permission bits."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            # Links extracted so far may redirect later members
            _validate_archive_path(member.filename, destination)
            mode = member.external_attr >> 16

            if stat.S_ISLNK(mode) and not IS_WINDOWS:
                _extract_zip_symlink(zf, member, destination)
                continue

            extracted = zf.extract(member, destination)
            if not member.is_dir() and mode & 0o777 and not IS_WINDOWS:
                os.chmod(extracted, mode & 0o7777)

    return destination


def _extract_zip_symlink(
    zf: zipfile.ZipFile, member: zipfile.ZipInfo, destination: Path
) -> None:
    """
    Recreate a symlink stored in a ZIP archive (macOS SDK bundles use them).

    Raises:
        InsecureArchiveError: If the link points outside destination
    """
    target = zf.read(member).decode("utf-8")
    link_path = destination / member.filename

    resolved_target = (link_path.parent / target).resolve()
    if not is_relative_to(resolved_target, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive symlink '{member.filename}' points outside the extraction "
            f"directory ('{target}'). Extraction has been blocked."
        )

    link_path.parent.mkdir(parents=True, exist_ok=True)
    if link_path.is_symlink() or link_path.exists():
        link_path.unlink()
    os.symlink(target, link_path)


def extract_7z(archive_path: Path, destination: Path) -> Path:
    """Extract a .7z archive."""
    with py7zr.SevenZipFile(archive_path, "r") as archive:
        for member in archive.getnames():
            _validate_archive_path(member, destination)

        archive.extractall(path=destination)

    return destination


def extract_tar(archive_path: Path, destination: Path) -> Path:
    """
    Extract a tar archive (any compression) with the external tar tool.

    Raises:
        UnsupportedArchiveFormat: If no tar executable is on PATH
        ExtractionError: If tar exits with a non-zero status
    """
    tar = shutil.which("tar")
    if not tar:
        raise UnsupportedArchiveFormat(
            f"Extracting '{archive_path.name}' requires 'tar' on PATH"
        )

    cmd = [tar, "xf", str(archive_path), "-C", str(destination)]
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        raise ExtractionError(
            f"tar extraction of '{archive_path.name}' failed "
            f"(exit code {e.returncode}): {e.stderr.strip()}"
        ) from e

    return destination


def select_extractor(archive_name: str) -> Extractor:
    """
    Pick the extraction strategy for an archive file name.

    '.zip' and '.7z' have dedicated extractors; every other extension
    (.tar.xz, .tar.gz, ...) goes through the external tar tool.
    """
    name = archive_name.lower()

    if name.endswith(".zip"):
        return extract_zip
    elif name.endswith(".7z"):
        return extract_7z
    return extract_tar


def extract_archive(archive_path: Union[str, Path], temp_dir: Union[str, Path]) -> Path:
    """
    Extract an archive into a new directory under temp_dir.

    Args:
        archive_path: Path to the archive file
        temp_dir: Directory in which a fresh extraction folder is created

    Returns:
        Path to the directory holding the extracted content

    Raises:
        ExtractionError: If the archive is missing or extraction fails
        InsecureArchiveError: If the archive contains malicious paths

    On failure the extraction folder is removed again.

    Example:
        >>> extract_archive('/tmp/dl/flutter.zip', '/tmp')
        PosixPath('/tmp/8f3c.../')
    """
    archive_path = Path(archive_path)

    if not archive_path.exists():
        raise ExtractionError(f"Archive not found: {archive_path}")

    extractor = select_extractor(archive_path.name)
    destination = create_extract_folder(temp_dir)

    name = getattr(extractor, "__name__", repr(extractor))
    logger.debug(f"Extracting {archive_path.name} with {name}")

    try:
        return extractor(archive_path, destination)
    except ExtractionError:
        _discard_extract_folder(destination, temp_dir)
        raise
    except Exception as e:
        _discard_extract_folder(destination, temp_dir)
        raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _discard_extract_folder(destination: Path, temp_dir: Union[str, Path]) -> None:
    try:
        safe_rmtree(destination, require_prefix=temp_dir)
    except OSError as e:
        logger.warning(f"Could not remove extraction folder {destination}: {e}")


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never observed in a partially-written state.
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def safe_rmtree(path: Union[str, Path], require_prefix: Union[str, Path, None] = None) -> None:
    """
    Safely remove a directory tree.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


__all__ = [
    "FilesystemError",
    "is_relative_to",
    "create_extract_folder",
    "extract_zip",
    "extract_7z",
    "extract_tar",
    "select_extractor",
    "extract_archive",
    "atomic_write",
    "safe_rmtree",
]
