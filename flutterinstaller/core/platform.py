"""
Host platform detection for the Flutter installer.

Flutter publishes one release manifest and one archive flavour per host
family, so the only thing we need from the host is which of the three
architecture tokens to use.

Usage:
    from flutterinstaller.core.platform import find_architecture

    arch = find_architecture()  # 'linux', 'macos' or 'windows'
"""

import platform
from typing import Optional

ARCH_MACOS = "macos"
ARCH_LINUX = "linux"
ARCH_WINDOWS = "windows"

SUPPORTED_ARCHITECTURES = (ARCH_MACOS, ARCH_LINUX, ARCH_WINDOWS)


def find_architecture(system: Optional[str] = None) -> str:
    """
    Map the host operating system to a Flutter architecture token.

    Args:
        system: OS name as reported by ``platform.system()``. Detected when None.

    Returns:
        'macos' for Darwin, 'linux' for Linux, 'windows' for anything else

    Example:
        >>> find_architecture("Darwin")
        'macos'
        >>> find_architecture("FreeBSD")
        'windows'
    """
    if system is None:
        system = platform.system()

    system = (system or "").lower()

    if system == "darwin":
        return ARCH_MACOS
    elif system == "linux":
        return ARCH_LINUX
    # Fallback, not a real Windows detection
    return ARCH_WINDOWS


__all__ = [
    "ARCH_MACOS",
    "ARCH_LINUX",
    "ARCH_WINDOWS",
    "SUPPORTED_ARCHITECTURES",
    "find_architecture",
]
