"""Trust store configuration and host platform detection."""

import sys
import tempfile
from dataclasses import dataclass, field
from typing import Optional, Union

from cert_store.exceptions import UnsupportedPlatformError
from cert_store.models import Platform

LINUX_CERT_DIR = "/usr/share/ca-certificates/extra/"
MAC_KEYCHAIN = "/Library/Keychains/System.keychain"

_PLATFORM_ALIASES = {
    "win32": Platform.WINDOWS,
    "windows": Platform.WINDOWS,
    "cygwin": Platform.WINDOWS,
    "darwin": Platform.MACOS,
    "macos": Platform.MACOS,
    "mac": Platform.MACOS,
    "linux": Platform.LINUX,
}


def detect_platform(sys_platform: Optional[str] = None) -> Platform:
    """
    Map ``sys.platform`` to a trust store family.

    Anything that is neither Windows nor macOS uses the directory convention.
    """
    value = (sys_platform or sys.platform).lower()
    if value.startswith("win") or value == "cygwin":
        return Platform.WINDOWS
    if value == "darwin":
        return Platform.MACOS
    return Platform.LINUX


def parse_platform(value: Union[str, Platform]) -> Platform:
    """Parse a platform name given by a caller (e.g. on the command line)."""
    if isinstance(value, Platform):
        return value
    try:
        return _PLATFORM_ALIASES[value.strip().lower()]
    except KeyError:
        raise UnsupportedPlatformError(
            f"Unknown platform '{value}'. Available: {', '.join(sorted(_PLATFORM_ALIASES))}"
        ) from None


@dataclass
class TrustStoreConfig:
    """Settings shared by the facade and the backends."""

    platform: Platform = field(default_factory=detect_platform)
    linux_cert_dir: str = LINUX_CERT_DIR
    keychain_path: str = MAC_KEYCHAIN
    temp_dir: str = field(default_factory=tempfile.gettempdir)
