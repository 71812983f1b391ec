"""Platform classifier: map the runtime's raw OS identity to a closed set of tags."""

from enum import Enum
from typing import Tuple


class OSType(Enum):
    """Host platform tag"""
    LINUX = "linux"
    MACOS = "macos"
    FREEBSD = "freebsd"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


def classify_os(family: Tuple[str, str]) -> OSType:
    """
    Classify a raw (family, variant) pair.

    The pair is what SystemInterface.os_family() returns, i.e. ``os.name``
    and ``sys.platform``. Unrecognized combinations map to OSType.UNKNOWN.

    Examples:
        >>> classify_os(('posix', 'linux'))
        <OSType.LINUX: 'linux'>
        >>> classify_os(('posix', 'freebsd13'))
        <OSType.FREEBSD: 'freebsd'>
    """
    name, variant = family
    name = (name or '').lower()
    variant = (variant or '').lower()

    if name == 'nt' or variant in ('win32', 'win64'):
        return OSType.WINDOWS
    if name != 'posix':
        return OSType.UNKNOWN
    if variant.startswith('linux'):
        return OSType.LINUX
    if variant == 'darwin':
        return OSType.MACOS
    if variant.startswith('freebsd'):
        return OSType.FREEBSD
    return OSType.UNKNOWN
