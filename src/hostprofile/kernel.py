"""
Kernel / OS Identity Probes

- Linux: /proc/sys/kernel/{osrelease,version} and PRETTY_NAME from
  /etc/os-release (first line of /etc/issue as a fallback)
- macOS: `uname -r` and `system_profiler SPSoftwareDataType`
- FreeBSD: `uname -r` / `uname -v`
- Windows / unknown: all fields unknown

Each field degrades on its own: one unreadable source never blanks the others.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .config import ProbeConfig
from .errors import ProbeError, handle_probe_error
from .logging import get_logger
from .os_type import OSType
from .system import SystemInterface, command_output, read_source
from .text import UNKNOWN, find_label_value, split_trim


OS_RELEASE = '/etc/os-release'
ETC_ISSUE = '/etc/issue'
PROC_OSRELEASE = '/proc/sys/kernel/osrelease'
PROC_VERSION = '/proc/sys/kernel/version'

# getty escapes such as \n, \l, \r in /etc/issue
_ISSUE_ESCAPE = re.compile(r'\\[a-zA-Z]')


@dataclass
class KernelIdentity:
    """Kernel and OS distribution identity"""
    os_type: OSType
    kernel_release: str = UNKNOWN   # "6.8.0-90-generic", "20.6.0"
    kernel_version: str = UNKNOWN   # "#1 SMP PREEMPT_DYNAMIC ...", "Darwin 20.6.0"
    system_version: str = UNKNOWN   # "Ubuntu 24.04.1 LTS", "macOS 11.5.2 (20G95)"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'os_type': self.os_type.value,
            'kernel_release': self.kernel_release,
            'kernel_version': self.kernel_version,
            'system_version': self.system_version,
        }


def parse_os_release(text: str) -> Dict[str, str]:
    """
    Parse /etc/os-release style ``KEY="VALUE"`` lines.

    Surrounding quotes are stripped; blank lines, comments and lines without
    '=' are skipped.
    """
    info = {}
    for line in text.split('\n'):
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        info[key.strip()] = value.strip().strip('"').strip("'")
    return info


def parse_issue(text: str) -> Optional[str]:
    """First non-empty line of /etc/issue with getty escapes removed."""
    for line in text.split('\n'):
        line = _ISSUE_ESCAPE.sub('', line).strip()
        if line:
            return line
    return None


def _field(config: ProbeConfig, context: str, read: Callable[[], str]) -> str:
    """Evaluate one field source, degrading it alone on failure."""
    try:
        return read()
    except ProbeError as e:
        handle_probe_error(e, config.strict, context)
        return UNKNOWN


def _linux_system_version(system: SystemInterface) -> str:
    log = get_logger()
    try:
        pretty_name = parse_os_release(read_source(system, OS_RELEASE)).get('PRETTY_NAME')
        if pretty_name:
            return pretty_name
        log.debug(f"{OS_RELEASE}: no PRETTY_NAME; trying {ETC_ISSUE}")
    except ProbeError as e:
        log.debug(f"{e}; trying {ETC_ISSUE}")

    issue = parse_issue(read_source(system, ETC_ISSUE))
    if issue is None:
        return UNKNOWN
    return issue


def _probe_kernel_linux(system: SystemInterface, config: ProbeConfig) -> KernelIdentity:
    return KernelIdentity(
        os_type=OSType.LINUX,
        kernel_release=_field(config, 'kernel release',
                              lambda: read_source(system, PROC_OSRELEASE).strip()),
        kernel_version=_field(config, 'kernel version',
                              lambda: read_source(system, PROC_VERSION).strip()),
        system_version=_field(config, 'system version',
                              lambda: _linux_system_version(system)),
    )


def _macos_kernel_release(system: SystemInterface) -> str:
    try:
        return command_output(system, 'uname', ['-r']).strip()
    except ProbeError as e:
        get_logger().debug(f"uname -r: {e}; using runtime OS release")
        return system.os_release()


def _probe_kernel_macos(system: SystemInterface, config: ProbeConfig) -> KernelIdentity:
    identity = KernelIdentity(
        os_type=OSType.MACOS,
        kernel_release=_field(config, 'kernel release',
                              lambda: _macos_kernel_release(system)),
    )
    try:
        lines = split_trim(command_output(system, 'system_profiler', ['SPSoftwareDataType']))
    except ProbeError as e:
        handle_probe_error(e, config.strict, 'system_profiler SPSoftwareDataType')
        return identity
    identity.kernel_version = _field(config, 'kernel version',
                                     lambda: find_label_value(lines, 'Kernel Version'))
    identity.system_version = _field(config, 'system version',
                                     lambda: find_label_value(lines, 'System Version'))
    return identity


def _probe_kernel_freebsd(system: SystemInterface, config: ProbeConfig) -> KernelIdentity:
    release = _field(config, 'kernel release',
                     lambda: command_output(system, 'uname', ['-r']).strip())
    return KernelIdentity(
        os_type=OSType.FREEBSD,
        kernel_release=release,
        kernel_version=_field(config, 'kernel version',
                              lambda: command_output(system, 'uname', ['-v']).strip()),
        system_version=release,
    )


def _probe_kernel_unknown(os_type: OSType) -> Callable[[SystemInterface, ProbeConfig], KernelIdentity]:
    def probe(system: SystemInterface, config: ProbeConfig) -> KernelIdentity:
        return KernelIdentity(os_type=os_type)
    return probe


_KERNEL_PROBES: Dict[OSType, Callable[[SystemInterface, ProbeConfig], KernelIdentity]] = {
    OSType.LINUX: _probe_kernel_linux,
    OSType.MACOS: _probe_kernel_macos,
    OSType.FREEBSD: _probe_kernel_freebsd,
    OSType.WINDOWS: _probe_kernel_unknown(OSType.WINDOWS),
    OSType.UNKNOWN: _probe_kernel_unknown(OSType.UNKNOWN),
}


def probe_kernel_identity(
    os_type: OSType,
    system: SystemInterface,
    config: Optional[ProbeConfig] = None,
) -> KernelIdentity:
    """
    Probe kernel and OS identity for a platform.

    Raises:
        ProbeError: only when config.strict is set
    """
    config = config or ProbeConfig()
    get_logger().section(f"Kernel identity ({os_type.value})", level=2)
    return _KERNEL_PROBES[os_type](system, config)
