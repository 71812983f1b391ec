"""Tests for kernel / OS identity probes."""

import pytest

from hostprofile.config import ProbeConfig
from hostprofile.errors import LabelNotFound, SourceUnreadable, ToolNotFound
from hostprofile.kernel import (
    KernelIdentity,
    _KERNEL_PROBES,
    parse_issue,
    parse_os_release,
    probe_kernel_identity,
)
from hostprofile.os_type import OSType
from hostprofile.text import UNKNOWN

from hostprofile_samples import KERNEL_OSRELEASE, KERNEL_VERSION, OS_RELEASE_UBUNTU, SP_SOFTWARE


LINUX_FILES = {
    '/proc/sys/kernel/osrelease': KERNEL_OSRELEASE,
    '/proc/sys/kernel/version': KERNEL_VERSION,
    '/etc/os-release': OS_RELEASE_UBUNTU,
}


class TestOsRelease:

    def test_quotes_stripped(self):
        info = parse_os_release(OS_RELEASE_UBUNTU)
        assert info['PRETTY_NAME'] == 'Ubuntu 24.04.1 LTS'
        assert info['ID'] == 'ubuntu'
        assert info['HOME_URL'] == 'https://www.ubuntu.com/'

    def test_skips_comments_and_junk(self):
        info = parse_os_release('# comment\n\nNAME=Fedora\nnot a pair\n')
        assert info == {'NAME': 'Fedora'}

    def test_issue_escapes_removed(self):
        assert parse_issue("Ubuntu 22.04.4 LTS \\n \\l\n\n") == 'Ubuntu 22.04.4 LTS'

    def test_issue_empty(self):
        assert parse_issue("\n\n") is None


class TestProbeKernelIdentity:

    def test_every_platform_has_a_probe(self):
        assert set(_KERNEL_PROBES) == set(OSType)

    def test_linux(self, make_system):
        system = make_system('linux', files=LINUX_FILES)
        identity = probe_kernel_identity(OSType.LINUX, system)

        assert identity == KernelIdentity(
            os_type=OSType.LINUX,
            kernel_release='6.8.0-45-generic',
            kernel_version='#45-Ubuntu SMP PREEMPT_DYNAMIC Fri Aug 30 12:02:04 UTC 2024',
            system_version='Ubuntu 24.04.1 LTS',
        )

    def test_linux_each_field_degrades_alone(self, make_system):
        files = dict(LINUX_FILES)
        del files['/proc/sys/kernel/osrelease']
        system = make_system('linux', files=files)

        identity = probe_kernel_identity(OSType.LINUX, system)

        assert identity.kernel_release == UNKNOWN
        assert identity.kernel_version.startswith('#45-Ubuntu')
        assert identity.system_version == 'Ubuntu 24.04.1 LTS'

    def test_linux_issue_fallback(self, make_system):
        files = dict(LINUX_FILES)
        del files['/etc/os-release']
        files['/etc/issue'] = "Debian GNU/Linux 12 \\n \\l\n\n"
        system = make_system('linux', files=files)

        identity = probe_kernel_identity(OSType.LINUX, system)

        assert identity.system_version == 'Debian GNU/Linux 12'

    def test_linux_no_distribution_source(self, make_system):
        files = dict(LINUX_FILES)
        del files['/etc/os-release']
        system = make_system('linux', files=files)

        identity = probe_kernel_identity(OSType.LINUX, system)

        assert identity.system_version == UNKNOWN
        assert identity.kernel_release == '6.8.0-45-generic'

    def test_linux_strict(self, make_system):
        system = make_system('linux', files={'/etc/os-release': OS_RELEASE_UBUNTU})
        with pytest.raises(SourceUnreadable):
            probe_kernel_identity(OSType.LINUX, system, ProbeConfig(strict=True))

    def test_macos(self, make_system):
        system = make_system('macos')
        system.add_tool('uname', ['-r'], "20.6.0\n")
        system.add_tool('system_profiler', ['SPSoftwareDataType'], SP_SOFTWARE)

        identity = probe_kernel_identity(OSType.MACOS, system)

        assert identity.os_type == OSType.MACOS
        assert identity.kernel_release == '20.6.0'
        assert identity.kernel_version == 'Darwin 20.6.0'
        assert identity.system_version == 'macOS 11.5.2 (20G95)'

    def test_macos_uname_failure_uses_runtime_release(self, make_system):
        system = make_system('macos', release='22.3.0')
        system.add_tool('uname', ['-r'], "", returncode=1)

        identity = probe_kernel_identity(OSType.MACOS, system)

        assert identity.kernel_release == '22.3.0'
        assert identity.kernel_version == UNKNOWN
        assert identity.system_version == UNKNOWN

    @pytest.mark.parametrize("label,kept_field,kept_value,lost_field", [
        ("Kernel Version", 'system_version', 'macOS 11.5.2 (20G95)', 'kernel_version'),
        ("System Version", 'kernel_version', 'Darwin 20.6.0', 'system_version'),
    ])
    def test_macos_missing_one_label_degrades_alone(self, make_system, label, kept_field,
                                                    kept_value, lost_field):
        software = "\n".join(line for line in SP_SOFTWARE.split("\n") if label not in line)
        system = make_system('macos')
        system.add_tool('uname', ['-r'], "20.6.0\n")
        system.add_tool('system_profiler', ['SPSoftwareDataType'], software)

        identity = probe_kernel_identity(OSType.MACOS, system)

        assert identity.kernel_release == '20.6.0'
        assert getattr(identity, kept_field) == kept_value
        assert getattr(identity, lost_field) == UNKNOWN

    def test_macos_missing_label_strict(self, make_system):
        software = SP_SOFTWARE.replace("Kernel Version", "Kernel")
        system = make_system('macos')
        system.add_tool('uname', ['-r'], "20.6.0\n")
        system.add_tool('system_profiler', ['SPSoftwareDataType'], software)

        with pytest.raises(LabelNotFound):
            probe_kernel_identity(OSType.MACOS, system, ProbeConfig(strict=True))

    def test_macos_without_system_profiler(self, make_system):
        system = make_system('macos')
        system.add_tool('uname', ['-r'], "20.6.0\n")

        identity = probe_kernel_identity(OSType.MACOS, system)

        assert identity == KernelIdentity(os_type=OSType.MACOS, kernel_release='20.6.0')

    def test_macos_without_system_profiler_strict(self, make_system):
        system = make_system('macos')
        system.add_tool('uname', ['-r'], "20.6.0\n")

        with pytest.raises(ToolNotFound):
            probe_kernel_identity(OSType.MACOS, system, ProbeConfig(strict=True))

    def test_freebsd(self, make_system):
        system = make_system('freebsd')
        system.add_tool('uname', ['-r'], "14.0-RELEASE\n")
        system.add_tool('uname', ['-v'], "FreeBSD 14.0-RELEASE #0 releng/14.0-n265380-f9716eee8ab4: GENERIC\n")

        identity = probe_kernel_identity(OSType.FREEBSD, system)

        assert identity.kernel_release == '14.0-RELEASE'
        assert identity.kernel_version.startswith('FreeBSD 14.0-RELEASE #0')
        assert identity.system_version == '14.0-RELEASE'

    def test_freebsd_without_uname(self, make_system):
        identity = probe_kernel_identity(OSType.FREEBSD, make_system('freebsd'))
        assert identity == KernelIdentity(os_type=OSType.FREEBSD)

    @pytest.mark.parametrize("os_type", [OSType.WINDOWS, OSType.UNKNOWN])
    def test_unsupported_platforms(self, make_system, os_type):
        identity = probe_kernel_identity(os_type, make_system('windows'))

        assert identity.os_type == os_type
        assert identity.kernel_release == UNKNOWN
        assert identity.kernel_version == UNKNOWN
        assert identity.system_version == UNKNOWN
