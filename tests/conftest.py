"""
Shared fixtures for hostprofile tests.

FakeSystem is an in-memory SystemInterface: files, directories, executables,
command outputs and environment variables are plain dictionaries, so every
probe can be exercised against captured fixture text on any host.
"""

import errno
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

import pytest

from hostprofile.errors import CommandFailed
from hostprofile.logging import set_logger
from hostprofile.system import CommandResult, SystemInterface


CommandOutcome = Union[str, CommandResult, Exception]

FAMILIES = {
    'linux': ('posix', 'linux'),
    'macos': ('posix', 'darwin'),
    'freebsd': ('posix', 'freebsd14'),
    'windows': ('nt', 'win32'),
    'unknown': ('java', 'java'),
}


class FakeSystem(SystemInterface):
    """SystemInterface backed by dictionaries"""

    def __init__(
        self,
        family: Tuple[str, str] = FAMILIES['linux'],
        files: Optional[Dict[str, str]] = None,
        dirs: Iterable[str] = (),
        executables: Optional[Dict[str, str]] = None,
        commands: Optional[Dict[Tuple[str, Tuple[str, ...]], CommandOutcome]] = None,
        env: Optional[Dict[str, str]] = None,
        logical_cpus: int = 8,
        architecture: str = 'x86_64-pc-linux-gnu',
        release: str = '6.8.0-45-generic',
    ):
        self.family = family
        self.files = dict(files or {})
        self.dirs = set(dirs)
        self.executables = dict(executables or {})
        self.commands = dict(commands or {})
        self.env = dict(env or {})
        self.logical_cpus = logical_cpus
        self.architecture = architecture
        self.release = release
        self.calls = []

    def add_tool(self, name: str, args: Sequence[str], output: CommandOutcome,
                 returncode: int = 0, path: Optional[str] = None) -> 'FakeSystem':
        """Register an executable on the search path and the output of one invocation."""
        self.executables.setdefault(name, path or f"/usr/bin/{name}")
        if isinstance(output, str):
            output = CommandResult(stdout=output, returncode=returncode)
        self.commands[(name, tuple(args))] = output
        return self

    def run_command(self, name, args=()):
        key = (name, tuple(args))
        self.calls.append(key)
        if key not in self.commands:
            raise CommandFailed([name, *args], output='No such file or directory')
        outcome = self.commands[key]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, str):
            return CommandResult(stdout=outcome, returncode=0)
        return outcome

    def read_file(self, path):
        if path not in self.files:
            raise FileNotFoundError(errno.ENOENT, 'No such file or directory', path)
        return self.files[path]

    def path_exists(self, path):
        return path in self.files or path in self.dirs

    def find_executable(self, name):
        return self.executables.get(name)

    def get_env(self, name):
        return self.env.get(name)

    def logical_cpu_count(self):
        return self.logical_cpus

    def system_architecture(self):
        return self.architecture

    def os_family(self):
        return self.family

    def os_release(self):
        return self.release

    def python_version(self):
        return '3.11.9'

    def python_implementation(self):
        return 'CPython'


@pytest.fixture(autouse=True)
def reset_logger():
    """Give every test a fresh default logger."""
    set_logger(None)
    yield
    set_logger(None)


@pytest.fixture
def make_system():
    """Factory for FakeSystem; pass a platform name or a raw family pair."""
    def factory(platform: Union[str, Tuple[str, str]] = 'linux', **kwargs) -> FakeSystem:
        family = FAMILIES[platform] if isinstance(platform, str) else platform
        return FakeSystem(family=family, **kwargs)
    return factory
