"""
Platform Abstraction Layer

Everything the probes learn about the host goes through a SystemInterface:
running commands, reading files, locating executables, reading environment
variables and the runtime's self-reporting. HostSystem is the real
implementation; tests substitute an in-memory fake.
"""

import os
import platform
import shutil
import subprocess
import sys
import sysconfig
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import psutil

from .config import ProbeConfig
from .errors import CommandFailed, SourceUnreadable, ToolNotFound
from .logging import get_logger


@dataclass
class CommandResult:
    """Captured output of an external command (stderr merged into stdout)."""
    stdout: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class SystemInterface(ABC):
    """Read-only view of the host environment used by every probe."""

    @abstractmethod
    def run_command(self, name: str, args: Sequence[str] = ()) -> CommandResult:
        """
        Run an executable and capture its combined output.

        Raises:
            CommandFailed: the process could not be launched or timed out
        """

    @abstractmethod
    def read_file(self, path: str) -> str:
        """Read a text file. Raises OSError on failure."""

    @abstractmethod
    def path_exists(self, path: str) -> bool:
        """Return True if a file or directory exists at path."""

    @abstractmethod
    def find_executable(self, name: str) -> Optional[str]:
        """Resolve an executable name (or absolute path) to a path, or None."""

    @abstractmethod
    def get_env(self, name: str) -> Optional[str]:
        """Return an environment variable, or None if unset."""

    @abstractmethod
    def logical_cpu_count(self) -> int:
        """Logical CPUs visible to the runtime (always >= 1)."""

    @abstractmethod
    def system_architecture(self) -> str:
        """Raw architecture triple, e.g. "x86_64-pc-linux-gnu"."""

    @abstractmethod
    def os_family(self) -> Tuple[str, str]:
        """Raw (family, variant) pair, e.g. ("posix", "linux")."""

    @abstractmethod
    def os_release(self) -> str:
        """Kernel release as reported by the runtime."""

    @abstractmethod
    def python_version(self) -> str:
        """Version of the running interpreter."""

    @abstractmethod
    def python_implementation(self) -> str:
        """Implementation of the running interpreter (CPython, PyPy, ...)."""


class HostSystem(SystemInterface):
    """SystemInterface backed by the real machine."""

    def __init__(self, config: Optional[ProbeConfig] = None):
        self.config = config or ProbeConfig()

    def run_command(self, name: str, args: Sequence[str] = ()) -> CommandResult:
        cmd: List[str] = [name, *args]
        log = get_logger()
        log.debug(f"run: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                timeout=self.config.command_timeout,
                text=True,
                errors='replace',
            )
        except subprocess.TimeoutExpired:
            log.debug(f"timeout after {self.config.command_timeout}s: {' '.join(cmd)}")
            raise CommandFailed(cmd, output='Command timeout')
        except OSError as e:
            raise CommandFailed(cmd, output=str(e))
        return CommandResult(stdout=result.stdout, returncode=result.returncode)

    def read_file(self, path: str) -> str:
        get_logger().debug(f"read: {path}")
        return Path(path).read_text(errors='replace')

    def path_exists(self, path: str) -> bool:
        return Path(path).exists()

    def find_executable(self, name: str) -> Optional[str]:
        return shutil.which(name)

    def get_env(self, name: str) -> Optional[str]:
        return os.environ.get(name)

    def logical_cpu_count(self) -> int:
        return psutil.cpu_count(logical=True) or os.cpu_count() or 1

    def system_architecture(self) -> str:
        return sysconfig.get_config_var('HOST_GNU_TYPE') or platform.machine() or 'unknown'

    def os_family(self) -> Tuple[str, str]:
        return os.name, sys.platform

    def os_release(self) -> str:
        return platform.release()

    def python_version(self) -> str:
        return platform.python_version()

    def python_implementation(self) -> str:
        return platform.python_implementation()


def command_output(system: SystemInterface, name: str, args: Sequence[str] = ()) -> str:
    """
    Run a required tool and return its output.

    Raises:
        ToolNotFound: the executable is not on the search path
        CommandFailed: the process failed to launch or exited nonzero
    """
    if system.find_executable(name) is None:
        raise ToolNotFound(name)
    result = system.run_command(name, args)
    if not result.ok:
        raise CommandFailed([name, *args], result.returncode, result.stdout)
    return result.stdout


def read_source(system: SystemInterface, path: str) -> str:
    """
    Read a file-backed source.

    Raises:
        SourceUnreadable: the file is missing or cannot be read
    """
    try:
        return system.read_file(path)
    except OSError as e:
        raise SourceUnreadable(path, e.strerror or str(e))
