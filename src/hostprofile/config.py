"""
Probe Configuration

All tunables of a profiling run live in one dataclass so that a caller (or
the CLI) can override them without touching module globals.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional


# Highest major version probed as a `<name>-<N>` suffixed executable.
# There is no reliable way to discover this, so bump it when a new major
# release of a toolchain ships.
LATEST_COMPILER_VERSIONS: Dict[str, int] = {
    'gcc': 15,
    'g++': 15,
    'clang': 20,
    'clang++': 20,
}

DEFAULT_CUDA_ROOT = Path('/usr/local/cuda')

_TRUTHY = {'1', 'true', 'yes', 'on'}


@dataclass
class ProbeConfig:
    """Configuration for a profiling run."""

    # Seconds allowed for any single external process
    command_timeout: float = 10.0

    # Upper bound (inclusive) of the suffixed-version scan per compiler family
    latest_compiler_versions: Dict[str, int] = field(
        default_factory=lambda: dict(LATEST_COMPILER_VERSIONS)
    )

    # Installation prefix probed for the CUDA toolkit
    cuda_root: Path = DEFAULT_CUDA_ROOT

    # Propagate the first probe failure instead of degrading to "unknown"
    strict: bool = False

    def latest_version(self, family: str) -> int:
        """Return the scan bound for a compiler family (0 disables suffix scanning)."""
        return self.latest_compiler_versions.get(family, 0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ProbeConfig':
        """
        Build a config from environment overrides.

        Recognized variables:
            HOSTPROFILE_COMMAND_TIMEOUT: seconds per external command
            HOSTPROFILE_CUDA_ROOT: CUDA prefix (falls back to CUDA_HOME, then CUDA_PATH)
            HOSTPROFILE_STRICT: "1"/"true" to enable strict mode
        """
        env = os.environ if environ is None else environ
        config = cls()

        timeout = env.get('HOSTPROFILE_COMMAND_TIMEOUT')
        if timeout:
            try:
                config.command_timeout = float(timeout)
            except ValueError:
                raise ValueError(f"HOSTPROFILE_COMMAND_TIMEOUT is not a number: {timeout!r}")

        cuda_root = env.get('HOSTPROFILE_CUDA_ROOT') or env.get('CUDA_HOME') or env.get('CUDA_PATH')
        if cuda_root:
            config.cuda_root = Path(cuda_root)

        strict = env.get('HOSTPROFILE_STRICT')
        if strict:
            config.strict = strict.strip().lower() in _TRUTHY

        return config
