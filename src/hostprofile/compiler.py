"""
Compiler Discovery

Finds C/C++ compilers on the search path, runs each with --version and
classifies the banner:

- a GNU banner (Free Software Foundation copyright) is gcc / g++
- an "Apple clang version" banner is Apple's vendor fork of clang
- a "clang version" banner is upstream clang / clang++

The banner decides the toolchain, not the name it was found under: on macOS
`gcc` is Apple clang, and a `clang` symlink to GCC is still GCC.

Candidates per family are the unsuffixed name plus `<name>-1` ...
`<name>-N`, where N comes from ProbeConfig.latest_compiler_versions.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .config import ProbeConfig
from .errors import CommandFailed, handle_probe_error
from .logging import get_logger
from .os_type import OSType
from .system import SystemInterface
from .text import first_dotted_number, first_line


class CompilerKind(Enum):
    """Toolchain a compiler banner belongs to"""
    GCC = "gcc"
    GXX = "g++"
    CLANG = "clang"
    CLANGXX = "clang++"
    APPLE_CLANG = "apple_clang"
    APPLE_CLANGXX = "apple_clang++"
    UNKNOWN = "unknown"        # banner not recognized (or --version failed)
    UNDEFINED = "undefined"    # CC/CXX names an executable that does not exist


# Families scanned on the search path, and whether each is a C++ driver
PATH_FAMILIES: Dict[str, bool] = {
    'gcc': False,
    'g++': True,
    'clang': False,
    'clang++': True,
}

# macOS system compilers at fixed paths
APPLE_CLANG_PATHS: Dict[str, Tuple[str, bool]] = {
    'apple_clang': ('/usr/bin/clang', False),
    'apple_clang++': ('/usr/bin/clang++', True),
}

# Environment variables naming a compiler, and whether each is C++
COMPILER_ENV: Dict[str, Tuple[str, bool]] = {
    'cc_env': ('CC', False),
    'cxx_env': ('CXX', True),
}

FLAGS_ENV: Dict[str, str] = {
    'cflags_env': 'CFLAGS',
    'cxxflags_env': 'CXXFLAGS',
    'ldflags_env': 'LDFLAGS',
}

_GNU_COPYRIGHT = re.compile(r'Copyright \(C\) [0-9]+ Free Software Foundation, Inc\.')
_APPLE_CLANG = re.compile(r'Apple (?:clang|LLVM) version')
_CLANG = re.compile(r'clang version')


@dataclass
class CompilerRecord:
    """One compiler executable and what its banner says about it"""
    bin: str
    kind: CompilerKind
    version_banner: Optional[str] = None   # first line of --version output
    version_number: Optional[str] = None   # "11.4.0", None if unparseable

    def to_dict(self) -> Dict[str, Any]:
        return {
            'bin': self.bin,
            'kind': self.kind.value,
            'version_banner': self.version_banner,
            'version_number': self.version_number,
        }


@dataclass
class CompilerInventory:
    """All discovered compilers keyed by toolchain name, plus build flags"""
    toolchains: Dict[str, List[CompilerRecord]] = field(default_factory=dict)
    flags: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            name: [record.to_dict() for record in records]
            for name, records in self.toolchains.items()
        }
        d.update(self.flags)
        return d


def classify_banner(output: str, cxx: bool) -> Tuple[CompilerKind, str, Optional[str]]:
    """
    Classify `--version` output.

    Args:
        output: combined stdout/stderr of `<compiler> --version`
        cxx: whether the executable is expected to be a C++ driver

    Returns:
        (kind, banner, version_number)
    """
    banner = first_line(output)

    if _GNU_COPYRIGHT.search(output):
        kind = CompilerKind.GXX if cxx else CompilerKind.GCC
    elif _APPLE_CLANG.search(output):
        kind = CompilerKind.APPLE_CLANGXX if cxx else CompilerKind.APPLE_CLANG
        for line in output.split('\n'):
            if _APPLE_CLANG.search(line):
                banner = line.strip()
                break
    elif _CLANG.search(output):
        kind = CompilerKind.CLANGXX if cxx else CompilerKind.CLANG
    else:
        kind = CompilerKind.UNKNOWN

    return kind, banner, first_dotted_number(banner)


def candidate_executables(system: SystemInterface, name: str, latest_version: int) -> List[str]:
    """Resolve `name` and `name-1` .. `name-<latest_version>` to unique paths, in that order."""
    names = [name] + [f"{name}-{version}" for version in range(1, latest_version + 1)]
    found: List[str] = []
    for candidate in names:
        path = system.find_executable(candidate)
        if path is not None and path not in found:
            found.append(path)
    return found


def inspect_compiler(system: SystemInterface, path: str, cxx: bool,
                     config: Optional[ProbeConfig] = None) -> CompilerRecord:
    """Run one compiler with --version and build its record."""
    config = config or ProbeConfig()
    try:
        result = system.run_command(path, ['--version'])
    except CommandFailed as e:
        handle_probe_error(e, config.strict, f"compiler {path}")
        return CompilerRecord(bin=path, kind=CompilerKind.UNKNOWN)

    kind, banner, version = classify_banner(result.stdout, cxx)
    get_logger().debug(f"{path}: {kind.value} {version or '(no version)'}")
    return CompilerRecord(bin=path, kind=kind, version_banner=banner, version_number=version)


def discover_family(system: SystemInterface, family: str, config: ProbeConfig) -> List[CompilerRecord]:
    """All compilers of one search-path family (gcc, g++, clang, clang++)."""
    cxx = PATH_FAMILIES[family]
    paths = candidate_executables(system, family, config.latest_version(family))
    return [inspect_compiler(system, path, cxx, config) for path in paths]


def discover_apple_clang(system: SystemInterface, family: str, config: ProbeConfig) -> List[CompilerRecord]:
    exe, cxx = APPLE_CLANG_PATHS[family]
    path = system.find_executable(exe)
    if path is None:
        return []
    return [inspect_compiler(system, path, cxx, config)]


def discover_env_compiler(system: SystemInterface, variable: str, cxx: bool,
                          config: ProbeConfig) -> List[CompilerRecord]:
    """
    The compiler named by CC or CXX.

    Unset gives an empty list; a name that does not resolve gives a single
    record of kind UNDEFINED.
    """
    value = system.get_env(variable)
    if not value:
        return []
    path = system.find_executable(value)
    if path is None:
        get_logger().debug(f"{variable}={value} does not resolve to an executable")
        return [CompilerRecord(bin=value, kind=CompilerKind.UNDEFINED)]
    return [inspect_compiler(system, path, cxx, config)]


def probe_compilers(
    os_type: OSType,
    system: SystemInterface,
    config: Optional[ProbeConfig] = None,
) -> CompilerInventory:
    """Discover every compiler family and the compiler-related environment."""
    config = config or ProbeConfig()
    get_logger().section("Compilers", level=2)

    inventory = CompilerInventory()
    for family in PATH_FAMILIES:
        inventory.toolchains[family] = discover_family(system, family, config)

    if os_type == OSType.MACOS:
        for family in APPLE_CLANG_PATHS:
            inventory.toolchains[family] = discover_apple_clang(system, family, config)

    for key, (variable, cxx) in COMPILER_ENV.items():
        inventory.toolchains[key] = discover_env_compiler(system, variable, cxx, config)

    for key, variable in FLAGS_ENV.items():
        inventory.flags[key] = system.get_env(variable) or ''

    return inventory
