"""
Accelerator Discovery

CUDA (Linux only): the toolkit is present when a version marker exists
under the CUDA root, or when `nvidia-smi` runs. Version markers are tried
in order:
    1. <root>/version.txt   "CUDA Version 10.2.89"
    2. <root>/version.json  {"cuda": {"version": "12.4.131"}}
    3. nvidia-smi banner    "CUDA Version: 12.4"

Metal (macOS only): supported when any line of
`system_profiler SPDisplaysDataType` says so. Any failure means unsupported.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .config import ProbeConfig
from .errors import ProbeError
from .logging import get_logger
from .os_type import OSType
from .system import SystemInterface, command_output
from .text import first_match, split_trim


_CUDA_VERSION_TXT = r'CUDA Version (?P<version>[0-9.]+)'
_NVIDIA_SMI_CUDA = r'CUDA Version:\s*(?P<version>[0-9.]+)'
_METAL_SUPPORTED = r'Metal( Family)?: Supported|Metal Support: Metal'


@dataclass
class CudaInfo:
    """CUDA toolkit presence, version and install paths"""
    present: bool = False
    version: Optional[str] = None
    bin: Optional[str] = None
    include: Optional[str] = None
    lib: Optional[str] = None
    nvcc: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.present:
            return {'cuda': False}
        return {
            'cuda': True,
            'version': self.version,
            'bin': self.bin,
            'include': self.include,
            'lib': self.lib,
            'nvcc': self.nvcc,
        }


@dataclass
class MetalInfo:
    """Metal support on macOS"""
    present: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {'metal': self.present}


# =============================================================================
# CUDA
# =============================================================================

def parse_cuda_version_txt(text: str) -> Optional[str]:
    return first_match(_CUDA_VERSION_TXT, text, 'version')


def parse_cuda_version_json(text: str) -> Optional[str]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    cuda = data.get('cuda') if isinstance(data, dict) else None
    if isinstance(cuda, dict) and cuda.get('version'):
        return str(cuda['version'])
    return None


def parse_nvidia_smi_cuda(text: str) -> Optional[str]:
    return first_match(_NVIDIA_SMI_CUDA, text, 'version')


def _existing(system: SystemInterface, path: Path) -> Optional[str]:
    return str(path) if system.path_exists(str(path)) else None


def _cuda_marker_version(system: SystemInterface, root: Path) -> Optional[str]:
    """
    Version from the first CUDA marker found.

    Returns None when no marker exists; an empty string when a marker exists
    but carries no parseable version.
    """
    log = get_logger()
    markers = (
        (root / 'version.txt', parse_cuda_version_txt),
        (root / 'version.json', parse_cuda_version_json),
    )
    for path, parse in markers:
        try:
            text = system.read_file(str(path))
        except OSError:
            continue
        log.debug(f"CUDA marker: {path}")
        return parse(text) or ''

    try:
        output = command_output(system, 'nvidia-smi')
    except ProbeError as e:
        log.debug(f"nvidia-smi: {e}")
        return None
    return parse_nvidia_smi_cuda(output) or ''


def probe_cuda(os_type: OSType, system: SystemInterface, config: Optional[ProbeConfig] = None) -> CudaInfo:
    """Probe the CUDA toolkit (Linux only; every other platform reports absent)."""
    config = config or ProbeConfig()
    if os_type != OSType.LINUX:
        return CudaInfo()

    get_logger().section("CUDA", level=2)
    root = Path(config.cuda_root)
    version = _cuda_marker_version(system, root)
    if version is None:
        return CudaInfo()

    return CudaInfo(
        present=True,
        version=version or None,
        bin=_existing(system, root / 'bin'),
        include=_existing(system, root / 'include'),
        lib=_existing(system, root / 'lib64'),
        nvcc=system.find_executable(str(root / 'bin' / 'nvcc')),
    )


# =============================================================================
# Metal
# =============================================================================

def parse_metal_support(text: str) -> bool:
    return any(first_match(_METAL_SUPPORTED, line) is not None for line in split_trim(text))


def probe_metal(os_type: OSType, system: SystemInterface, config: Optional[ProbeConfig] = None) -> MetalInfo:
    """Probe Metal support (macOS only; every other platform reports absent)."""
    if os_type != OSType.MACOS:
        return MetalInfo()

    get_logger().section("Metal", level=2)
    try:
        output = command_output(system, 'system_profiler', ['SPDisplaysDataType'])
    except ProbeError as e:
        get_logger().debug(f"Metal: {e}; reporting unsupported")
        return MetalInfo()
    return MetalInfo(present=parse_metal_support(output))
