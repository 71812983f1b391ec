"""
Host Profile

Queries the host for CPU topology, kernel/OS identity, C/C++ compilers and
GPU compute toolkits (CUDA, Metal), normalizing platform-specific sources
into one ProfileReport.

Usage:
    from hostprofile import all_profile

    report = all_profile()
    print(report.to_dict())
"""

from .accelerator import CudaInfo, MetalInfo, probe_cuda, probe_metal
from .compiler import (
    CompilerInventory,
    CompilerKind,
    CompilerRecord,
    classify_banner,
    probe_compilers,
)
from .config import LATEST_COMPILER_VERSIONS, ProbeConfig
from .cpu import CpuTopology, HyperThreading, probe_cpu_topology
from .errors import (
    CommandFailed,
    LabelNotFound,
    MissingField,
    ParseFailure,
    ProbeError,
    SourceUnreadable,
    ToolNotFound,
)
from .kernel import KernelIdentity, probe_kernel_identity
from .os_type import OSType, classify_os
from .profile import ProfileReport, RuntimeInfo, all_profile
from .system import CommandResult, HostSystem, SystemInterface
from .text import UNKNOWN

__version__ = "0.1.0"

__all__ = [
    # Entry point
    'all_profile',
    'ProfileReport',
    'RuntimeInfo',
    # Records
    'CpuTopology',
    'HyperThreading',
    'KernelIdentity',
    'CompilerInventory',
    'CompilerKind',
    'CompilerRecord',
    'CudaInfo',
    'MetalInfo',
    'OSType',
    'UNKNOWN',
    # Probes
    'classify_os',
    'classify_banner',
    'probe_cpu_topology',
    'probe_kernel_identity',
    'probe_compilers',
    'probe_cuda',
    'probe_metal',
    # Environment
    'SystemInterface',
    'HostSystem',
    'CommandResult',
    'ProbeConfig',
    'LATEST_COMPILER_VERSIONS',
    # Errors
    'ProbeError',
    'ToolNotFound',
    'CommandFailed',
    'MissingField',
    'LabelNotFound',
    'ParseFailure',
    'SourceUnreadable',
]
