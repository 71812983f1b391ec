"""
Host Profile Aggregation

Single entry point that classifies the platform once, runs every probe and
assembles the results into a ProfileReport.

Usage:
    from hostprofile import all_profile

    report = all_profile()

    print(f"CPU: {report.cpu.cpu_model}")
    print(f"Threads: {report.cpu.total_threads} ({report.cpu.hyper_threading.value})")
    print(report.to_dict()['compiler']['gcc'])
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .accelerator import CudaInfo, MetalInfo, probe_cuda, probe_metal
from .compiler import CompilerInventory, probe_compilers
from .config import ProbeConfig
from .cpu import CpuTopology, probe_cpu_topology
from .kernel import KernelIdentity, probe_kernel_identity
from .logging import get_logger
from .os_type import OSType, classify_os
from .system import HostSystem, SystemInterface


@dataclass
class RuntimeInfo:
    """Identity of the interpreter running the probes"""
    python_version: str
    python_implementation: str

    @classmethod
    def detect(cls, system: SystemInterface) -> 'RuntimeInfo':
        return cls(
            python_version=system.python_version(),
            python_implementation=system.python_implementation(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.python_version,
            'implementation': self.python_implementation,
        }


@dataclass
class ProfileReport:
    """Everything known about the host at one point in time"""
    os_type: OSType
    cpu: CpuTopology
    kernel: KernelIdentity
    compilers: CompilerInventory
    cuda: CudaInfo
    metal: MetalInfo
    runtime: RuntimeInfo

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the nested dictionary used for JSON/YAML output."""
        return {
            'cpu': self.cpu.to_dict(),
            'kernel': self.kernel.to_dict(),
            'compiler': self.compilers.to_dict(),
            'cuda': self.cuda.to_dict(),
            'metal': self.metal.to_dict(),
            'python': self.runtime.to_dict(),
        }


def all_profile(
    system: Optional[SystemInterface] = None,
    config: Optional[ProbeConfig] = None,
) -> ProfileReport:
    """
    Profile the host.

    Args:
        system: Environment to probe (default: the real host)
        config: Probe configuration (default: ProbeConfig())

    Returns:
        A complete ProfileReport; fields that could not be determined hold
        the "unknown" sentinel (or None for paths and versions).

    Raises:
        ProbeError: only when config.strict is set
    """
    config = config or ProbeConfig()
    system = system or HostSystem(config)
    log = get_logger()

    os_type = classify_os(system.os_family())
    log.section(f"Profiling host ({os_type.value})")

    report = ProfileReport(
        os_type=os_type,
        cpu=probe_cpu_topology(os_type, system, config),
        kernel=probe_kernel_identity(os_type, system, config),
        compilers=probe_compilers(os_type, system, config),
        cuda=probe_cuda(os_type, system, config),
        metal=probe_metal(os_type, system, config),
        runtime=RuntimeInfo.detect(system),
    )
    log.debug("Profiling complete")
    return report
