"""
CPU Topology Probes

Normalizes platform-specific CPU data into one CpuTopology record:
- Linux: /proc/cpuinfo records
- macOS: `system_profiler SPHardwareDataType` text
- FreeBSD: `sysctl` key lookups
- Windows / unknown: everything unknown except the logical thread count,
  which the runtime can always report

Parsers (parse_*) are pure functions over text and raise ProbeError
subclasses. The dispatcher probe_cpu_topology() applies the degradation
policy: a failed probe yields CpuTopology.unknown().
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .config import ProbeConfig
from .errors import LabelNotFound, MissingField, ParseFailure, ProbeError, handle_probe_error
from .logging import get_logger
from .os_type import OSType
from .system import SystemInterface, command_output, read_source
from .text import UNKNOWN, find_label_line, find_label_value, first_integer, split_trim, to_int


CountOrUnknown = Union[int, str]

PROC_CPUINFO = '/proc/cpuinfo'

# `key<TAB...>: value` inside a /proc/cpuinfo record
_CPUINFO_SEPARATOR = re.compile(r'\t+: ?')
_BLANK_LINE = re.compile(r'\n[ \t]*\n')


class HyperThreading(Enum):
    """Simultaneous multi-threading state"""
    ENABLED = "enabled"
    DISABLED = "disabled"
    UNKNOWN = "unknown"


@dataclass
class CpuTopology:
    """
    Uniform CPU topology record.

    Count fields hold an int or the UNKNOWN sentinel. total_threads is always
    an int. When every field is known:
        total_cores   == cores_per_processor   * num_processors
        total_threads == threads_per_processor * num_processors
        hyper_threading is ENABLED iff total_threads > total_cores
    """
    cpu_type: str
    cpu_model: str
    cpu_models: Union[List[str], str]
    num_processors: CountOrUnknown
    cores_per_processor: CountOrUnknown
    total_cores: CountOrUnknown
    threads_per_processor: CountOrUnknown
    total_threads: int
    hyper_threading: HyperThreading

    @classmethod
    def unknown(cls, cpu_type: str, total_threads: int) -> 'CpuTopology':
        """Record for a platform (or failed probe) with no topology data."""
        return cls(
            cpu_type=cpu_type,
            cpu_model=UNKNOWN,
            cpu_models=UNKNOWN,
            num_processors=UNKNOWN,
            cores_per_processor=UNKNOWN,
            total_cores=UNKNOWN,
            threads_per_processor=UNKNOWN,
            total_threads=total_threads,
            hyper_threading=HyperThreading.UNKNOWN,
        )

    @classmethod
    def derive(
        cls,
        cpu_type: str,
        cpu_model: str,
        cpu_models: Union[List[str], str],
        num_processors: CountOrUnknown,
        total_cores: CountOrUnknown,
        total_threads: int,
        hyper_threading: Optional[HyperThreading] = None,
    ) -> 'CpuTopology':
        """
        Build a record from totals, deriving the per-processor ratios.

        If hyper_threading is not given it is derived from the totals.
        """
        if hyper_threading is None:
            hyper_threading = hyper_threading_from_counts(total_cores, total_threads)
        return cls(
            cpu_type=cpu_type,
            cpu_model=cpu_model,
            cpu_models=cpu_models,
            num_processors=num_processors,
            cores_per_processor=per_processor(total_cores, num_processors),
            total_cores=total_cores,
            threads_per_processor=per_processor(total_threads, num_processors),
            total_threads=total_threads,
            hyper_threading=hyper_threading,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'cpu_type': self.cpu_type,
            'cpu_model': self.cpu_model,
            'cpu_models': list(self.cpu_models) if isinstance(self.cpu_models, list) else self.cpu_models,
            'num_processors': self.num_processors,
            'cores_per_processor': self.cores_per_processor,
            'total_cores': self.total_cores,
            'threads_per_processor': self.threads_per_processor,
            'total_threads': self.total_threads,
            'hyper_threading': self.hyper_threading.value,
        }


def per_processor(total: CountOrUnknown, num_processors: CountOrUnknown) -> CountOrUnknown:
    """Integer ratio guarded against unknown operands and a zero divisor."""
    if not isinstance(total, int) or not isinstance(num_processors, int):
        return UNKNOWN
    if num_processors <= 0:
        return UNKNOWN
    return total // num_processors


def hyper_threading_from_counts(total_cores: CountOrUnknown, total_threads: CountOrUnknown) -> HyperThreading:
    if not isinstance(total_cores, int) or not isinstance(total_threads, int):
        return HyperThreading.UNKNOWN
    if total_cores < total_threads:
        return HyperThreading.ENABLED
    return HyperThreading.DISABLED


def runtime_cpu_type(system: SystemInterface) -> str:
    """Architecture from the runtime's triple, truncated at the first '-'."""
    return system.system_architecture().split('-')[0]


# =============================================================================
# Linux
# =============================================================================

def parse_cpuinfo_records(text: str) -> List[Dict[str, str]]:
    """
    Split /proc/cpuinfo into one key/value mapping per logical CPU.

    Records are separated by blank lines; empty records (e.g. the one after
    the trailing blank line) are dropped.
    """
    records = []
    for block in _BLANK_LINE.split(text):
        record: Dict[str, str] = {}
        for line in block.split('\n'):
            if not line.strip():
                continue
            parts = _CPUINFO_SEPARATOR.split(line, maxsplit=1)
            key = parts[0].strip()
            record[key] = parts[1].strip() if len(parts) > 1 else ''
        if record:
            records.append(record)
    return records


def cpuinfo_models(records: List[Dict[str, str]]) -> List[str]:
    """
    Model name of every record, in order.

    Raises:
        MissingField: no record carries "model name"
    """
    models = [record['model name'] for record in records if 'model name' in record]
    if not models:
        raise MissingField('model name')
    return models


def cpuinfo_total_cores(records: List[Dict[str, str]]) -> int:
    """
    Total physical cores across all packages.

    Sums the "cpu cores" value of each distinct physical id. When that field
    is absent, zero or unparseable it is not trusted and the number of
    distinct "processor" indices is used instead.
    """
    cores_by_package: Dict[Optional[str], int] = {}
    try:
        for record in records:
            package = record.get('physical id')
            if 'cpu cores' in record and package not in cores_by_package:
                cores_by_package[package] = to_int(record['cpu cores'], 'cpu cores')
    except ParseFailure as e:
        get_logger().debug(f"/proc/cpuinfo: {e}; counting processors instead")
        cores_by_package = {}

    total = sum(cores_by_package.values())
    if total > 0:
        return total
    return len({record['processor'] for record in records if 'processor' in record})


def parse_linux_cpuinfo(text: str, cpu_type: str, strict: bool = False) -> CpuTopology:
    """
    Derive a CpuTopology from /proc/cpuinfo text.

    A missing "model name" only degrades the model fields; a text with no
    "processor" entries fails the whole parse.

    Raises:
        MissingField: no "processor" entries (or no model name in strict mode)
    """
    records = parse_cpuinfo_records(text)
    processors = [record['processor'] for record in records if 'processor' in record]
    if not processors:
        raise MissingField('processor')

    cpu_models: Union[List[str], str]
    try:
        cpu_models = cpuinfo_models(records)
        cpu_model = cpu_models[0]
    except MissingField as e:
        handle_probe_error(e, strict, PROC_CPUINFO)
        cpu_model = cpu_models = UNKNOWN

    num_processors = len({record.get('physical id') for record in records})

    return CpuTopology.derive(
        cpu_type=cpu_type,
        cpu_model=cpu_model,
        cpu_models=cpu_models,
        num_processors=num_processors,
        total_cores=cpuinfo_total_cores(records),
        total_threads=len(processors),
    )


def _probe_cpu_linux(system: SystemInterface, config: ProbeConfig) -> CpuTopology:
    text = read_source(system, PROC_CPUINFO)
    return parse_linux_cpuinfo(text, runtime_cpu_type(system), strict=config.strict)


# =============================================================================
# macOS
# =============================================================================

def _optional_label_value(lines: List[str], label: str) -> Optional[str]:
    try:
        return find_label_value(lines, label)
    except LabelNotFound:
        return None


def parse_macos_hardware(text: str, cpu_type: str) -> CpuTopology:
    """
    Derive a CpuTopology from `system_profiler SPHardwareDataType` output.

    system_profiler does not report a thread count, so it is derived:
    total_threads = total_cores * (2 if Hyper-Threading is enabled else 1).
    A missing Hyper-Threading line means disabled. On Apple Silicon the
    "Chip" line stands in for "Processor Name" and implies one processor.

    Raises:
        LabelNotFound: Processor Name, Number of Processors or Total Number
            of Cores is absent
        ParseFailure: a count line carries no digits
    """
    lines = split_trim(text)
    chip = _optional_label_value(lines, 'Chip')

    try:
        cpu_model = find_label_value(lines, 'Processor Name')
    except LabelNotFound:
        if chip is None:
            raise
        cpu_model = chip

    try:
        num_processors = first_integer(find_label_line(lines, 'Number of Processors'), 'Number of Processors')
    except LabelNotFound:
        if chip is None:
            raise
        num_processors = 1

    total_cores = first_integer(find_label_line(lines, 'Total Number of Cores'), 'Total Number of Cores')

    ht_line = None
    try:
        ht_line = find_label_line(lines, 'Hyper-Threading Technology')
    except LabelNotFound:
        pass
    if ht_line is not None and 'Enabled' in ht_line:
        hyper_threading = HyperThreading.ENABLED
    else:
        hyper_threading = HyperThreading.DISABLED

    smt_factor = 2 if hyper_threading == HyperThreading.ENABLED else 1

    return CpuTopology.derive(
        cpu_type=cpu_type,
        cpu_model=cpu_model,
        cpu_models=[cpu_model],
        num_processors=num_processors,
        total_cores=total_cores,
        total_threads=total_cores * smt_factor,
        hyper_threading=hyper_threading,
    )


def _probe_cpu_macos(system: SystemInterface, config: ProbeConfig) -> CpuTopology:
    try:
        cpu_type = command_output(system, 'uname', ['-m']).strip()
    except ProbeError as e:
        get_logger().debug(f"uname -m: {e}; using runtime architecture")
        cpu_type = runtime_cpu_type(system)
    output = command_output(system, 'system_profiler', ['SPHardwareDataType'])
    return parse_macos_hardware(output, cpu_type)


# =============================================================================
# FreeBSD
# =============================================================================

def parse_sysctl_hyperthreading(value: str) -> HyperThreading:
    """
    Interpret machdep.hyperthreading_allowed.

    Raises:
        ParseFailure: value is neither "1" nor "0"
    """
    value = value.strip()
    if value == '1':
        return HyperThreading.ENABLED
    if value == '0':
        return HyperThreading.DISABLED
    raise ParseFailure('machdep.hyperthreading_allowed', value)


def _sysctl(system: SystemInterface, key: str) -> str:
    return command_output(system, 'sysctl', ['-n', key]).strip()


def _probe_cpu_freebsd(system: SystemInterface, config: ProbeConfig) -> CpuTopology:
    # Multi-socket detection is not attempted; per-processor fields stay unknown.
    cpu_type = command_output(system, 'uname', ['-m']).strip()
    cpu_model = _sysctl(system, 'hw.model')
    total_cores = to_int(_sysctl(system, 'kern.smp.cores'), 'kern.smp.cores')
    total_threads = to_int(_sysctl(system, 'kern.smp.cpus'), 'kern.smp.cpus')
    hyper_threading = parse_sysctl_hyperthreading(_sysctl(system, 'machdep.hyperthreading_allowed'))

    return CpuTopology.derive(
        cpu_type=cpu_type,
        cpu_model=cpu_model,
        cpu_models=[cpu_model],
        num_processors=UNKNOWN,
        total_cores=total_cores,
        total_threads=total_threads,
        hyper_threading=hyper_threading,
    )


# =============================================================================
# Windows / unknown
# =============================================================================

def unknown_topology(system: SystemInterface) -> CpuTopology:
    return CpuTopology.unknown(runtime_cpu_type(system), system.logical_cpu_count())


def _probe_cpu_unknown(system: SystemInterface, config: ProbeConfig) -> CpuTopology:
    return unknown_topology(system)


_CPU_PROBES: Dict[OSType, Callable[[SystemInterface, ProbeConfig], CpuTopology]] = {
    OSType.LINUX: _probe_cpu_linux,
    OSType.MACOS: _probe_cpu_macos,
    OSType.FREEBSD: _probe_cpu_freebsd,
    OSType.WINDOWS: _probe_cpu_unknown,
    OSType.UNKNOWN: _probe_cpu_unknown,
}


def probe_cpu_topology(
    os_type: OSType,
    system: SystemInterface,
    config: Optional[ProbeConfig] = None,
) -> CpuTopology:
    """
    Probe the CPU topology for a platform.

    Never fails in the default configuration: a probe that raises ProbeError
    is logged and replaced by CpuTopology.unknown() carrying the runtime's
    architecture and logical CPU count.

    Raises:
        ProbeError: only when config.strict is set
    """
    config = config or ProbeConfig()
    get_logger().section(f"CPU topology ({os_type.value})", level=2)
    try:
        return _CPU_PROBES[os_type](system, config)
    except ProbeError as e:
        handle_probe_error(e, config.strict, f"CPU topology ({os_type.value})")
        return unknown_topology(system)
