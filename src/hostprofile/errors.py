"""
Probe Error Taxonomy

Parsers raise these when the text they are given does not carry what they
need. Probes catch them at their boundary and degrade the affected fields to
the unknown sentinel, unless the probe configuration asks for strict mode.
"""

from typing import List, Optional

from .logging import get_logger


class ProbeError(RuntimeError):
    """Base class for every failure raised while probing the host."""


class ToolNotFound(ProbeError):
    """A required external executable could not be located."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"{tool} isn't found.")


class CommandFailed(ProbeError):
    """An external process failed to launch or returned a nonzero status."""

    def __init__(self, command: List[str], returncode: Optional[int] = None, output: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        if returncode is None:
            message = f"{' '.join(self.command)} could not be run"
        else:
            message = f"{' '.join(self.command)} exited with status {returncode}"
        if output:
            message = f"{message}: {output.strip()[:200]}"
        super().__init__(message)


class MissingField(ProbeError):
    """A structured source (e.g. /proc/cpuinfo) lacks an expected key."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"field '{field}' not found")


class LabelNotFound(ProbeError):
    """No line of a tool's text output carries the expected label."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"label '{label}' not found")


class ParseFailure(ProbeError):
    """A numeric or pattern extraction failed on text that was present."""

    def __init__(self, field: str, text: str):
        self.field = field
        self.text = text
        super().__init__(f"could not parse {field} from {text!r}")


class SourceUnreadable(ProbeError):
    """A file-backed source (e.g. /proc/cpuinfo) could not be read."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"{path} could not be read"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


def handle_probe_error(error: ProbeError, strict: bool, context: str):
    """
    Apply the degradation policy to a probe failure.

    Logs the failure as a warning and returns, so that the caller can fill the
    affected fields with the unknown sentinel. In strict mode the error is
    re-raised instead.
    """
    if strict:
        raise error
    get_logger().warning(f"{context}: {error}; reporting unknown")
