"""
Profiling Logging System

Provides a package-wide logger for host profiling with optional file output.
Console output goes to stderr so that a report written to stdout stays
machine-readable.

Usage:
    from hostprofile.logging import ProfileLogger, LogConfig, get_logger

    # Initialize logging for a profiling run
    logger = ProfileLogger(LogConfig(console_level=logging.DEBUG, log_file=Path("probe.log")))

    # Get the logger instance for use in any module
    log = get_logger()
    log.debug("running uname -r")
    log.warning("system_profiler isn't found.")

    # Or use the context manager to close the log file afterwards
    with ProfileLogger(config) as log:
        log.section("CPU")
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOGGER_NAME = 'hostprofile'

# Module-level logger instance
_profile_logger: Optional['ProfileLogger'] = None


def get_logger() -> 'ProfileLogger':
    """
    Get the current profiling logger instance.

    Returns:
        The active ProfileLogger, or a default console-only logger if none initialized.
    """
    global _profile_logger
    if _profile_logger is None:
        _profile_logger = ProfileLogger()
    return _profile_logger


def set_logger(logger: Optional['ProfileLogger']):
    """Set the module-level profiling logger (None resets to the default)."""
    global _profile_logger
    _profile_logger = logger


@dataclass
class LogConfig:
    """Configuration for profiling logging."""

    # Log level for console output
    console_level: int = logging.WARNING

    # Optional log file (written at file_level)
    log_file: Optional[Path] = None

    # Log level for file output
    file_level: int = logging.DEBUG

    # Whether to include timestamps in console output
    console_timestamps: bool = False

    # Whether to include timestamps in file output
    file_timestamps: bool = True

    # Width for section separators
    separator_width: int = 60


class ProfileLogger:
    """
    Structured logger for host profiling.

    Wraps a standard library logger named ``hostprofile`` and owns its
    handlers, so creating a new ProfileLogger replaces the previous
    configuration instead of stacking handlers.
    """

    def __init__(self, config: Optional[LogConfig] = None, name: str = LOGGER_NAME):
        self.config = config or LogConfig()
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._file_handler: Optional[logging.FileHandler] = None

        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(self.config.console_level)
        console.setFormatter(self._formatter(self.config.console_timestamps))
        self._logger.addHandler(console)

        if self.config.log_file is not None:
            self._setup_file_logging(Path(self.config.log_file))

        # Register as the global logger
        set_logger(self)

    @staticmethod
    def _formatter(timestamps: bool) -> logging.Formatter:
        if timestamps:
            return logging.Formatter('[%(asctime)s] %(levelname)s: %(message)s')
        return logging.Formatter('%(levelname)s: %(message)s')

    def _setup_file_logging(self, path: Path):
        """Set up file logging."""
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode='w')
        handler.setLevel(self.config.file_level)
        handler.setFormatter(self._formatter(self.config.file_timestamps))
        self._logger.addHandler(handler)
        self._file_handler = handler

    @property
    def log_path(self) -> Optional[Path]:
        """Get the path to the log file, if any."""
        if self._file_handler is None:
            return None
        return Path(self._file_handler.baseFilename)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, message: str):
        self._logger.debug(message)

    def info(self, message: str):
        self._logger.info(message)

    def warning(self, message: str):
        self._logger.warning(message)

    def error(self, message: str):
        self._logger.error(message)

    def section(self, title: str, level: int = 1):
        """
        Log a section header at info level (shown with -v).

        Args:
            title: Section title
            level: Header level (1=major, 2=minor)
        """
        char = '=' if level == 1 else '-'
        self._logger.info(char * self.config.separator_width)
        self._logger.info(title)
        if level == 1:
            self._logger.info(char * self.config.separator_width)

    def close(self):
        """Close the log file handler."""
        if self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

    def __enter__(self) -> 'ProfileLogger':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
