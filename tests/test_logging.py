"""Tests for the profiling logger and the degradation policy."""

import logging

import pytest

from hostprofile.errors import ToolNotFound, handle_probe_error
from hostprofile.logging import LogConfig, ProfileLogger, get_logger, set_logger


class TestProfileLogger:

    def test_default_logger_created_lazily(self):
        log = get_logger()
        assert isinstance(log, ProfileLogger)
        assert get_logger() is log

    def test_new_logger_registers_itself(self):
        log = ProfileLogger()
        assert get_logger() is log

    def test_handlers_replaced_not_stacked(self):
        ProfileLogger()
        log = ProfileLogger()
        assert len(log.logger.handlers) == 1

    def test_console_level(self, capsys):
        log = ProfileLogger(LogConfig(console_level=logging.WARNING))
        log.info("quiet")
        log.warning("loud")

        err = capsys.readouterr().err
        assert "quiet" not in err
        assert "WARNING: loud" in err

    def test_sections_shown_at_info(self, capsys):
        log = ProfileLogger(LogConfig(console_level=logging.INFO))
        log.section("Compilers", level=2)
        log.debug("run: gcc --version")

        err = capsys.readouterr().err
        assert "INFO: Compilers" in err
        assert "gcc --version" not in err

    def test_log_file(self, tmp_path):
        path = tmp_path / "logs" / "probe.log"
        with ProfileLogger(LogConfig(log_file=path)) as log:
            assert log.log_path == path
            log.section("CPU topology")
            log.debug("read: /proc/cpuinfo")

        text = path.read_text()
        assert "CPU topology" in text
        assert "DEBUG: read: /proc/cpuinfo" in text
        assert "=" * 60 in text
        assert log.log_path is None

    def test_minor_section(self, tmp_path):
        path = tmp_path / "probe.log"
        with ProfileLogger(LogConfig(log_file=path, separator_width=10)) as log:
            log.section("Compilers", level=2)

        lines = [line.split(': ', 1)[1] for line in path.read_text().splitlines()]
        assert lines == ['-' * 10, 'Compilers']


class TestHandleProbeError:

    def test_warns_and_returns(self, capsys):
        set_logger(ProfileLogger())
        handle_probe_error(ToolNotFound('sysctl'), strict=False, context='CPU topology')

        err = capsys.readouterr().err
        assert "CPU topology: sysctl isn't found.; reporting unknown" in err

    def test_strict_reraises(self):
        error = ToolNotFound('sysctl')
        with pytest.raises(ToolNotFound) as exc:
            handle_probe_error(error, strict=True, context='CPU topology')
        assert exc.value is error
