"""Tests for ProbeConfig and its environment overrides."""

from pathlib import Path

import pytest

from hostprofile.config import DEFAULT_CUDA_ROOT, LATEST_COMPILER_VERSIONS, ProbeConfig


class TestProbeConfig:

    def test_defaults(self):
        config = ProbeConfig()
        assert config.command_timeout == 10.0
        assert config.cuda_root == DEFAULT_CUDA_ROOT
        assert config.strict is False
        assert config.latest_version('gcc') == 15
        assert config.latest_version('clang++') == 20

    def test_unknown_family_disables_suffix_scan(self):
        assert ProbeConfig().latest_version('icx') == 0

    def test_versions_not_shared(self):
        config = ProbeConfig()
        config.latest_compiler_versions['gcc'] = 99
        assert LATEST_COMPILER_VERSIONS['gcc'] == 15
        assert ProbeConfig().latest_version('gcc') == 15


class TestFromEnv:

    def test_empty(self):
        assert ProbeConfig.from_env({}) == ProbeConfig()

    def test_overrides(self):
        config = ProbeConfig.from_env({
            'HOSTPROFILE_COMMAND_TIMEOUT': '2.5',
            'HOSTPROFILE_CUDA_ROOT': '/opt/cuda',
            'HOSTPROFILE_STRICT': 'true',
        })
        assert config.command_timeout == 2.5
        assert config.cuda_root == Path('/opt/cuda')
        assert config.strict is True

    @pytest.mark.parametrize("env,expected", [
        ({'CUDA_HOME': '/opt/a', 'CUDA_PATH': '/opt/b'}, Path('/opt/a')),
        ({'CUDA_PATH': '/opt/b'}, Path('/opt/b')),
        ({'HOSTPROFILE_CUDA_ROOT': '/opt/c', 'CUDA_HOME': '/opt/a'}, Path('/opt/c')),
    ])
    def test_cuda_root_precedence(self, env, expected):
        assert ProbeConfig.from_env(env).cuda_root == expected

    @pytest.mark.parametrize("value,expected", [("1", True), ("YES", True), ("0", False), ("off", False)])
    def test_strict_values(self, value, expected):
        assert ProbeConfig.from_env({'HOSTPROFILE_STRICT': value}).strict is expected

    def test_bad_timeout(self):
        with pytest.raises(ValueError, match="HOSTPROFILE_COMMAND_TIMEOUT"):
            ProbeConfig.from_env({'HOSTPROFILE_COMMAND_TIMEOUT': 'soon'})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv('HOSTPROFILE_COMMAND_TIMEOUT', '3')
        assert ProbeConfig.from_env().command_timeout == 3.0
