"""Tests for configuration loading from the environment and .env files."""

import os
from unittest.mock import patch

import pytest

from hooksbuild.config import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_TIMEOUT,
    BuildConfig,
    CompileDefaults,
    ScanPolicy,
)
from hooksbuild.errors import ConfigurationError


class TestBuildConfigFromEnv:
    def test_defaults(self):
        config = BuildConfig.from_env({}, load_dotenv_file=False)

        assert config.endpoint is None
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.connect_timeout == DEFAULT_CONNECT_TIMEOUT
        assert config.max_workers is None

    def test_all_values(self):
        env = {
            "HOOKS_COMPILE_HOST": " https://compile.example.net ",
            "HOOKS_COMPILE_TIMEOUT": "30",
            "HOOKS_COMPILE_CONNECT_TIMEOUT": "2.5",
            "HOOKS_BUILD_WORKERS": "4",
        }
        config = BuildConfig.from_env(env, load_dotenv_file=False)

        assert config.endpoint == "https://compile.example.net"
        assert config.timeout == 30.0
        assert config.connect_timeout == 2.5
        assert config.max_workers == 4

    def test_blank_endpoint_is_unset(self):
        config = BuildConfig.from_env({"HOOKS_COMPILE_HOST": "   "}, load_dotenv_file=False)
        assert config.endpoint is None

    @pytest.mark.parametrize(
        "key,value",
        [
            ("HOOKS_COMPILE_TIMEOUT", "soon"),
            ("HOOKS_COMPILE_TIMEOUT", "0"),
            ("HOOKS_COMPILE_CONNECT_TIMEOUT", "-1"),
            ("HOOKS_BUILD_WORKERS", "many"),
            ("HOOKS_BUILD_WORKERS", "0"),
        ],
    )
    def test_invalid_numbers(self, key, value):
        with pytest.raises(ConfigurationError, match=key):
            BuildConfig.from_env({key: value}, load_dotenv_file=False)

    def test_reads_os_environ(self):
        with patch.dict(os.environ, {"HOOKS_COMPILE_HOST": "http://from-env:1234"}):
            config = BuildConfig.from_env(load_dotenv_file=False)
        assert config.endpoint == "http://from-env:1234"

    def test_dotenv_file(self, tmp_path, monkeypatch):
        """A .env file in the working directory supplies unset variables."""
        (tmp_path / ".env").write_text("HOOKS_COMPILE_HOST=http://from-dotenv:9000\nHOOKS_BUILD_WORKERS=3\n")
        monkeypatch.chdir(tmp_path)
        # setenv first so that undo removes whatever load_dotenv writes.
        for key in ("HOOKS_COMPILE_HOST", "HOOKS_BUILD_WORKERS"):
            monkeypatch.setenv(key, "")
            monkeypatch.delenv(key)

        config = BuildConfig.from_env()

        assert config.endpoint == "http://from-dotenv:9000"
        assert config.max_workers == 3

    def test_environment_wins_over_dotenv(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("HOOKS_COMPILE_HOST=http://from-dotenv:9000\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOOKS_COMPILE_HOST", "http://from-env:1234")

        assert BuildConfig.from_env().endpoint == "http://from-env:1234"

    def test_dotenv_in_parent_directory_is_ignored(self, tmp_path, monkeypatch):
        """Only the working directory's .env is loaded, not one further up."""
        (tmp_path / ".env").write_text("HOOKS_COMPILE_HOST=http://from-parent:9000\n")
        work = tmp_path / "project"
        work.mkdir()
        monkeypatch.chdir(work)
        monkeypatch.setenv("HOOKS_COMPILE_HOST", "")
        monkeypatch.delenv("HOOKS_COMPILE_HOST")

        assert BuildConfig.from_env().endpoint is None


class TestPolicies:
    def test_scan_policy_defaults(self):
        policy = ScanPolicy()
        assert policy.excluded_dirs == {"node_modules", ".git", ".vscode", ".idea", ".DS_Store"}
        assert policy.source_extension == ".c"
        assert policy.header_extension == ".h"

    def test_compile_defaults(self):
        defaults = CompileDefaults()
        assert (defaults.options, defaults.output_format, defaults.compress, defaults.strip) == ("-O3", "wasm", True, True)

    def test_policies_are_immutable(self):
        with pytest.raises(AttributeError):
            CompileDefaults().options = "-O0"  # type: ignore[misc]
