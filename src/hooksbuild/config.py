"""
Configuration for hooksbuild.

Two kinds of configuration live here:

- Fixed policy (ScanPolicy, CompileDefaults): immutable dataclasses holding
  the directory exclusion list, the file extensions, and the compiler options
  that every build request uses. They are injected into the scanner and the
  assembler rather than read from module globals.
- Runtime settings (BuildConfig): the compile service URL, timeouts, and the
  worker count, read from the environment. A ``.env`` file in the working
  directory is loaded first; variables already set in the environment win.

Environment variables:
    HOOKS_COMPILE_HOST: Base URL of the compile service (required to submit)
    HOOKS_COMPILE_TIMEOUT: Request timeout in seconds (default 120)
    HOOKS_COMPILE_CONNECT_TIMEOUT: Connect timeout in seconds (default 10)
    HOOKS_BUILD_WORKERS: Maximum number of units built concurrently
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_COMPILE_HOST = "HOOKS_COMPILE_HOST"
ENV_COMPILE_TIMEOUT = "HOOKS_COMPILE_TIMEOUT"
ENV_CONNECT_TIMEOUT = "HOOKS_COMPILE_CONNECT_TIMEOUT"
ENV_BUILD_WORKERS = "HOOKS_BUILD_WORKERS"

DEFAULT_TIMEOUT = 120.0
DEFAULT_CONNECT_TIMEOUT = 10.0
MAX_DEFAULT_WORKERS = 32


@dataclass(frozen=True)
class ScanPolicy:
    """Which directories to skip and which extensions to classify.

    Exclusion is by exact directory name, never by pattern.
    """

    excluded_dirs: frozenset[str] = frozenset({"node_modules", ".git", ".vscode", ".idea", ".DS_Store"})
    source_extension: str = ".c"
    header_extension: str = ".h"


@dataclass(frozen=True)
class CompileDefaults:
    """Options applied to every build request. Not configurable per call."""

    options: str = "-O3"
    output_format: str = "wasm"
    compress: bool = True
    strip: bool = True


DEFAULT_SCAN_POLICY = ScanPolicy()
DEFAULT_COMPILE_DEFAULTS = CompileDefaults()


@dataclass(frozen=True)
class BuildConfig:
    """Runtime settings for talking to the compile service.

    Attributes:
        endpoint: Base URL of the compile service, or None if unset
        timeout: Total request timeout in seconds
        connect_timeout: Connection timeout in seconds
        max_workers: Upper bound on concurrent units (None = one per unit, capped)
    """

    endpoint: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    max_workers: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, load_dotenv_file: bool = True) -> "BuildConfig":
        """Read settings from the environment.

        A missing endpoint is not an error here: it is reported as a
        ConfigurationError when a request is actually submitted.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            load_dotenv_file: Load ``.env`` from the working directory first

        Raises:
            ConfigurationError: If a numeric setting cannot be parsed
        """
        if load_dotenv_file:
            load_dotenv(Path.cwd() / ".env", override=False)
        env = os.environ if environ is None else environ

        endpoint = env.get(ENV_COMPILE_HOST, "").strip() or None
        if endpoint is None:
            logger.debug(f"{ENV_COMPILE_HOST} is not set")

        return cls(
            endpoint=endpoint,
            timeout=_parse_float(env, ENV_COMPILE_TIMEOUT, DEFAULT_TIMEOUT),
            connect_timeout=_parse_float(env, ENV_CONNECT_TIMEOUT, DEFAULT_CONNECT_TIMEOUT),
            max_workers=_parse_workers(env),
        )


def _parse_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number of seconds, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}")
    return value


def _parse_workers(env: Mapping[str, str]) -> Optional[int]:
    raw = env.get(ENV_BUILD_WORKERS, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{ENV_BUILD_WORKERS} must be an integer, got {raw!r}") from e
    if value < 1:
        raise ConfigurationError(f"{ENV_BUILD_WORKERS} must be at least 1, got {raw!r}")
    return value
