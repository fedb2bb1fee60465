"""
hooksbuild - Remote C to WebAssembly build client.

Scans a project tree for C compilation units and headers, submits each unit to
a remote compile service, and writes the resulting .wasm artifact or a .log of
the compiler output.

Usage:
    from hooksbuild import BuildConfig, BuildCoordinator, RemoteBuildClient

    config = BuildConfig.from_env()
    coordinator = BuildCoordinator(RemoteBuildClient.from_config(config))
    coordinator.build(Path("contracts"), Path("build"), headers_path=Path("headers"))
"""

__version__ = "0.1.0"

from .assembler import UnitAssembler, artifact_base_name
from .client import RemoteBuildClient, parse_build_result
from .config import BuildConfig, CompileDefaults, ScanPolicy
from .coordinator import BatchResult, BuildCoordinator, UnitOutcome
from .decode import decode_binary
from .errors import (
    BuildFailedError,
    ConfigurationError,
    DecodeError,
    FileSystemError,
    HooksBuildError,
    InvalidInputError,
    TransportError,
)
from .models import BuildRequest, BuildResult, SourceFile, SourceKind, Task
from .resolver import ResultResolver, collect_failure_console
from .scanner import SourceScanner

__all__ = [
    "__version__",
    "BatchResult",
    "BuildConfig",
    "BuildCoordinator",
    "BuildFailedError",
    "BuildRequest",
    "BuildResult",
    "CompileDefaults",
    "ConfigurationError",
    "DecodeError",
    "FileSystemError",
    "HooksBuildError",
    "InvalidInputError",
    "RemoteBuildClient",
    "ResultResolver",
    "ScanPolicy",
    "SourceFile",
    "SourceKind",
    "SourceScanner",
    "Task",
    "TransportError",
    "UnitAssembler",
    "UnitOutcome",
    "artifact_base_name",
    "collect_failure_console",
    "decode_binary",
    "parse_build_result",
]
