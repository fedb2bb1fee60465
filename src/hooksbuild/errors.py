"""
Exception hierarchy for hooksbuild.

Every error raised by the build pipeline derives from HooksBuildError so that
callers (the CLI, or a script driving the coordinator) can catch a single type.
All of them are terminal for the compilation unit that raised them: nothing in
the pipeline retries.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from hooksbuild.models import BuildResult


class HooksBuildError(Exception):
    """Base class for all hooksbuild errors."""

    pass


class FileSystemError(HooksBuildError):
    """Path is missing, unreadable, or not the expected kind (file vs directory)."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ConfigurationError(HooksBuildError):
    """Required configuration (e.g. the compile service URL) is missing or invalid."""

    pass


class TransportError(HooksBuildError):
    """The request to the compile service failed or its response was malformed."""

    pass


class InvalidInputError(HooksBuildError):
    """Input has the wrong type, extension, or shape for the requested operation."""

    pass


class DecodeError(HooksBuildError):
    """The artifact payload returned by the compile service could not be decoded."""

    pass


class BuildFailedError(HooksBuildError):
    """The remote compiler reported a failed build.

    Attributes:
        log_path: Path of the log file written with the failing task output
        result: The parsed BuildResult that reported the failure
    """

    def __init__(
        self,
        message: str,
        log_path: Optional[Path] = None,
        result: Optional["BuildResult"] = None,
    ):
        super().__init__(message)
        self.log_path = log_path
        self.result = result
