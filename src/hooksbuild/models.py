"""Data models for the build pipeline.

Defines the dataclasses that flow through scan -> assemble -> submit -> resolve:
- SourceKind: Enum of the two file kinds the compile service understands
- SourceFile: One .c or .h file read from disk
- BuildRequest: The payload for a single remote build
- Task: One sub-step reported by the remote compiler
- BuildResult: The parsed response for one BuildRequest
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .errors import InvalidInputError


class SourceKind(Enum):
    """Kind of source file. The value is the wire ``type`` tag."""

    COMPILATION_UNIT = "c"
    HEADER_UNIT = "h"


@dataclass(frozen=True)
class SourceFile:
    """A source file discovered on disk.

    Attributes:
        kind: Compilation unit or header unit
        name: File name without any directory part (e.g. "main.c")
        content: Raw text of the file
        options: Compiler flags (compilation units only)
        path: Location on disk, kept for diagnostics and never serialized
    """

    kind: SourceKind
    name: str
    content: str
    options: Optional[str] = None
    path: Optional[Path] = field(default=None, compare=False)

    @property
    def is_compilation_unit(self) -> bool:
        return self.kind is SourceKind.COMPILATION_UNIT

    @property
    def is_header(self) -> bool:
        return self.kind is SourceKind.HEADER_UNIT

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire form used in ``files`` and ``headers``."""
        data: dict[str, Any] = {"type": self.kind.value, "name": self.name}
        if self.options is not None:
            data["options"] = self.options
        data["src"] = self.content
        return data


@dataclass(frozen=True)
class BuildRequest:
    """A single remote build: exactly one compilation unit plus its headers.

    Attributes:
        units: Exactly one compilation unit
        headers: Header units visible to this build (shared, read-only)
        base_name: Artifact base name used for the .wasm / .log output files
        output_format: Target format requested from the compiler
        compress: Ask the compiler to compress the artifact
        strip: Ask the compiler to strip symbols
    """

    units: tuple[SourceFile, ...]
    headers: tuple[SourceFile, ...]
    base_name: str
    output_format: str = "wasm"
    compress: bool = True
    strip: bool = True

    def __post_init__(self) -> None:
        if len(self.units) != 1:
            raise InvalidInputError(f"A build request carries exactly one compilation unit, got {len(self.units)}")
        if not self.units[0].is_compilation_unit:
            raise InvalidInputError(f"{self.units[0].name} is not a compilation unit")
        for header in self.headers:
            if not header.is_header:
                raise InvalidInputError(f"{header.name} is not a header unit")
        if not self.base_name:
            raise InvalidInputError(f"Cannot derive an artifact name from {self.units[0].name!r}")

    @property
    def unit(self) -> SourceFile:
        """The single compilation unit of this request."""
        return self.units[0]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON body posted to /api/build."""
        return {
            "output": self.output_format,
            "compress": self.compress,
            "strip": self.strip,
            "files": [u.to_dict() for u in self.units],
            "headers": [h.to_dict() for h in self.headers],
        }


@dataclass(frozen=True)
class Task:
    """One sub-step of a remote build (preprocess, compile, link, ...)."""

    name: str
    console: str
    success: bool


@dataclass(frozen=True)
class BuildResult:
    """Parsed response of the compile service for one BuildRequest.

    Attributes:
        success: Overall outcome
        message: Human-readable summary, meaningful when success is False
        output: Encoded artifact payload, empty unless success is True
        tasks: Sub-steps in the order the service reported them
    """

    success: bool
    message: str
    output: str
    tasks: tuple[Task, ...] = ()

    @property
    def failed_tasks(self) -> list[Task]:
        """Tasks that did not succeed, in reported order."""
        return [t for t in self.tasks if not t.success]
