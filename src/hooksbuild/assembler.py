"""
Unit Assembler - Turns one compilation unit plus headers into a BuildRequest.

Output format, compression and symbol stripping come from CompileDefaults and
are the same for every request.
"""

from typing import Sequence

from .config import DEFAULT_COMPILE_DEFAULTS, CompileDefaults
from .errors import InvalidInputError
from .models import BuildRequest, SourceFile


def artifact_base_name(name: str, extension: str = ".c") -> str:
    """Derive the artifact base name from a source file name.

    The name is split at the first occurrence of the extension marker, so
    ``"main.c.c"`` gives ``"main"``.
    """
    return name.split(extension, 1)[0]


class UnitAssembler:
    """Builds BuildRequest payloads.

    Args:
        defaults: Fixed compiler policy applied to every request
        source_extension: Extension stripped to derive artifact names
    """

    def __init__(self, defaults: CompileDefaults = DEFAULT_COMPILE_DEFAULTS, source_extension: str = ".c"):
        self.defaults = defaults
        self.source_extension = source_extension

    def base_name(self, unit: SourceFile) -> str:
        return artifact_base_name(unit.name, self.source_extension)

    def assemble(self, unit: SourceFile, headers: Sequence[SourceFile]) -> BuildRequest:
        """Package one compilation unit with the full header set.

        Args:
            unit: The compilation unit to build
            headers: Header units visible to the build, passed through unchanged

        Returns:
            BuildRequest with exactly one unit

        Raises:
            InvalidInputError: If unit is not a compilation unit or a header is not a header unit
        """
        if not unit.is_compilation_unit:
            raise InvalidInputError(f"{unit.name} is not a compilation unit")

        if unit.options is None:
            unit = SourceFile(
                kind=unit.kind,
                name=unit.name,
                content=unit.content,
                options=self.defaults.options,
                path=unit.path,
            )

        return BuildRequest(
            units=(unit,),
            headers=tuple(headers),
            base_name=self.base_name(unit),
            output_format=self.defaults.output_format,
            compress=self.defaults.compress,
            strip=self.defaults.strip,
        )
