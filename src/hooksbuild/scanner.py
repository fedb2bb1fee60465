"""
Source Tree Scanner - Discovers .c and .h files in a project tree.

The scanner walks a directory recursively, skipping version-control, editor and
OS metadata directories by exact name, and classifies every file it finds:

- ``.c`` files become compilation units (with the default compiler options)
- ``.h`` files become header units
- everything else is ignored

Directory entries are visited in sorted order so that the same tree always
yields the same sequence of files.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from .config import DEFAULT_COMPILE_DEFAULTS, DEFAULT_SCAN_POLICY, CompileDefaults, ScanPolicy
from .errors import FileSystemError
from .models import SourceFile, SourceKind

logger = logging.getLogger(__name__)


class SourceScanner:
    """Scans a directory tree for compilation units and header units.

    Args:
        policy: Exclusion list and extensions to classify
        defaults: Compiler defaults; their options are attached to compilation units
    """

    def __init__(
        self,
        policy: ScanPolicy = DEFAULT_SCAN_POLICY,
        defaults: CompileDefaults = DEFAULT_COMPILE_DEFAULTS,
    ):
        self.policy = policy
        self.defaults = defaults

    def scan(self, root: Path) -> list[SourceFile]:
        """Scan a directory tree for source and header files.

        Args:
            root: Directory to scan

        Returns:
            Every compilation unit and header unit outside excluded directories,
            in deterministic (sorted, depth-first) order

        Raises:
            FileSystemError: If root is missing, not a directory, or unreadable
        """
        root = Path(root)
        if not root.exists():
            raise FileSystemError(f"Path does not exist: {root}", root)
        if not root.is_dir():
            raise FileSystemError(f"Path is not a directory: {root}", root)

        files = list(self._walk(root))
        logger.debug(f"Scanned {root}: {len(files)} source file(s)")
        return files

    def scan_units(self, root: Path) -> list[SourceFile]:
        """Scan a tree and keep only compilation units."""
        return [f for f in self.scan(root) if f.is_compilation_unit]

    def scan_headers(self, root: Path) -> list[SourceFile]:
        """Scan a tree and keep only header units.

        Finding no headers is not an error; a notice is logged and an empty
        list is returned.
        """
        headers = [f for f in self.scan(root) if f.is_header]
        if not headers:
            logger.info(f"No header files found in {root}, using default headers")
        return headers

    def classify(self, path: Path) -> Optional[SourceKind]:
        """Return the kind of a file by its exact extension, or None to ignore it."""
        if path.suffix == self.policy.source_extension:
            return SourceKind.COMPILATION_UNIT
        if path.suffix == self.policy.header_extension:
            return SourceKind.HEADER_UNIT
        return None

    def read_source(self, path: Path, kind: SourceKind) -> SourceFile:
        """Read one file from disk into a SourceFile.

        Raises:
            FileSystemError: If the file cannot be read
        """
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FileSystemError(f"Cannot read {path}: {e}", path) from e

        options = self.defaults.options if kind is SourceKind.COMPILATION_UNIT else None
        return SourceFile(kind=kind, name=path.name, content=content, options=options, path=path)

    def _walk(self, directory: Path) -> Iterator[SourceFile]:
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise FileSystemError(f"Cannot read directory {directory}: {e}", directory) from e

        for entry in entries:
            if entry.is_dir():
                if entry.name in self.policy.excluded_dirs:
                    logger.debug(f"Skipping excluded directory: {entry}")
                    continue
                if entry.is_symlink():
                    # Symlinked directories could form cycles.
                    logger.debug(f"Skipping symlinked directory: {entry}")
                    continue
                yield from self._walk(entry)
                continue

            kind = self.classify(entry)
            if kind is not None and entry.is_file():
                yield self.read_source(entry, kind)
