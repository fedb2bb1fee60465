"""Build Coordinator - Fans the per-unit build chain out across a project tree.

For every compilation unit found by the scanner, the coordinator runs

    assemble -> submit -> resolve

on a ThreadPoolExecutor. Units are isolated from each other:

1. A failing unit never cancels, delays or rolls back any other unit
2. The coordinator waits for every unit to settle before returning
3. The first failure observed (in completion order) is reported to the caller

Artifacts and logs written by other units of a failed batch stay on disk.
"""

import logging
import time
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from .assembler import UnitAssembler
from .client import RemoteBuildClient
from .config import MAX_DEFAULT_WORKERS
from .errors import BuildFailedError, FileSystemError, InvalidInputError
from .models import SourceFile, SourceKind
from .output import TimedLogger, log, log_detail, log_warning
from .resolver import ResultResolver
from .scanner import SourceScanner

logger = logging.getLogger(__name__)


@dataclass
class UnitOutcome:
    """Terminal state of one compilation unit.

    Attributes:
        base_name: Artifact base name of the unit
        source: The compilation unit that was built
        success: True if the artifact was written
        artifact_path: The .wasm written on success, the .log written on a
            reported build failure, otherwise None
        error: The exception that ended the unit, if any
        elapsed: Wall-clock seconds spent on the unit
    """

    base_name: str
    source: SourceFile
    success: bool
    artifact_path: Optional[Path] = None
    error: Optional[Exception] = None
    elapsed: float = 0.0


@dataclass
class BatchResult:
    """Outcomes of a directory-mode build.

    Attributes:
        outcomes: Unit outcomes keyed by artifact base name, in scan order
        first_error: First failure observed, in completion order
        total_elapsed: Wall-clock seconds for the whole batch
    """

    outcomes: dict[str, UnitOutcome] = field(default_factory=dict)
    first_error: Optional[Exception] = None
    total_elapsed: float = 0.0

    @property
    def success(self) -> bool:
        return self.first_error is None

    @property
    def succeeded(self) -> list[UnitOutcome]:
        return [o for o in self.outcomes.values() if o.success]

    @property
    def failed(self) -> list[UnitOutcome]:
        return [o for o in self.outcomes.values() if not o.success]

    def raise_first_error(self) -> None:
        """Re-raise the first failure of the batch, if there was one."""
        if self.first_error is not None:
            raise self.first_error


class BuildCoordinator:
    """Runs the build chain for a directory tree or a single file.

    Args:
        client: Client for the compile service
        scanner: Source scanner (default policy if None)
        assembler: Request assembler (default compiler options if None)
        resolver: Result resolver (default decoder if None)
        max_workers: Maximum concurrent units (None = one per unit, capped)
    """

    def __init__(
        self,
        client: RemoteBuildClient,
        scanner: Optional[SourceScanner] = None,
        assembler: Optional[UnitAssembler] = None,
        resolver: Optional[ResultResolver] = None,
        max_workers: Optional[int] = None,
    ):
        self.client = client
        self.scanner = scanner if scanner is not None else SourceScanner()
        self.assembler = assembler if assembler is not None else UnitAssembler()
        self.resolver = resolver if resolver is not None else ResultResolver()
        self.max_workers = max_workers

    def build(self, root: Path, output_dir: Path, headers_path: Optional[Path] = None) -> BatchResult:
        """Build every compilation unit under root; raise the first failure.

        Raises:
            FileSystemError: If root or headers_path cannot be scanned
            InvalidInputError: If two units would write the same artifact
            HooksBuildError: The first unit failure, after all units settled
        """
        result = self.run(root, output_dir, headers_path)
        result.raise_first_error()
        return result

    def run(self, root: Path, output_dir: Path, headers_path: Optional[Path] = None) -> BatchResult:
        """Build every compilation unit under root and collect all outcomes.

        Unlike build(), unit failures are recorded in the returned BatchResult
        instead of being raised. Scan errors and duplicate artifact names are
        still raised, since nothing has been dispatched at that point.

        Args:
            root: Directory to scan for compilation units
            output_dir: Directory receiving .wasm and .log files
            headers_path: Optional directory to scan for header units

        Returns:
            BatchResult with one outcome per unit
        """
        start_time = time.monotonic()
        root = Path(root)
        output_dir = Path(output_dir)

        with TimedLogger(f"Scanning {root}", verbose_only=True):
            units = self.scanner.scan_units(root)
        headers = self.load_headers(headers_path)

        if not units:
            log(f"No compilation units found in {root}")
            return BatchResult(total_elapsed=time.monotonic() - start_time)

        self._check_unique_names(units)

        log(f"Building {len(units)} compilation unit(s) from {root}")
        workers = self._worker_count(len(units))
        logger.debug(f"Dispatching {len(units)} unit(s) on {workers} worker(s)")

        result = BatchResult()
        pending: dict[Future[UnitOutcome], SourceFile] = {}
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hooksbuild") as executor:
            for unit in units:
                pending[executor.submit(self._build_unit, unit, headers, output_dir)] = unit

            completed: dict[str, UnitOutcome] = {}
            for future in as_completed(pending):
                outcome = future.result()
                completed[outcome.base_name] = outcome
                if outcome.error is not None and result.first_error is None:
                    result.first_error = outcome.error

        # Report in scan order rather than completion order.
        for unit in units:
            base_name = self.assembler.base_name(unit)
            result.outcomes[base_name] = completed[base_name]

        result.total_elapsed = time.monotonic() - start_time
        log(f"{len(result.succeeded)} succeeded, {len(result.failed)} failed ({result.total_elapsed:.2f}s)")
        return result

    def build_one(self, file_path: Path, output_dir: Path, headers_path: Optional[Path] = None) -> UnitOutcome:
        """Build a single .c file in the calling thread.

        Raises:
            FileSystemError: If file_path is missing, a directory, or unreadable
            InvalidInputError: If file_path is not a .c file
            HooksBuildError: Any failure of the build chain
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileSystemError(f"File does not exist: {file_path}", file_path)
        if file_path.is_dir():
            raise FileSystemError(f"Expected a file, got a directory: {file_path}", file_path)

        kind = self.scanner.classify(file_path)
        if kind is not SourceKind.COMPILATION_UNIT:
            raise InvalidInputError(f"Invalid file type: {file_path.name} must be a .c file")

        unit = self.scanner.read_source(file_path, kind)
        headers = self.load_headers(headers_path)

        outcome = self._build_unit(unit, headers, Path(output_dir))
        if outcome.error is not None:
            raise outcome.error
        return outcome

    def load_headers(self, headers_path: Optional[Path]) -> tuple[SourceFile, ...]:
        """Scan headers_path for header units; no path means no headers."""
        if headers_path is None:
            log("No header path specified, using default headers")
            return ()

        headers_path = Path(headers_path)
        headers = self.scanner.scan_headers(headers_path)
        if headers:
            log_detail(f"Headers: {len(headers)} from {headers_path}")
        else:
            log_warning(f"No header files detected in {headers_path}, using default headers")
        return tuple(headers)

    def _build_unit(self, unit: SourceFile, headers: Sequence[SourceFile], output_dir: Path) -> UnitOutcome:
        """Run assemble -> submit -> resolve for one unit, capturing any failure."""
        start_time = time.monotonic()
        base_name = self.assembler.base_name(unit)
        outcome = UnitOutcome(base_name=base_name, source=unit, success=False)
        try:
            request = self.assembler.assemble(unit, headers)
            result = self.client.submit(request)
            outcome.artifact_path = self.resolver.resolve(result, output_dir, request.base_name)
            outcome.success = True
            log_detail(f"[ok] {outcome.artifact_path.name}")
        except BuildFailedError as e:
            outcome.error = e
            outcome.artifact_path = e.log_path
            log_detail(f"[failed] {unit.name}: {e}")
        except Exception as e:
            outcome.error = e
            logger.debug(f"{unit.name} failed", exc_info=True)
            log_detail(f"[error] {unit.name}: {e}")
        outcome.elapsed = time.monotonic() - start_time
        return outcome

    def _check_unique_names(self, units: Sequence[SourceFile]) -> None:
        counts = Counter(self.assembler.base_name(u) for u in units)
        duplicates = sorted(name for name, count in counts.items() if count > 1)
        if duplicates:
            paths = [str(u.path or u.name) for u in units if self.assembler.base_name(u) in duplicates]
            raise InvalidInputError(
                f"Multiple compilation units map to the same artifact name ({', '.join(duplicates)}): {', '.join(paths)}"
            )

    def _worker_count(self, unit_count: int) -> int:
        if self.max_workers is not None:
            return max(1, min(self.max_workers, unit_count))
        return max(1, min(MAX_DEFAULT_WORKERS, unit_count))
