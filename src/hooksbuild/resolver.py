"""
Result Resolver - Persists the outcome of one remote build.

Exactly one file is written per call:

- success: ``<output_dir>/<base_name>.wasm`` holding the decoded artifact bytes
- failure: ``<output_dir>/<base_name>.log`` holding the console output of every
  failed task, joined with newlines; a BuildFailedError is then raised
"""

import logging
from pathlib import Path
from typing import Callable

from .decode import decode_binary
from .errors import BuildFailedError, FileSystemError
from .models import BuildResult
from .output import log_error

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".wasm"
LOG_SUFFIX = ".log"


def collect_failure_console(result: BuildResult) -> str:
    """Join the console output of failed tasks. Successful tasks contribute nothing."""
    return "\n".join(task.console for task in result.failed_tasks)


class ResultResolver:
    """Writes build artifacts and failure logs.

    Args:
        decoder: Transforms BuildResult.output into artifact bytes
    """

    def __init__(self, decoder: Callable[[str], bytes] = decode_binary):
        self.decoder = decoder

    def resolve(self, result: BuildResult, output_dir: Path, base_name: str) -> Path:
        """Write the artifact or the failure log for one build.

        Args:
            result: Parsed response of the compile service
            output_dir: Directory receiving the file (created if missing)
            base_name: Artifact base name, without suffix

        Returns:
            Path of the written artifact

        Raises:
            BuildFailedError: If the build failed (after the log file is written)
            FileSystemError: If the output directory or file cannot be written
        """
        output_dir = Path(output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Cannot create output directory {output_dir}: {e}", output_dir) from e

        if not result.success:
            console = collect_failure_console(result)
            log_path = output_dir / f"{base_name}{LOG_SUFFIX}"
            _write_file(log_path, console.encode("utf-8"))
            logger.debug(f"Wrote build log {log_path} ({len(result.failed_tasks)} failed task(s))")
            if console:
                log_error(console)
            raise BuildFailedError(result.message, log_path=log_path, result=result)

        artifact = self.decoder(result.output)
        artifact_path = output_dir / f"{base_name}{ARTIFACT_SUFFIX}"
        _write_file(artifact_path, artifact)
        logger.debug(f"Wrote artifact {artifact_path} ({len(artifact)} bytes)")
        return artifact_path


def _write_file(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as e:
        raise FileSystemError(f"Cannot write {path}: {e}", path) from e
