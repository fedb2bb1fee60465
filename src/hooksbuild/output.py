"""
Timestamped user-facing output for hooksbuild.

All lines are prefixed with the elapsed time since program start in MM:SS.cc
format, which makes it easy to see how long each remote build took when many
units are compiled concurrently.

Example output:
    00:00.01 Building 3 compilation unit(s) from contracts/
    00:00.01      Headers: 4 from headers/
    00:00.84      [ok] base.wasm
    00:01.02      [failed] broken.log

Usage:
    from hooksbuild.output import log, log_detail, log_error

    log("Building contracts/...")
    log_detail("Headers: 4")
    log_error("Build failed")

Diagnostics that are only useful when debugging go through the standard
``logging`` module instead.
"""

import sys
import threading
import time
from types import TracebackType
from typing import Optional, TextIO

_start_time: Optional[float] = None
_output_stream: Optional[TextIO] = None  # None = current sys.stdout
_verbose: bool = False
_lock = threading.Lock()


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Initialize the program timer.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_output_stream(output_stream: Optional[TextIO]) -> None:
    """Redirect output to a stream, or back to sys.stdout with None."""
    global _output_stream
    _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    global _verbose
    _verbose = verbose


def get_elapsed() -> float:
    """Elapsed seconds since init_timer() (initialized on first use)."""
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str) -> None:
    # Workers print concurrently; keep each line whole.
    line = f"{format_timestamp()} {message}\n"
    with _lock:
        stream = _output_stream if _output_stream is not None else sys.stdout
        stream.write(line)
        stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """
    Log a message with timestamp.

    Args:
        message: Message to log
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(message)


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    """Log an indented detail line."""
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


def log_error(message: str) -> None:
    # Multi-line compiler output keeps one prefix per line.
    for line in message.splitlines() or [""]:
        _print(f"ERROR: {line}")


def log_warning(message: str) -> None:
    _print(f"WARNING: {message}")


class TimedLogger:
    """
    Context manager that logs an operation and how long it took.

    Usage:
        with TimedLogger("Scanning contracts/"):
            files = scanner.scan(root)
    """

    def __init__(self, operation: str, verbose_only: bool = False):
        self.operation = operation
        self.verbose_only = verbose_only
        self.start_time = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        log(f"{self.operation}...", self.verbose_only)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        elapsed = time.time() - self.start_time
        if exc_type is None:
            log_detail(f"Done ({elapsed:.2f}s)", verbose_only=self.verbose_only)
        return None
