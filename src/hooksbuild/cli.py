"""
Command-line interface for hooksbuild.

This module provides the `hooksbuild` CLI tool for compiling C hooks to
WebAssembly with the remote compile service.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from hooksbuild import __version__
from hooksbuild.client import RemoteBuildClient
from hooksbuild.config import BuildConfig
from hooksbuild.coordinator import BatchResult, BuildCoordinator
from hooksbuild.errors import FileSystemError, HooksBuildError, InvalidInputError
from hooksbuild.output import init_timer, log, log_detail, log_error, set_verbose

DEFAULT_OUT_DIR = Path("build")


@dataclass
class CompileArgs:
    """Arguments for the compile-c command."""

    in_path: Optional[Path]
    out_dir: Optional[Path] = DEFAULT_OUT_DIR
    headers: Optional[Path] = None
    verbose: bool = False


def _validate_paths(args: CompileArgs) -> tuple[Path, Path]:
    """Check the command arguments and return the input and output paths.

    Raises:
        InvalidInputError: If a required path is missing
        FileSystemError: If a path does not exist or is the wrong kind
    """
    if args.in_path is None:
        raise InvalidInputError("Input path is required.")
    if args.out_dir is None:
        raise InvalidInputError("Output directory path is required.")
    if not args.in_path.exists():
        raise FileSystemError(f"Input path does not exist: {args.in_path}", args.in_path)
    if args.out_dir.exists() and not args.out_dir.is_dir():
        raise FileSystemError("Output path must be a directory.", args.out_dir)
    if args.headers is not None:
        if not args.headers.exists():
            raise FileSystemError(f"Headers path does not exist: {args.headers}", args.headers)
        if not args.headers.is_dir():
            raise FileSystemError("headers path must be a directory.", args.headers)
    return args.in_path, args.out_dir


def render_summary(result: BatchResult, console: Console) -> None:
    """Print one row per compilation unit with its outcome."""
    table = Table(show_edge=False, box=None, padding=(0, 1), expand=False)
    table.add_column("Unit", style="bold", no_wrap=True)
    table.add_column("Result", no_wrap=True)
    table.add_column("Output", no_wrap=True)
    table.add_column("Time", justify="right", no_wrap=True)

    for outcome in result.outcomes.values():
        if outcome.success:
            status = Text("ok", style="green")
        elif outcome.artifact_path is not None:
            status = Text("failed", style="red")
        else:
            status = Text("error", style="red")
        output = str(outcome.artifact_path) if outcome.artifact_path else str(outcome.error or "")
        table.add_row(outcome.source.name, status, output, f"{outcome.elapsed:.2f}s")

    console.print(table)


def compile_c_command(args: CompileArgs, console: Optional[Console] = None) -> None:
    """Compile C sources to WebAssembly.

    Examples:
        hooksbuild compile-c contracts/             # Build every .c file
        hooksbuild compile-c contracts/base.c      # Build one file
        hooksbuild compile-c contracts/ out/ --headers headers/
    """
    console = console if console is not None else Console()
    init_timer()
    set_verbose(args.verbose)

    try:
        in_path, out_dir = _validate_paths(args)

        if not out_dir.exists():
            try:
                out_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileSystemError(f"Cannot create output directory {out_dir}: {e}", out_dir) from e
            log(f"Created directory: {out_dir}")

        config = BuildConfig.from_env()
        coordinator = BuildCoordinator(
            client=RemoteBuildClient.from_config(config),
            max_workers=config.max_workers,
        )

        if in_path.is_dir():
            result = coordinator.run(in_path, out_dir, args.headers)
            if result.outcomes:
                render_summary(result, console)
            result.raise_first_error()
        else:
            outcome = coordinator.build_one(in_path, out_dir, args.headers)
            log_detail(f"Artifact: {outcome.artifact_path}")

        console.print("[bold green]✓ Build successful![/bold green]")
        sys.exit(0)

    except HooksBuildError as e:
        log_error(f"{type(e).__name__}: {e}")
        console.print("[bold red]✗ Build failed![/bold red]")
        sys.exit(1)

    except KeyboardInterrupt:
        console.print("[bold yellow]✗ Build interrupted[/bold yellow]")
        sys.exit(130)  # Standard exit code for SIGINT


def main(argv: Optional[list[str]] = None) -> None:
    """hooksbuild - Remote C to WebAssembly build client."""
    parser = argparse.ArgumentParser(
        prog="hooksbuild",
        description="Compile C hooks to WebAssembly with a remote compile service",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"hooksbuild {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    compile_parser = subparsers.add_parser(
        "compile-c",
        help="Compile a .c file or a directory of .c files",
    )
    compile_parser.add_argument(
        "in_path",
        type=Path,
        help="A .c file or a directory to scan for .c files",
    )
    compile_parser.add_argument(
        "out_dir",
        nargs="?",
        type=Path,
        default=DEFAULT_OUT_DIR,
        help="Output directory for .wasm and .log files (default: build)",
    )
    compile_parser.add_argument(
        "--headers",
        type=Path,
        default=None,
        help="Directory to scan for .h files shared by every unit",
    )
    compile_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    parsed_args = parser.parse_args(argv)

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    compile_c_command(
        CompileArgs(
            in_path=parsed_args.in_path,
            out_dir=parsed_args.out_dir,
            headers=parsed_args.headers,
            verbose=parsed_args.verbose,
        )
    )


if __name__ == "__main__":
    main()
