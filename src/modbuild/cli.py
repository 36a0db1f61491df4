"""
Command-line interface for modbuild.

This module provides the `modbuild` CLI tool for building C++ module programs.
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from modbuild import __version__
from modbuild.build import BuildError, CompileError, LinkError
from modbuild.build.build_component_factory import BuildComponentFactory
from modbuild.build.clean import empty_dir
from modbuild.config import load_config
from modbuild.output import init_timer, log, log_build_complete, log_detail, log_header, set_verbose
from modbuild.toolchain.process import safe_run

console = Console(highlight=False)


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    main: str
    project_dir: Path
    output_dir: Optional[Path] = None
    compiler: Optional[str] = None
    target: Optional[str] = None
    clean: bool = False
    run: bool = False
    verbose: bool = False


@dataclass
class GraphArgs:
    """Arguments for the graph command."""

    main: str
    project_dir: Path
    verbose: bool = False


def _fail(title: str, detail: str) -> None:
    console.print()
    console.print(f"[bold red]✗ {title}[/bold red]")
    console.print()
    console.print(detail, markup=False)


def _unexpected(e: Exception, verbose: bool) -> None:
    _fail("Unexpected error", f"{type(e).__name__}: {e}")
    if verbose:
        import traceback

        console.print()
        console.print("Traceback:")
        console.print(traceback.format_exc(), markup=False)


def build_command(args: BuildArgs) -> None:
    """Build a program from its main module.

    Examples:
        modbuild build scratch                # Build src/scratch.cpp
        modbuild build test.scanning --run    # Build and run test/scanning.cpp
        modbuild build scratch --clean        # Rebuild everything
        modbuild build scratch -v             # Log every module decision
    """
    init_timer()
    set_verbose(args.verbose)
    log_header("modbuild", __version__)

    try:
        config = load_config(
            args.project_dir,
            output_dir=args.output_dir,
            compiler=args.compiler,
            target=args.target,
            verbose=args.verbose,
            clean=args.clean,
        )
        for key, value in config.to_dict().items():
            log_detail(f"{key}: {value}", verbose_only=True)

        if config.clean:
            log(f"Cleaning {config.output_dir}")
            empty_dir(config.output_dir, config.project_dir)

        orchestrator = BuildComponentFactory.create_orchestrator(config)
        result = orchestrator.build(args.main)

        console.print()
        if result.up_to_date:
            console.print("[bold green]✓ Up to date[/bold green]")
        else:
            console.print("[bold green]✓ Build successful![/bold green]")
        console.print(f"Output: {result.artifact_path}", markup=False)
        log_build_complete(result.build_time)

        if args.run:
            log(f"Running {result.artifact_path}")
            completed = safe_run([str(result.artifact_path)], stdin=None)
            log(f"Process exited with status: {completed.returncode}")
            sys.exit(completed.returncode)

        sys.exit(0)

    except CompileError as e:
        _fail("Build failed!", str(e))
        sys.exit(e.status)

    except LinkError as e:
        _fail("Link failed!", str(e))
        sys.exit(e.status)

    except BuildError as e:
        _fail("Build failed!", str(e))
        sys.exit(1)

    except KeyboardInterrupt:
        console.print()
        console.print("[bold yellow]✗ Build interrupted[/bold yellow]")
        sys.exit(130)  # Standard exit code for SIGINT

    except Exception as e:
        _unexpected(e, args.verbose)
        sys.exit(1)


def graph_command(args: GraphArgs) -> None:
    """Print the modules reachable from a main module in build order.

    Examples:
        modbuild graph scratch        # Dependency order
        modbuild graph scratch -v     # Include each module's imports
    """
    try:
        config = load_config(args.project_dir)
        walker = BuildComponentFactory.create_walker(config)

        records = []
        walker.walk(args.main, records.append)

        for index, record in enumerate(records, start=1):
            console.print(f"{index:3d}. {record.name}", markup=False)
            if args.verbose:
                console.print(f"       {record.filename}", markup=False)
                for name in record.imports:
                    console.print(f"       import {name}", markup=False)

        sys.exit(0)

    except BuildError as e:
        _fail("Graph failed!", str(e))
        sys.exit(1)

    except KeyboardInterrupt:
        console.print()
        console.print("[bold yellow]✗ Interrupted[/bold yellow]")
        sys.exit(130)  # Standard exit code for SIGINT

    except Exception as e:
        _unexpected(e, args.verbose)
        sys.exit(1)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "main",
        help="Main module name (e.g. scratch, test.scanning)",
    )
    parser.add_argument(
        "-p",
        "--project-dir",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the modbuild CLI."""
    parser = argparse.ArgumentParser(
        prog="modbuild",
        description="modbuild - incremental C++ module build tool",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"modbuild {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build a program from its main module",
    )
    _add_common_arguments(build_parser)
    build_parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Output directory (default: build/ or modbuild.ini)",
    )
    build_parser.add_argument(
        "--compiler",
        default=None,
        help="Compiler adapter: msvc or gcc (default: platform specific)",
    )
    build_parser.add_argument(
        "--target",
        default=None,
        help="Target architecture: x64, x86 or arm64 (default: host)",
    )
    build_parser.add_argument(
        "-c",
        "--clean",
        action="store_true",
        help="Remove build artifacts before building",
    )
    build_parser.add_argument(
        "-r",
        "--run",
        action="store_true",
        help="Run the program after a successful build",
    )

    # Graph command
    graph_parser = subparsers.add_parser(
        "graph",
        help="Print modules in dependency order without building",
    )
    _add_common_arguments(graph_parser)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """modbuild - incremental C++ module build tool."""
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if not parsed_args.project_dir.is_dir():
        console.print(f"[bold red]✗ Error: Path is not a directory: {parsed_args.project_dir}[/bold red]")
        sys.exit(2)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                main=parsed_args.main,
                project_dir=parsed_args.project_dir,
                output_dir=parsed_args.output_dir,
                compiler=parsed_args.compiler,
                target=parsed_args.target,
                clean=parsed_args.clean,
                run=parsed_args.run,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "graph":
        graph_command(
            GraphArgs(
                main=parsed_args.main,
                project_dir=parsed_args.project_dir,
                verbose=parsed_args.verbose,
            )
        )


if __name__ == "__main__":
    main()
