"""
Timestamped build output for modbuild.

Every line is prefixed with the time elapsed since the build started, in
MM:SS.cc format, so slow steps stand out in the log.

Example output:
    00:00.01 modbuild v0.1.0
    00:00.02 [1/3] Initializing gcc toolchain (x64)...
    00:00.05 [2/3] Compiling modules -> build
    00:00.05       [compile] BasicTypes -> BasicTypes.o
    00:00.41       [cached] UnicodeData
    00:00.42 [3/3] Linking scratch

Usage:
    from modbuild.output import log, log_phase, log_detail

    log_phase(1, 3, "Initializing toolchain...")
    log_detail("Environment cached", verbose_only=True)
"""

import sys
import time
from types import TracebackType
from typing import Optional, TextIO

_start_time: Optional[float] = None
_output_stream: TextIO = sys.stdout
_verbose: bool = True


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Start the elapsed-time clock.

    Called automatically on first use if the CLI did not call it.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    """Enable or disable verbose-only messages."""
    global _verbose
    _verbose = verbose


def get_elapsed() -> float:
    """Seconds since init_timer()."""
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    """Format the elapsed time as MM:SS.cc."""
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str) -> None:
    _output_stream.write(f"{format_timestamp()} {message}\n")
    _output_stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """Log a message with timestamp."""
    if verbose_only and not _verbose:
        return
    _print(message)


def log_phase(phase: int, total: int, message: str, verbose_only: bool = False) -> None:
    """
    Log a build phase message.

    Format: [N/M] message
    """
    if verbose_only and not _verbose:
        return
    _print(f"[{phase}/{total}] {message}")


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    """Log an indented detail message."""
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


def log_module(action: str, name: str, output: Optional[str] = None, verbose_only: bool = True) -> None:
    """
    Log a per-module decision.

    Format: [action] name -> output

    Args:
        action: What happened to the module (e.g. 'compile', 'cached')
        name: Module name
        output: Optional artifact name
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    suffix = f" -> {output}" if output else ""
    _print(f"      [{action}] {name}{suffix}")


def log_header(title: str, version: str) -> None:
    """Log the program banner."""
    _print(f"{title} v{version}")
    _print("")


def log_build_complete(build_time: float, verbose_only: bool = False) -> None:
    """Log build completion time."""
    if verbose_only and not _verbose:
        return
    _print(f"Build time: {build_time:.2f}s")


def log_error(message: str) -> None:
    """Log an error message."""
    _print(f"ERROR: {message}")


def log_warning(message: str) -> None:
    """Log a warning message."""
    _print(f"WARNING: {message}")


class TimedLogger:
    """
    Context manager that logs an operation and how long it took.

    Usage:
        with TimedLogger("Discovering toolchain environment") as timed:
            timed.detail("Using cached environment")
    """

    def __init__(self, operation: str, phase: Optional[tuple[int, int]] = None, verbose_only: bool = False):
        self.operation = operation
        self.phase = phase
        self.verbose_only = verbose_only
        self.start_time = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        if self.phase:
            log_phase(self.phase[0], self.phase[1], f"{self.operation}...", self.verbose_only)
        else:
            log(f"{self.operation}...", self.verbose_only)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_tb  # Unused
        elapsed = time.time() - self.start_time
        if exc_type is None:
            log_detail(f"Done ({elapsed:.2f}s)", verbose_only=True)
        elif not issubclass(exc_type, KeyboardInterrupt):
            log_detail(f"Failed after {elapsed:.2f}s: {exc_val}")
        return None

    def detail(self, message: str) -> None:
        """Log a detail message within this operation."""
        log_detail(message, verbose_only=self.verbose_only)
