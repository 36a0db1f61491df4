"""Toolchain process execution.

Wraps subprocess so every compiler and linker invocation runs the same way:
- stdin is redirected to DEVNULL unless the caller passes one explicitly,
  so tools cannot steal keystrokes from the terminal
- on Windows, CREATE_NO_WINDOW keeps console windows from flashing up
- output is captured as text so it can be shown when the tool fails
"""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a single toolchain invocation."""

    command: tuple[str, ...]
    status: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.status == 0

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


def get_subprocess_creation_flags() -> int:
    """Return CREATE_NO_WINDOW on Windows, 0 elsewhere."""
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def safe_run(cmd: Union[str, Sequence[str]], **kwargs: Any) -> subprocess.CompletedProcess:
    """Execute subprocess.run with platform-specific flags.

    A string command is passed through unchanged (for shell=True callers).

    Note:
        - An explicit 'creationflags' is OR'd with the platform default.
        - An explicit 'stdin' (including None, to inherit) is used as-is.
    """
    default_flags = get_subprocess_creation_flags()

    if "creationflags" in kwargs:
        kwargs["creationflags"] = kwargs["creationflags"] | default_flags
    elif default_flags:
        kwargs["creationflags"] = default_flags

    if "stdin" not in kwargs:
        kwargs["stdin"] = subprocess.DEVNULL

    return subprocess.run(cmd if isinstance(cmd, str) else list(cmd), **kwargs)


def run_tool(
    tool: str,
    args: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ToolResult:
    """Run a compiler or linker and capture its output.

    Args:
        tool: Executable name or path
        args: Arguments passed to the tool
        cwd: Working directory for the tool
        env: Full environment for the tool (defaults to os.environ)

    Returns:
        ToolResult with the exit status and captured output

    Raises:
        FileNotFoundError: If the executable does not exist
    """
    command = (str(tool), *[str(a) for a in args])
    logger.debug(f"Running: {' '.join(command)} (cwd={cwd})")

    result = safe_run(
        command,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else os.environ.copy(),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
    )

    return ToolResult(
        command=command,
        status=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )
