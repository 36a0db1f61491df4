"""Microsoft Visual C++ toolchain adapter.

Environment Discovery:
    1. Locate vcvarsall.bat under "Program Files (x86)/Microsoft Visual Studio",
       picking the newest numbered (or Preview) release and the first edition
       that ships the script
    2. Run vcvarsall.bat for the host/target spec, then dump every variable
       with `set`
    3. Parse the dump and cache it as msvsenv_<spec>.json in the output
       directory; later builds load the cache instead

Compilation:
    cl /std:c++17 /EHsc /nologo /experimental:module /c /Fo<name>.obj
       /module:interface <source>

Linking:
    link /nologo /OUT:<root>.exe <objects...>

All tools run inside the output directory with the discovered environment.
"""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from ..build.errors import ToolchainDiscoveryError
from ..build.module_info import ModuleRecord
from ..output import log_detail, log_error
from .compiler import ICompilerAdapter
from .environment import ToolchainEnvironment, env_spec
from .host import get_host_architecture
from .process import ToolResult, run_tool, safe_run

logger = logging.getLogger(__name__)

ENV_MARKER = "__MSVS_ENV_VARS__"

_VERSION_DIR_PATTERN = re.compile(r"\d+")


def find_vcvarsall(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Locate the MSVC environment setup script.

    Args:
        environ: Environment to read "ProgramFiles(x86)" from (defaults to os.environ)

    Returns:
        Path to vcvarsall.bat

    Raises:
        ToolchainDiscoveryError: If no Visual Studio installation is found
    """
    environ = os.environ if environ is None else environ

    base = environ.get("ProgramFiles(x86)")
    if not base:
        raise ToolchainDiscoveryError('Unable to find "Program Files (x86)" directory')

    vs_root = Path(base) / "Microsoft Visual Studio"
    if not vs_root.is_dir():
        raise ToolchainDiscoveryError(f"Visual Studio is not installed under {vs_root}")

    versions = sorted(
        child.name
        for child in vs_root.iterdir()
        if child.is_dir() and (_VERSION_DIR_PATTERN.search(child.name) or child.name == "Preview")
    )
    if not versions:
        raise ToolchainDiscoveryError("Unable to find Visual Studio version directories")

    version_dir = vs_root / versions[-1]
    for edition in sorted(version_dir.iterdir()):
        candidate = edition / "VC" / "Auxiliary" / "Build" / "vcvarsall.bat"
        if candidate.exists():
            return candidate

    raise ToolchainDiscoveryError(f"Cannot find a Visual Studio installation with vcvarsall.bat in {version_dir}")


def parse_set_output(output: str, marker: str = ENV_MARKER) -> Dict[str, str]:
    """Parse the output of cmd's `set` command into a dictionary.

    Everything up to and including the marker line is vcvarsall chatter and is
    skipped. Each remaining line is NAME=value.
    """
    start = output.find(marker)
    if start < 0:
        raise ToolchainDiscoveryError("vcvarsall.bat did not produce an environment dump")

    variables: Dict[str, str] = {}
    for line in output[start + len(marker):].splitlines():
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key:
            variables[key] = value.strip()
    return variables


class MsvcCompiler(ICompilerAdapter):
    """Builds C++ modules with cl.exe and link.exe."""

    name = "msvc"

    CL_FLAGS = ("/std:c++17", "/EHsc", "/nologo", "/experimental:module")

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """Initialize MSVC adapter.

        Args:
            environ: Process environment used for discovery (defaults to os.environ)
        """
        self._environ = os.environ if environ is None else environ
        self.output_dir: Optional[Path] = None
        self.environment: Optional[ToolchainEnvironment] = None

    def host_architecture(self) -> str:
        return get_host_architecture(self._environ)

    def initialize(self, output_dir: Path, host: str, target: str) -> None:
        self.output_dir = Path(output_dir)
        self.environment = self._load_environment(host, target)

    def module_output_file(self, name: str) -> str:
        return f"{name}.obj"

    def link_output_file(self, name: str) -> str:
        return f"{name}.exe"

    def compile_module(self, record: ModuleRecord) -> int:
        output = record.output_path.name if record.output_path else self.module_output_file(record.name)
        result = self._run("cl", [*self.CL_FLAGS, "/c", f"/Fo{output}", "/module:interface", str(record.filename)])
        return result.status

    def link(self, outputs: Sequence[Path], output_file: Path) -> int:
        result = self._run("link", ["/nologo", f"/OUT:{Path(output_file).name}", *[str(p) for p in outputs]])
        return result.status

    def _load_environment(self, host: str, target: str) -> ToolchainEnvironment:
        """Load the cached environment for host/target, discovering it if needed."""
        if self.output_dir is None:
            raise ToolchainDiscoveryError("MSVC toolchain used before initialize()")
        cache_file = ToolchainEnvironment.cache_path(self.output_dir, "msvsenv", host, target)

        cached = ToolchainEnvironment.load(cache_file)
        if cached is not None:
            log_detail(f"Using cached MSVC environment {cache_file.name}", verbose_only=True)
            return cached

        spec = env_spec(host, target)
        vcvarsall = find_vcvarsall(self._environ)
        log_detail(f"Discovering MSVC environment ({spec}) via {vcvarsall}")

        command = f'"{vcvarsall}" {spec} && echo {ENV_MARKER} && set'
        try:
            result = safe_run(command, shell=True, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise ToolchainDiscoveryError(f"Failed to run {vcvarsall}: {e}") from e

        if result.returncode != 0:
            raise ToolchainDiscoveryError(f"{vcvarsall} {spec} failed with status {result.returncode}")

        environment = ToolchainEnvironment(host=host, target=target, variables=parse_set_output(result.stdout))
        environment.save(cache_file)
        return environment

    def _tool_path(self, tool: str) -> str:
        """Resolve a tool against the PATH of the discovered environment."""
        if self.environment is None:
            raise ToolchainDiscoveryError("MSVC toolchain used before initialize()")
        search_path = next(
            (value for key, value in self.environment.variables.items() if key.upper() == "PATH"),
            None,
        )
        return shutil.which(tool, path=search_path) or tool

    def _run(self, tool: str, args: Sequence[str]) -> ToolResult:
        if self.environment is None or self.output_dir is None:
            raise ToolchainDiscoveryError("MSVC toolchain used before initialize()")

        try:
            result = run_tool(self._tool_path(tool), args, cwd=self.output_dir, env=self.environment.variables)
        except OSError as e:
            raise ToolchainDiscoveryError(f"Unable to run {tool}: {e}") from e

        if not result.ok:
            log_error(f"{tool} exited with status {result.status}")
            log_detail(f"{tool} {' '.join(args)}")
            for line in (result.stdout + result.stderr).splitlines():
                log_detail(line)
        return result
