"""GCC toolchain adapter.

Uses g++ with C++20 modules (-fmodules-ts). Compiled module interfaces are
written to gcm.cache/ inside the output directory, which is why every tool
runs with the output directory as its working directory.

Compiler Discovery:
    - $CXX if set, otherwise g++ on PATH for native builds
    - <triple>-g++ for cross builds (e.g. aarch64-linux-gnu-g++)
    The resolved compiler is cached as gccenv_<spec>.json in the output
    directory.
"""

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from ..build.errors import ToolchainDiscoveryError
from ..build.module_info import ModuleRecord
from ..output import log_detail, log_error
from .compiler import ICompilerAdapter
from .environment import ToolchainEnvironment
from .host import get_host_architecture
from .process import ToolResult, run_tool

logger = logging.getLogger(__name__)

# Architecture token to GNU target triple, used to find cross compilers
TARGET_TRIPLES = {
    "x64": "x86_64-linux-gnu",
    "x86": "i686-linux-gnu",
    "arm64": "aarch64-linux-gnu",
}


class GccCompiler(ICompilerAdapter):
    """Builds C++ modules with g++."""

    name = "gcc"

    COMPILE_FLAGS = ("-std=c++20", "-fmodules-ts")

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ
        self.output_dir: Optional[Path] = None
        self.environment: Optional[ToolchainEnvironment] = None

    @property
    def cxx(self) -> str:
        if self.environment is None:
            raise ToolchainDiscoveryError("GCC toolchain used before initialize()")
        return self.environment.variables["CXX"]

    def host_architecture(self) -> str:
        return get_host_architecture(self._environ)

    def initialize(self, output_dir: Path, host: str, target: str) -> None:
        self.output_dir = Path(output_dir)
        cache_file = ToolchainEnvironment.cache_path(self.output_dir, "gccenv", host, target)

        cached = ToolchainEnvironment.load(cache_file)
        if cached is not None and self._is_current(cached, host, target):
            log_detail(f"Using cached GCC environment {cache_file.name}", verbose_only=True)
            self.environment = cached
            return

        cxx = self._find_compiler(host, target)
        log_detail(f"Using C++ compiler {cxx}")
        self.environment = ToolchainEnvironment(host=host, target=target, variables={"CXX": cxx})
        self.environment.save(cache_file)

    def module_output_file(self, name: str) -> str:
        return f"{name}.o"

    def link_output_file(self, name: str) -> str:
        return f"{name}.exe" if sys.platform == "win32" else name

    def compile_module(self, record: ModuleRecord) -> int:
        output = record.output_path if record.output_path else Path(self.module_output_file(record.name))
        result = self._run([*self.COMPILE_FLAGS, "-c", str(record.filename), "-o", str(output)])
        return result.status

    def link(self, outputs: Sequence[Path], output_file: Path) -> int:
        result = self._run([*[str(p) for p in outputs], "-o", str(output_file)])
        return result.status

    def _is_current(self, cached: ToolchainEnvironment, host: str, target: str) -> bool:
        """True if a cached environment still names the compiler discovery would pick."""
        cached_cxx = cached.variables.get("CXX", "")
        if not cached_cxx or not Path(cached_cxx).exists():
            return False

        requested = self._environ.get("CXX")
        if target != host or not requested:
            return True

        resolved = shutil.which(requested, path=self._environ.get("PATH"))
        if resolved is None or Path(resolved) != Path(cached_cxx):
            logger.debug(f"CXX={requested} differs from cached compiler {cached_cxx}, rediscovering")
            return False
        return True

    def _find_compiler(self, host: str, target: str) -> str:
        """Locate the C++ compiler for a host/target pair.

        Raises:
            ToolchainDiscoveryError: If no suitable compiler is on PATH
        """
        search_path = self._environ.get("PATH")

        if target == host:
            candidate = self._environ.get("CXX") or "g++"
        else:
            triple = TARGET_TRIPLES.get(target)
            if triple is None:
                raise ToolchainDiscoveryError(f"Unsupported target architecture: {target}")
            candidate = f"{triple}-g++"

        resolved = shutil.which(candidate, path=search_path)
        if resolved is None:
            raise ToolchainDiscoveryError(f"C++ compiler not found: {candidate}")
        return resolved

    def _env(self) -> Dict[str, str]:
        env = dict(self._environ)
        env["CXX"] = self.cxx
        return env

    def _run(self, args: Sequence[str]) -> ToolResult:
        if self.output_dir is None:
            raise ToolchainDiscoveryError("GCC toolchain used before initialize()")

        try:
            result = run_tool(self.cxx, args, cwd=self.output_dir, env=self._env())
        except OSError as e:
            raise ToolchainDiscoveryError(f"Unable to run {self.cxx}: {e}") from e

        if not result.ok:
            log_error(f"{Path(self.cxx).name} exited with status {result.status}")
            log_detail(result.command_line)
            for line in (result.stdout + result.stderr).splitlines():
                log_detail(line)
        return result
