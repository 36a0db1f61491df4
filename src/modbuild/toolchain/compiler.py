"""Compiler adapter interface.

The orchestrator never runs a compiler itself. It talks to an ICompilerAdapter,
which wraps one native toolchain (MSVC, GCC, ...) and knows its flags, artifact
names and environment.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from ..build.module_info import ModuleRecord


class ICompilerAdapter(ABC):
    """Capabilities the build orchestrator requires from a toolchain."""

    #: Registry name of the adapter (e.g. "msvc", "gcc")
    name: str = ""

    @abstractmethod
    def initialize(self, output_dir: Path, host: str, target: str) -> None:
        """Prepare the toolchain for builds into output_dir.

        May perform expensive environment discovery; must be idempotent by
        caching the discovered environment on disk per (host, target).

        Raises:
            ToolchainDiscoveryError: If the toolchain cannot be located
        """

    @abstractmethod
    def module_output_file(self, name: str) -> str:
        """Artifact file name for a compiled module (relative to output_dir)."""

    @abstractmethod
    def link_output_file(self, name: str) -> str:
        """Linked artifact file name for the root module (relative to output_dir)."""

    @abstractmethod
    def compile_module(self, record: ModuleRecord) -> int:
        """Compile one module into record.output_path.

        Returns:
            Toolchain exit status; non-zero is a hard failure
        """

    @abstractmethod
    def link(self, outputs: Sequence[Path], output_file: Path) -> int:
        """Link module artifacts (dependencies first) into output_file.

        Returns:
            Toolchain exit status; non-zero is a hard failure
        """

    @abstractmethod
    def host_architecture(self) -> str:
        """Host architecture token used to select cross-compilation variants."""
