"""Build error hierarchy.

Every failure a build run can hit is a BuildError subclass. None of them are
recovered from: structural errors (resolution, cycles) abort the walk, and
toolchain errors (compile, link) abort the run on the first non-zero status.

Error Kinds:
    ResolutionError: A module name cannot be mapped to a readable source file
    CycleError: An import chain re-enters a module that is still being walked
    CompileError: The toolchain reported a non-zero status compiling a module
    LinkError: The toolchain reported a non-zero status linking
    ToolchainDiscoveryError: The toolchain or its environment cannot be found
"""

from pathlib import Path
from typing import List, Optional, Sequence


class BuildError(Exception):
    """Base class for all modbuild errors."""

    pass


class ConfigError(BuildError):
    """Raised when the build configuration is invalid."""

    pass


class ResolutionError(BuildError):
    """Raised when a module cannot be mapped to an existing source file."""

    def __init__(self, module_name: Optional[str], path: Optional[Path] = None, reason: str = ""):
        self.module_name = module_name
        self.path = path
        self.reason = reason

        if module_name and path:
            message = f"Cannot resolve module '{module_name}': {path}"
        elif path:
            message = f"Cannot read module source: {path}"
        else:
            message = f"Cannot resolve module '{module_name}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class CycleError(BuildError):
    """Raised when the import graph contains a cycle.

    Attributes:
        module_name: The module that was re-entered while still being visited
        chain: Import chain from the re-entered module back to itself
    """

    def __init__(self, module_name: str, chain: Sequence[str] = ()):
        self.module_name = module_name
        self.chain: List[str] = list(chain)

        message = f"Cycle detected for module {module_name}"
        if self.chain:
            message = f"{message}: {' -> '.join(self.chain)}"
        super().__init__(message)


class CompileError(BuildError):
    """Raised when the toolchain fails to compile a module."""

    def __init__(self, module_name: str, status: int):
        self.module_name = module_name
        self.status = status
        super().__init__(f"Compilation of module '{module_name}' failed with status {status}")


class LinkError(BuildError):
    """Raised when the toolchain fails to link the final artifact."""

    def __init__(self, output_file: str, status: int):
        self.output_file = output_file
        self.status = status
        super().__init__(f"Linking {output_file} failed with status {status}")


class ToolchainDiscoveryError(BuildError):
    """Raised when the toolchain or its environment cannot be located."""

    pass
