"""
Build system components for modbuild.

This package provides:
- Module resolution (module name -> source file)
- Import scanning
- Dependency walking with cycle detection
- Incremental build orchestration
"""

from .errors import (
    BuildError,
    CompileError,
    ConfigError,
    CycleError,
    LinkError,
    ResolutionError,
    ToolchainDiscoveryError,
)
from .import_scanner import ImportScanner
from .module_info import BuildPhase, BuildResult, ModuleRecord, VisitState
from .orchestrator import BuildOrchestrator
from .resolver import ModuleResolver
from .walker import DependencyWalker

__all__ = [
    "BuildError",
    "BuildOrchestrator",
    "BuildPhase",
    "BuildResult",
    "CompileError",
    "ConfigError",
    "CycleError",
    "DependencyWalker",
    "ImportScanner",
    "LinkError",
    "ModuleRecord",
    "ModuleResolver",
    "ResolutionError",
    "ToolchainDiscoveryError",
    "VisitState",
]
