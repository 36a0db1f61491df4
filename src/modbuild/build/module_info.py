"""Data models for a build run.

Defines the core types shared by the walker and the orchestrator:
- VisitState: Per-module traversal state used for cycle detection
- ModuleRecord: A single module discovered in the import graph
- BuildPhase: Where a build run currently is
- BuildResult: Outcome of a successful build run
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class VisitState(Enum):
    """Traversal state of a module within one walk."""

    UNVISITED = "unvisited"
    VISITING = "visiting"
    VISITED = "visited"


class BuildPhase(Enum):
    """Phase of a build run."""

    NOT_STARTED = "not_started"
    WALKING = "walking"
    COMPILING = "compiling"
    LINKING = "linking"
    LINK_SKIPPED = "link_skipped"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ModuleRecord:
    """A module discovered by the dependency walker.

    Attributes:
        name: Namespace-qualified module name (e.g. "Scanner", "test.scanning")
        filename: Resolved source file
        imports: Imported module names, in source order
        is_root: True for the module the walk started from
        output_path: Compiled artifact path (attached by the orchestrator)
        compiled: True if the module was (re)compiled during this run
    """

    name: str
    filename: Path
    imports: List[str] = field(default_factory=list)
    is_root: bool = False
    output_path: Optional[Path] = None
    compiled: bool = False


@dataclass
class BuildResult:
    """Result of a completed build run.

    Attributes:
        artifact_path: Resolved path of the linked artifact
        compiled: Names of modules compiled during the run, in compile order
        outputs: Module artifacts passed to the linker, dependencies first
        linked: True if the link step ran, False on a full cache hit
        build_time: Wall-clock duration of the run in seconds
        phase: Final phase (always DONE for a returned result)
    """

    artifact_path: Path
    compiled: List[str]
    outputs: List[Path]
    linked: bool
    build_time: float
    phase: BuildPhase = BuildPhase.DONE

    @property
    def up_to_date(self) -> bool:
        """True if nothing was compiled or linked."""
        return not self.compiled and not self.linked
