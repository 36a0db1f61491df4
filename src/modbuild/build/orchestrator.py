"""
Incremental build orchestration.

Drives a build run from a root module name to a linked artifact:

    [1/3] Initialize the toolchain (environment discovery, cached on disk)
    [2/3] Walk the import graph; compile each stale module, dependencies first
    [3/3] Link, unless nothing was compiled and the artifact already exists

A module is stale when any of the following holds:
    - its artifact does not exist
    - its source was modified at or after its artifact
    - one of its direct imports was recompiled during this run

The last rule cascades: recompiling a module invalidates everything that
imports it, regardless of timestamps, since the artifacts of unchanged
dependents may no longer be compatible with the new interface.

A run is strictly sequential and fails fast: the first non-zero status from
the toolchain stops the walk, and no link is attempted.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Collection, List, Optional, Set

from tqdm import tqdm

from ..output import TimedLogger, log_detail, log_module, log_phase
from .errors import CompileError, LinkError
from .import_scanner import ImportScanner
from .module_info import BuildPhase, BuildResult, ModuleRecord
from .resolver import ModuleResolver
from .walker import DependencyWalker

if TYPE_CHECKING:
    from ..toolchain.compiler import ICompilerAdapter

logger = logging.getLogger(__name__)

TOTAL_PHASES = 3


@dataclass
class _BuildRun:
    """State owned by a single build run."""

    compiled: List[str] = field(default_factory=list)
    compiled_set: Set[str] = field(default_factory=set)
    outputs: List[Path] = field(default_factory=list)

    def mark_compiled(self, name: str) -> None:
        self.compiled.append(name)
        self.compiled_set.add(name)


class BuildOrchestrator:
    """
    Orchestrates an incremental module build.

    The orchestrator owns no toolchain knowledge: compiling and linking go
    through the ICompilerAdapter it is given.

    Example usage:
        orchestrator = BuildOrchestrator(
            compiler=get_compiler("gcc"),
            resolver=ModuleResolver(project / "src", project),
            output_dir=project / "build",
        )
        result = orchestrator.build("scratch")
        print(result.artifact_path)
    """

    def __init__(
        self,
        compiler: "ICompilerAdapter",
        resolver: ModuleResolver,
        output_dir: Path,
        scanner: Optional[ImportScanner] = None,
        target: Optional[str] = None,
        verbose: bool = False,
        show_progress: bool = True,
    ):
        """
        Initialize build orchestrator.

        Args:
            compiler: Toolchain adapter used to compile and link
            resolver: Maps module names to source files
            output_dir: Directory receiving module artifacts and the linked artifact
            scanner: Import scanner (defaults to ImportScanner())
            target: Target architecture (defaults to the host architecture)
            verbose: Log every module decision
            show_progress: Show a progress bar over modules when not verbose
        """
        self.compiler = compiler
        self.resolver = resolver
        self.output_dir = Path(output_dir)
        self.scanner = scanner if scanner is not None else ImportScanner()
        self.target = target
        self.verbose = verbose
        self.show_progress = show_progress
        self.phase = BuildPhase.NOT_STARTED

    def build(self, main: str) -> BuildResult:
        """Build the root module and everything it imports.

        Args:
            main: Root module name

        Returns:
            BuildResult whose artifact_path is the linked artifact

        Raises:
            ResolutionError: If a module's source cannot be read
            CycleError: If the import graph has a cycle
            CompileError: If a module fails to compile
            LinkError: If linking fails
            ToolchainDiscoveryError: If the toolchain cannot be initialized
        """
        start_time = time.time()
        try:
            return self._build(main, start_time)
        except BaseException as e:
            logger.debug(f"Build of {main} failed while {self.phase.value}: {e!r}")
            self.phase = BuildPhase.FAILED
            raise

    def _build(self, main: str, start_time: float) -> BuildResult:
        main = self.resolver.canonical_name(main)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        host = self.compiler.host_architecture()
        target = self.target or host

        with TimedLogger(f"Initializing {self.compiler.name or 'compiler'} toolchain ({target})", phase=(1, TOTAL_PHASES)):
            self.compiler.initialize(self.output_dir, host, target)

        self.phase = BuildPhase.WALKING
        log_phase(2, TOTAL_PHASES, f"Compiling {target} -> {self.output_dir}")

        run = _BuildRun()
        walker = DependencyWalker(self.resolver, self.scanner)

        with tqdm(
            desc="Building modules",
            unit="module",
            ncols=80,
            leave=False,
            disable=self.verbose or not self.show_progress,
        ) as pbar:

            def visit(record: ModuleRecord) -> None:
                self._visit(record, run)
                pbar.update(1)

            walker.walk(main, visit)

        up_to_date = len(run.outputs) - len(run.compiled)
        log_detail(f"Compiled {len(run.compiled)} module(s), {up_to_date} up to date")

        link_path = self.output_dir / self.compiler.link_output_file(main)
        linked = self._link(run, link_path)

        self.phase = BuildPhase.DONE
        return BuildResult(
            artifact_path=link_path.resolve(),
            compiled=list(run.compiled),
            outputs=list(run.outputs),
            linked=linked,
            build_time=time.time() - start_time,
        )

    def _visit(self, record: ModuleRecord, run: _BuildRun) -> None:
        """Compile a module if it is stale and record its artifact."""
        record.output_path = self.output_dir / self.compiler.module_output_file(record.name)
        run.outputs.append(record.output_path)

        reasons = self.staleness_reasons(record, run.compiled_set)
        if not reasons:
            log_module("cached", record.name)
            return

        logger.debug(f"{record.name} is stale: {'; '.join(reasons)}")
        self.phase = BuildPhase.COMPILING
        log_module("compile", record.name, record.output_path.name)

        status = self.compiler.compile_module(record)
        if status != 0:
            raise CompileError(record.name, status)

        record.compiled = True
        run.mark_compiled(record.name)

    def _link(self, run: _BuildRun, link_path: Path) -> bool:
        """Link if anything was compiled or the artifact is missing.

        Returns:
            True if the link step ran
        """
        if not run.compiled and link_path.exists():
            self.phase = BuildPhase.LINK_SKIPPED
            log_phase(3, TOTAL_PHASES, f"{link_path.name} is up to date, skipping link")
            return False

        self.phase = BuildPhase.LINKING
        log_phase(3, TOTAL_PHASES, f"Linking {link_path.name}")

        status = self.compiler.link(run.outputs, link_path)
        if status != 0:
            raise LinkError(link_path.name, status)
        return True

    @staticmethod
    def staleness_reasons(record: ModuleRecord, compiled: Collection[str]) -> List[str]:
        """Explain why a module needs compiling.

        Args:
            record: Module with output_path attached
            compiled: Names of modules compiled so far in this run

        Returns:
            List of reasons; empty if the module's artifact can be reused
        """
        reasons = []

        recompiled = [name for name in record.imports if name in compiled]
        if recompiled:
            reasons.append(f"dependency recompiled: {', '.join(recompiled)}")

        output = record.output_path
        if output is None or not output.exists():
            reasons.append("output does not exist")
        elif is_newer(record.filename, output):
            reasons.append("source modified since last compile")

        return reasons


def is_newer(first: Path, second: Path) -> bool:
    """True if first was modified at or after second, or either is missing."""
    try:
        return first.stat().st_mtime_ns >= second.stat().st_mtime_ns
    except FileNotFoundError:
        return True
