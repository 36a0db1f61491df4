"""
Build component factory for modbuild.

Centralizes how a BuildConfig is turned into the resolver, compiler adapter
and orchestrator for a build run, so the CLI and library callers wire things
up the same way.
"""

from typing import TYPE_CHECKING

from .import_scanner import ImportScanner
from .orchestrator import BuildOrchestrator
from .resolver import ModuleResolver
from .walker import DependencyWalker

if TYPE_CHECKING:
    from ..config import BuildConfig
    from ..toolchain.compiler import ICompilerAdapter


class BuildComponentFactory:
    """
    Factory for creating build components from a BuildConfig.

    Example usage:
        config = load_config(Path.cwd())
        orchestrator = BuildComponentFactory.create_orchestrator(config)
        result = orchestrator.build("scratch")
    """

    @staticmethod
    def create_resolver(config: "BuildConfig") -> ModuleResolver:
        """Create a resolver for the configured source and test roots."""
        return ModuleResolver(
            source_dir=config.source_dir,
            test_dir=config.test_dir,
            source_extension=config.source_extension,
            test_namespace=config.test_namespace,
            external_namespaces=config.external_namespaces,
        )

    @staticmethod
    def create_compiler(config: "BuildConfig") -> "ICompilerAdapter":
        """Create the configured compiler adapter.

        Raises:
            ToolchainDiscoveryError: If the compiler name is unknown
        """
        from ..toolchain import get_compiler

        return get_compiler(config.compiler)

    @staticmethod
    def create_walker(config: "BuildConfig") -> DependencyWalker:
        """Create a walker for a graph-only traversal."""
        return DependencyWalker(BuildComponentFactory.create_resolver(config), ImportScanner())

    @staticmethod
    def create_orchestrator(config: "BuildConfig", show_progress: bool = True) -> BuildOrchestrator:
        """Create an orchestrator with resolver and compiler from config."""
        return BuildOrchestrator(
            compiler=BuildComponentFactory.create_compiler(config),
            resolver=BuildComponentFactory.create_resolver(config),
            output_dir=config.output_dir,
            scanner=ImportScanner(),
            target=config.target,
            verbose=config.verbose,
            show_progress=show_progress,
        )
