"""modbuild - incremental, dependency-ordered C++ module builds."""

__version__ = "0.1.0"

from .build import BuildOrchestrator, BuildResult, DependencyWalker, ImportScanner, ModuleResolver  # noqa: E402
from .config import BuildConfig, load_config  # noqa: E402

__all__ = [
    "BuildConfig",
    "BuildOrchestrator",
    "BuildResult",
    "DependencyWalker",
    "ImportScanner",
    "ModuleResolver",
    "__version__",
    "load_config",
]
