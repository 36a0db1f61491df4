"""
Toolchain adapters for modbuild.

This package wraps native compilers behind the ICompilerAdapter interface:
- MsvcCompiler: cl.exe / link.exe with an environment discovered via vcvarsall.bat
- GccCompiler: g++ with C++20 modules
"""

from typing import Dict, Type

from ..build.errors import ToolchainDiscoveryError
from .compiler import ICompilerAdapter
from .environment import ToolchainEnvironment
from .gcc import GccCompiler
from .host import get_host_architecture
from .msvc import MsvcCompiler

COMPILERS: Dict[str, Type[ICompilerAdapter]] = {
    MsvcCompiler.name: MsvcCompiler,
    GccCompiler.name: GccCompiler,
}


def get_compiler(name: str) -> ICompilerAdapter:
    """Create the compiler adapter registered under name.

    Raises:
        ToolchainDiscoveryError: If no adapter has that name
    """
    try:
        adapter_class = COMPILERS[name]
    except KeyError:
        raise ToolchainDiscoveryError(f'Unsupported compiler "{name}". Available: {", ".join(sorted(COMPILERS))}') from None
    return adapter_class()


__all__ = [
    "COMPILERS",
    "GccCompiler",
    "ICompilerAdapter",
    "MsvcCompiler",
    "ToolchainEnvironment",
    "get_compiler",
    "get_host_architecture",
]
