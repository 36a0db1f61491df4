"""Module name to source file resolution.

Module names are namespace-qualified with "." (or "/") separators. The first
segment selects where the module lives:

    Scanner            -> <source_dir>/Scanner.cpp
    parse.Token        -> <source_dir>/parse/Token.cpp
    test.scanning      -> <test_dir>/test/scanning.cpp
    std.core           -> externally supplied, never resolved

Resolution is a pure path computation. Whether the file actually exists is
only discovered when the import scanner reads it.
"""

import re
from pathlib import Path
from typing import Iterable, List

from .errors import ResolutionError

_SEPARATOR_PATTERN = re.compile(r"[./]")


class ModuleResolver:
    """Maps module names to canonical source file locations."""

    def __init__(
        self,
        source_dir: Path,
        test_dir: Path,
        source_extension: str = ".cpp",
        test_namespace: str = "test",
        external_namespaces: Iterable[str] = ("std",),
    ):
        """Initialize resolver.

        Args:
            source_dir: Primary source root for the default namespace
            test_dir: Root that the test namespace resolves under
            source_extension: Extension appended to resolved paths
            test_namespace: Namespace routed to test_dir
            external_namespaces: Namespaces supplied by the toolchain
        """
        self.source_dir = Path(source_dir)
        self.test_dir = Path(test_dir)
        self.source_extension = source_extension
        self.test_namespace = test_namespace
        self.external_namespaces = frozenset(external_namespaces)

    @staticmethod
    def split_name(name: str) -> List[str]:
        """Split a module name into its namespace segments.

        Raises:
            ResolutionError: If the name is empty or has an empty segment
        """
        segments = _SEPARATOR_PATTERN.split(name.strip())
        if not name.strip() or any(not segment for segment in segments):
            raise ResolutionError(name, reason="malformed module name")
        return segments

    def canonical_name(self, name: str) -> str:
        """Return the "."-separated spelling of a module name.

        "parse/Token" and "parse.Token" name the same module. Visitation state
        and artifact names are keyed on this form.
        """
        return ".".join(self.split_name(name))

    def namespace(self, name: str) -> str:
        """Return the first segment of a module name."""
        return self.split_name(name)[0]

    def is_external(self, name: str) -> bool:
        """True if the module is supplied by the toolchain (no source file)."""
        return self.namespace(name) in self.external_namespaces

    def resolve(self, name: str) -> Path:
        """Resolve a module name to its source file path.

        Args:
            name: Module name

        Returns:
            Absolute path of the module's source file

        Raises:
            ResolutionError: If the name is malformed or externally supplied
        """
        segments = self.split_name(name)
        if segments[0] in self.external_namespaces:
            raise ResolutionError(name, reason="module is supplied by the toolchain")

        root = self.test_dir if segments[0] == self.test_namespace else self.source_dir
        relative = Path(*segments[:-1], segments[-1] + self.source_extension)
        return (root / relative).resolve()
