"""Dependency walker for the module import graph.

Walks the graph depth-first from a root module and invokes a callback once per
reachable module in post-order, so every import is reported before the module
that imports it.

Traversal uses three states per module (unvisited/visiting/visited):
- visited modules are skipped, which collapses diamond dependencies
- re-entering a visiting module means the import chain loops back on itself

The walk keeps its own stack instead of recursing, so deep import chains are
not bounded by the interpreter's recursion limit.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

from .errors import CycleError
from .import_scanner import ImportScanner
from .module_info import ModuleRecord, VisitState
from .resolver import ModuleResolver

logger = logging.getLogger(__name__)

VisitCallback = Callable[[ModuleRecord], None]


@dataclass
class _Frame:
    """A module whose imports are still being walked."""

    record: ModuleRecord
    pending: Iterator[str]


class DependencyWalker:
    """Depth-first, post-order walker over module imports.

    A walker owns the visitation map of a single build run. Calling walk()
    again on the same instance continues with the same map, so modules already
    visited are not reported twice.

    Usage:
        walker = DependencyWalker(resolver, ImportScanner())
        walker.walk("main", lambda record: print(record.name))
    """

    def __init__(self, resolver: ModuleResolver, scanner: Optional[ImportScanner] = None):
        self.resolver = resolver
        self.scanner = scanner if scanner is not None else ImportScanner()
        self.states: Dict[str, VisitState] = {}
        self.visit_order: List[str] = []

    def state(self, name: str) -> VisitState:
        """Return the visitation state of a module."""
        return self.states.get(self.resolver.canonical_name(name), VisitState.UNVISITED)

    def walk(self, root_name: str, callback: VisitCallback) -> None:
        """Walk the import graph from root_name.

        Args:
            root_name: Module to start from
            callback: Invoked once per module, after all of its imports

        Raises:
            CycleError: If an import chain re-enters a module being visited
            ResolutionError: If a module's source cannot be read
        """
        is_root = not self.states
        stack: List[_Frame] = []

        frame = self._enter(root_name, stack, is_root)
        if frame is not None:
            stack.append(frame)

        while stack:
            frame = stack[-1]
            next_name = next(frame.pending, None)

            if next_name is None:
                stack.pop()
                callback(frame.record)
                self.states[frame.record.name] = VisitState.VISITED
                self.visit_order.append(frame.record.name)
                continue

            child = self._enter(next_name, stack, False)
            if child is not None:
                stack.append(child)

    def _enter(self, name: str, stack: List[_Frame], is_root: bool) -> Optional[_Frame]:
        """Start visiting a module.

        Returns:
            A frame for the module, or None if there is nothing to walk
        """
        name = self.resolver.canonical_name(name)
        state = self.state(name)

        if state is VisitState.VISITED:
            return None

        if state is VisitState.VISITING:
            names = [f.record.name for f in stack]
            chain = names[names.index(name):] + [name] if name in names else [name]
            raise CycleError(name, chain)

        self.states[name] = VisitState.VISITING

        if self.resolver.is_external(name):
            logger.debug(f"Skipping externally supplied module {name}")
            self.states[name] = VisitState.VISITED
            return None

        filename = self.resolver.resolve(name)
        scanned = self.scanner.scan(filename, module_name=name)
        imports = [self.resolver.canonical_name(imported) for imported in scanned]

        record = ModuleRecord(name=name, filename=filename, imports=imports, is_root=is_root)
        return _Frame(record=record, pending=iter(imports))
