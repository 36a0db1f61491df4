"""Pytest configuration and shared fixtures for modbuild tests.

Provides:
- ModuleProject: writes throwaway module sources under tmp_path with
  explicit timestamps, so staleness tests never depend on clock resolution
- RecordingCompiler: an ICompilerAdapter that records every call and writes
  fake artifacts instead of running a toolchain
"""

import io
import os
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from modbuild import output
from modbuild.build.module_info import ModuleRecord
from modbuild.build.resolver import ModuleResolver
from modbuild.toolchain.compiler import ICompilerAdapter

# Sources are written well in the past so freshly written artifacts are newer
OLD_MTIME = time.time() - 10_000


class ModuleProject:
    """A project directory with src/ and test/ module sources."""

    def __init__(self, root: Path):
        self.root = root
        self.source_dir = root / "src"
        self.output_dir = root / "build"
        self.source_dir.mkdir(parents=True, exist_ok=True)
        self.resolver = ModuleResolver(self.source_dir, self.root)

    def path(self, name: str) -> Path:
        return self.resolver.resolve(name)

    def add(self, name: str, *imports: str, body: str = "") -> Path:
        """Write a module importing the given modules."""
        path = self.path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = ["#include <iostream>", ""]
        lines.extend(f"import {imported};" for imported in imports)
        lines.extend(["", body or f"// module {name}", ""])
        path.write_text("\n".join(lines), encoding="utf-8")
        os.utime(path, (OLD_MTIME, OLD_MTIME))
        return path

    def touch(self, name: str) -> None:
        """Mark a module's source as modified after every existing artifact."""
        future = time.time() + 1_000
        os.utime(self.path(name), (future, future))


class RecordingCompiler(ICompilerAdapter):
    """Fake toolchain that records calls and writes placeholder artifacts."""

    name = "recording"

    def __init__(self, fail: Optional[Dict[str, int]] = None, link_status: int = 0, host: str = "x64"):
        self.fail = fail or {}
        self.link_status = link_status
        self.host = host
        self.initialized: List[tuple] = []
        self.compiled: List[str] = []
        self.links: List[List[Path]] = []
        self.output_dir: Optional[Path] = None

    def initialize(self, output_dir: Path, host: str, target: str) -> None:
        self.output_dir = output_dir
        self.initialized.append((output_dir, host, target))

    def module_output_file(self, name: str) -> str:
        return f"{name}.o"

    def link_output_file(self, name: str) -> str:
        return f"{name}.bin"

    def compile_module(self, record: ModuleRecord) -> int:
        self.compiled.append(record.name)
        status = self.fail.get(record.name, 0)
        if status == 0:
            assert record.output_path is not None
            record.output_path.write_text(f"compiled {record.name}", encoding="utf-8")
        return status

    def link(self, outputs: Sequence[Path], output_file: Path) -> int:
        self.links.append(list(outputs))
        if self.link_status == 0:
            Path(output_file).write_text("linked", encoding="utf-8")
        return self.link_status

    def host_architecture(self) -> str:
        return self.host


@pytest.fixture
def project(tmp_path) -> ModuleProject:
    """Empty module project in a temporary directory."""
    return ModuleProject(tmp_path / "project")


@pytest.fixture
def recording_compiler() -> RecordingCompiler:
    return RecordingCompiler()


@pytest.fixture
def make_compiler():
    """Factory for RecordingCompiler instances with failure injection."""
    return RecordingCompiler


@pytest.fixture(autouse=True)
def isolate_output_globals():
    """Reset modbuild.output globals around each test."""
    original_start_time = output._start_time
    original_stream = output._output_stream
    original_verbose = output._verbose

    output._output_stream = sys.stdout
    output._verbose = True

    yield

    output._start_time = original_start_time
    output._output_stream = original_stream
    output._verbose = original_verbose


@pytest.fixture
def captured_output():
    """Redirect modbuild.output to an in-memory stream."""
    stream = io.StringIO()
    output._output_stream = stream
    return stream


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are always restored after each test."""
    yield

    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__
