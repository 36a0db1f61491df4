"""Tests for the dependency walker."""

import pytest

from modbuild.build.errors import CycleError, ResolutionError
from modbuild.build.module_info import VisitState
from modbuild.build.walker import DependencyWalker


def walk_names(project, root):
    walker = DependencyWalker(project.resolver)
    records = []
    walker.walk(root, records.append)
    return [record.name for record in records], records, walker


class TestDependencyWalker:
    """Test post-order traversal of the import graph."""

    def test_single_module(self, project):
        project.add("main")

        names, records, _ = walk_names(project, "main")

        assert names == ["main"]
        assert records[0].is_root
        assert records[0].filename == project.path("main")

    def test_dependencies_reported_before_dependents(self, project):
        project.add("main", "App", "Util")
        project.add("App", "Util")
        project.add("Util")

        names, _, _ = walk_names(project, "main")

        assert names == ["Util", "App", "main"]

    def test_imports_walked_in_directive_order(self, project):
        project.add("main", "B", "A")
        project.add("A")
        project.add("B")

        names, _, _ = walk_names(project, "main")

        assert names == ["B", "A", "main"]

    def test_diamond_visits_shared_dependency_once(self, project):
        project.add("main", "Left", "Right")
        project.add("Left", "Base")
        project.add("Right", "Base")
        project.add("Base")

        names, _, _ = walk_names(project, "main")


    def test_separator_spellings_visit_module_once(self, project):
        project.add("main", "Left", "Right")
        project.add("Left", "parse.Token")
        project.add("Right", "parse/Token")
        project.add("parse.Token")

        names, records, walker = walk_names(project, "main")

        assert names == ["parse.Token", "Left", "Right", "main"]
        assert records[1].imports == ["parse.Token"]
        assert records[2].imports == ["parse.Token"]
        assert walker.state("parse/Token") is VisitState.VISITED

    def test_slash_separated_root(self, project):
        project.add("parse.Token")

        names, records, _ = walk_names(project, "parse/Token")

        assert names == ["parse.Token"]
        assert records[0].filename == project.path("parse.Token")
        assert names == ["Base", "Left", "Right", "main"]

    def test_only_first_record_is_root(self, project):
        project.add("main", "Dep")
        project.add("Dep")

        _, records, _ = walk_names(project, "main")

        assert [record.is_root for record in records] == [False, True]

    def test_records_carry_imports(self, project):
        project.add("main", "std.core", "parse.Token")
        project.add("parse.Token")

        _, records, _ = walk_names(project, "main")

        assert records[-1].imports == ["std.core", "parse.Token"]

    def test_external_modules_are_skipped(self, project):
        project.add("main", "std.core", "Dep")
        project.add("Dep", "std.io")

        names, _, walker = walk_names(project, "main")

        assert names == ["Dep", "main"]
        assert walker.state("std.core") is VisitState.VISITED

    def test_test_namespace_resolves_separately(self, project):
        project.add("scanning")
        project.add("test.scanning", "scanning")

        names, records, _ = walk_names(project, "test.scanning")

        assert names == ["scanning", "test.scanning"]
        assert records[0].filename != records[1].filename

    def test_states_after_walk(self, project):
        project.add("main", "Dep")
        project.add("Dep")

        _, _, walker = walk_names(project, "main")

        assert walker.state("main") is VisitState.VISITED
        assert walker.state("Dep") is VisitState.VISITED
        assert walker.state("Unrelated") is VisitState.UNVISITED
        assert walker.visit_order == ["Dep", "main"]

    def test_second_walk_skips_visited_modules(self, project):
        project.add("main", "Dep")
        project.add("other", "Dep")
        project.add("Dep")

        walker = DependencyWalker(project.resolver)
        first, second = [], []
        walker.walk("main", lambda record: first.append(record.name))
        walker.walk("other", lambda record: second.append(record.name))

        assert first == ["Dep", "main"]
        assert second == ["other"]

    def test_deep_chain_does_not_hit_recursion_limit(self, project):
        depth = 3000
        for index in range(depth):
            imports = [f"M{index + 1}"] if index + 1 < depth else []
            project.add(f"M{index}", *imports)

        names, _, _ = walk_names(project, "M0")

        assert len(names) == depth
        assert names[0] == f"M{depth - 1}"
        assert names[-1] == "M0"


class TestCycleDetection:
    """Test that import cycles are reported with their chain."""

    def test_two_module_cycle(self, project):
        project.add("A", "B")
        project.add("B", "A")

        with pytest.raises(CycleError) as exc_info:
            walk_names(project, "A")

        assert exc_info.value.module_name == "A"
        assert exc_info.value.chain == ["A", "B", "A"]
        assert "A -> B -> A" in str(exc_info.value)

    def test_self_import(self, project):
        project.add("Self", "Self")

        with pytest.raises(CycleError) as exc_info:
            walk_names(project, "Self")

        assert exc_info.value.chain == ["Self", "Self"]

    def test_cycle_below_root(self, project):
        project.add("main", "A")
        project.add("A", "B")
        project.add("B", "C")
        project.add("C", "A")

        with pytest.raises(CycleError) as exc_info:
            walk_names(project, "main")

        assert exc_info.value.chain == ["A", "B", "C", "A"]

    def test_no_callback_for_modules_in_cycle(self, project):
        project.add("main", "Leaf", "A")
        project.add("Leaf")
        project.add("A", "B")
        project.add("B", "A")

        walker = DependencyWalker(project.resolver)
        visited = []
        with pytest.raises(CycleError):
            walker.walk("main", lambda record: visited.append(record.name))

        assert visited == ["Leaf"]


class TestResolutionFailures:
    """Test errors for modules whose sources are missing."""

    def test_missing_root(self, project):
        with pytest.raises(ResolutionError) as exc_info:
            walk_names(project, "main")

        assert exc_info.value.module_name == "main"

    def test_missing_dependency(self, project):
        project.add("main", "Ghost")

        with pytest.raises(ResolutionError) as exc_info:
            walk_names(project, "main")

        assert exc_info.value.module_name == "Ghost"
        assert exc_info.value.path == project.path("Ghost")
