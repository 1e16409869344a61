"""Tests for dependency graph discovery."""

from __future__ import annotations

import pytest

from bumpgraph.errors import UnresolvedDependencyError
from bumpgraph.workspace.graph import (
    DependencyGraph,
    NodeFactory,
    TestStatus,
    resolve_graph,
    walk_dependencies,
)


class TestResolveGraph:
    """Tests for resolve_graph."""

    @pytest.mark.asyncio
    async def test_reference_counts(self, memory_source) -> None:
        """Each node counts its distinct dependents inside the graph."""
        memory_source.add("@scope/app", "0.3.0", {"@scope/core": "^1.2.0", "@scope/util": "1.0.5"})
        memory_source.add("@scope/core", "1.2.0", {"@scope/util": "^1.0.5"})
        memory_source.add("@scope/util", "1.0.5", {"left-pad": "^1.3.0"})

        graph = await resolve_graph(["@scope/app"], NodeFactory(memory_source))

        assert sorted(graph) == ["@scope/app", "@scope/core", "@scope/util"]
        assert graph["@scope/app"].reference_count == 0
        assert graph["@scope/core"].reference_count == 1
        assert graph["@scope/util"].reference_count == 2
        assert "left-pad" not in graph
        assert all(node.processed for node in graph.nodes())

    @pytest.mark.asyncio
    async def test_each_node_built_once(self, memory_source) -> None:
        memory_source.add("@scope/a", "1.0.0", {"@scope/b": "1.0.0", "@scope/c": "1.0.0"})
        memory_source.add("@scope/b", "1.0.0", {"@scope/c": "1.0.0"})
        memory_source.add("@scope/c", "1.0.0")

        await resolve_graph(["@scope/a"], NodeFactory(memory_source))

        assert len(memory_source.log_reads) == 3
        assert len(set(memory_source.log_reads)) == 3

    @pytest.mark.asyncio
    async def test_cycle_terminates(self, memory_source) -> None:
        memory_source.add("@scope/a", "1.0.0", {"@scope/b": "1.0.0"})
        memory_source.add("@scope/b", "1.0.0", {"@scope/a": "1.0.0"})

        graph = await resolve_graph(["@scope/a"], NodeFactory(memory_source))

        assert len(graph) == 2
        assert graph["@scope/a"].reference_count == 1
        assert graph["@scope/b"].reference_count == 1

    @pytest.mark.asyncio
    async def test_dependency_order(self, memory_source) -> None:
        """Dependencies come before dependents, cycles included."""
        memory_source.add("@scope/app", "0.3.0", {"@scope/core": "^1.2.0", "@scope/util": "1.0.5"})
        memory_source.add("@scope/core", "1.2.0", {"@scope/util": "^1.0.5"})
        memory_source.add("@scope/util", "1.0.5", {"@scope/app": "0.3.0"})

        graph = await resolve_graph(["@scope/app"], NodeFactory(memory_source))

        assert [n.name for n in graph.dependency_order()] == [
            "@scope/util",
            "@scope/core",
            "@scope/app",
        ]

    @pytest.mark.asyncio
    async def test_self_dependency_ignored(self, memory_source) -> None:
        memory_source.add("@scope/a", "1.0.0", {"@scope/a": "1.0.0"})

        graph = await resolve_graph(["@scope/a"], NodeFactory(memory_source))

        assert graph["@scope/a"].reference_count == 0

    @pytest.mark.asyncio
    async def test_multiple_roots(self, memory_source) -> None:
        """Roots start at zero and gain references from each other."""
        memory_source.add("@scope/a", "1.0.0", {"@scope/c": "1.0.0"})
        memory_source.add("@scope/b", "1.0.0", {"@scope/a": "1.0.0"})
        memory_source.add("@scope/c", "1.0.0")

        graph = await resolve_graph(
            ["@scope/a", "@scope/b", "@scope/a"], NodeFactory(memory_source)
        )

        assert graph["@scope/a"].reference_count == 1
        assert graph["@scope/b"].reference_count == 0
        assert graph["@scope/c"].reference_count == 1

    @pytest.mark.asyncio
    async def test_missing_managed_dependency(self, memory_source) -> None:
        memory_source.add("@scope/a", "1.0.0", {"@scope/x": "1.0.0"})

        with pytest.raises(UnresolvedDependencyError) as exc_info:
            await resolve_graph(["@scope/a"], NodeFactory(memory_source))

        assert exc_info.value.name == "@scope/x"
        assert exc_info.value.required_by == "@scope/a"

    @pytest.mark.asyncio
    async def test_missing_root(self, memory_source) -> None:
        with pytest.raises(UnresolvedDependencyError):
            await resolve_graph(["@scope/ghost"], NodeFactory(memory_source))


class TestWalkDependencies:
    """Tests for walk_dependencies."""

    @pytest.mark.asyncio
    async def test_post_order(self, memory_source) -> None:
        memory_source.add("@scope/a", "1.0.0", {"@scope/b": "1.0.0"})
        memory_source.add("@scope/b", "1.0.0", {"@scope/c": "1.0.0"})
        memory_source.add("@scope/c", "1.0.0")
        factory = NodeFactory(memory_source)
        graph = DependencyGraph()
        root = await factory.load("@scope/a")

        order = [node.name async for node, _ in walk_dependencies(root, graph, factory)]

        assert order == ["@scope/c", "@scope/b", "@scope/a"]

    @pytest.mark.asyncio
    async def test_processed_root_is_not_walked_again(self, memory_source) -> None:
        memory_source.add("@scope/a", "1.0.0", {"@scope/b": "1.0.0"})
        memory_source.add("@scope/b", "1.0.0")
        factory = NodeFactory(memory_source)
        graph = await resolve_graph(["@scope/a"], factory)

        again = [item async for item in walk_dependencies(graph["@scope/a"], graph, factory)]

        assert again == []
        assert graph["@scope/b"].reference_count == 1


class TestNodeFactory:
    """Tests for NodeFactory."""

    @pytest.mark.asyncio
    async def test_commits_stop_at_marker(self, memory_source) -> None:
        memory_source.add(
            "@scope/a",
            "1.0.0",
            messages=["#feature streaming", "fix typo", "version @scope/a to 1.0.0", "older"],
        )

        node = await NodeFactory(memory_source).load("@scope/a")

        assert [c.message for c in node.commits] == ["#feature streaming", "fix typo"]
        assert node.version_data.bump_required
        assert node.version_data.next_version == "1.1.0"
        assert node.test_status is TestStatus.NOT_RUN

    @pytest.mark.asyncio
    async def test_dirty_files_captured(self, memory_source) -> None:
        memory_source.add("@scope/a", "1.0.0", dirty=[" M index.js"])

        node = await NodeFactory(memory_source).load("@scope/a")

        assert node.dirty
        assert node.dirty_files == [" M index.js"]

    def test_managed_dependencies(self, memory_source) -> None:
        memory_source.add("@scope/a", "1.0.0", {"@scope/b": "1", "left-pad": "1", "@scope/a": "1"})
        manifest = memory_source.load_manifest("@scope/a")

        assert NodeFactory(memory_source).managed_dependencies(manifest) == ["@scope/b"]
