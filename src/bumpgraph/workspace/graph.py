"""Dependency graph discovery.

The graph starts from one or more root packages and follows every managed
dependency edge, building each package's node exactly once. Cycles are
allowed: a node that is already in the graph only has its reference count
incremented, and a node is never explored twice.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from bumpgraph.git.commits import Commit
from bumpgraph.logging import get_logger
from bumpgraph.versioning.history import HistoryAnalysis, analyze_history
from bumpgraph.versioning.resolver import ResolverSettings, VersionData, resolve_version
from bumpgraph.workspace.manifest import Manifest
from bumpgraph.workspace.source import PackageSource

if TYPE_CHECKING:
    from bumpgraph.execution.eligibility import EligibilityReport

log = get_logger(__name__)


class TestStatus(Enum):
    """Outcome of a node's test run."""

    __test__ = False

    NOT_RUN = "not_run"
    PASSED = "passed"
    FAILED = "failed"


@dataclass(eq=False)
class DependencyNode:
    """One package in the dependency graph.

    Attributes:
        name: Package name.
        manifest: The package manifest. Propagation rewrites its
            dependency constraints in place.
        version_data: Current, baseline and next versions.
        analysis: Commit history analysis the versions were computed from.
        commits: Commits made since the last version marker, newest first.
        dirty_files: Uncommitted paths, captured when the node was built.
        test_status: Result of the eligibility test run.
        processed: Set once the node's dependencies have been explored.
        reference_count: Number of packages in the graph depending on this one.
        eligibility: Cached eligibility report.
    """

    name: str
    manifest: Manifest
    version_data: VersionData
    analysis: HistoryAnalysis = field(default_factory=HistoryAnalysis)
    commits: list[Commit] = field(default_factory=list)
    dirty_files: list[str] = field(default_factory=list)
    test_status: TestStatus = TestStatus.NOT_RUN
    processed: bool = False
    reference_count: int = 0
    eligibility: EligibilityReport | None = None

    @property
    def dirty(self) -> bool:
        return bool(self.dirty_files)

    @property
    def location(self) -> Path:
        return self.manifest.location

    @property
    def dependencies(self) -> dict[str, str]:
        return self.manifest.dependencies


class DependencyGraph:
    """Mapping of package name to node for one resolution run."""

    def __init__(self) -> None:
        self._nodes: dict[str, DependencyNode] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __getitem__(self, name: str) -> DependencyNode:
        return self._nodes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, name: str) -> DependencyNode | None:
        return self._nodes.get(name)

    def add(self, node: DependencyNode) -> None:
        self._nodes[node.name] = node

    def nodes(self) -> list[DependencyNode]:
        """Nodes in discovery order."""
        return list(self._nodes.values())

    def dependency_order(self) -> list[DependencyNode]:
        """Nodes with dependencies ahead of their dependents.

        Depth-first post-order from each node in discovery order. Inside a
        cycle the node reached first comes last.
        """
        visited: set[str] = set()
        ordered: list[DependencyNode] = []

        def _dfs(node: DependencyNode) -> None:
            visited.add(node.name)
            for name in node.dependencies:
                depend = self._nodes.get(name)
                if depend is not None and depend.name not in visited:
                    _dfs(depend)
            ordered.append(node)

        for node in self._nodes.values():
            if node.name not in visited:
                _dfs(node)
        return ordered

    def sorted_nodes(self) -> list[DependencyNode]:
        """Nodes ordered by name."""
        return [self._nodes[name] for name in sorted(self._nodes)]

    def requiring_bump(self) -> list[DependencyNode]:
        """Nodes that will be versioned, ordered by name."""
        return [n for n in self.sorted_nodes() if n.version_data.bump_required]


class NodeFactory:
    """Build graph nodes from a package source.

    Building a node reads the commit log and working tree status of the
    package and resolves its next version.
    """

    def __init__(self, source: PackageSource, settings: ResolverSettings | None = None) -> None:
        self.source = source
        self.settings = settings or ResolverSettings()

    def managed_dependencies(self, manifest: Manifest) -> list[str]:
        """Dependency names of ``manifest`` that belong to the managed graph."""
        return [
            name
            for name in manifest.dependencies
            if name != manifest.name and self.source.is_managed(name)
        ]

    async def create(self, manifest: Manifest) -> DependencyNode:
        commits, dirty_files = await asyncio.gather(
            self.source.read_commit_log(manifest.location, self.settings.since),
            self.source.working_tree_status(manifest.location),
        )
        analysis = analyze_history(
            commits,
            name=manifest.name,
            current_version=manifest.version,
            classifier=self.settings.classifier,
            marker_policy=self.settings.marker_policy,
        )
        version_data = resolve_version(
            manifest.name,
            manifest.version,
            analysis,
            channel=self.settings.channel,
            release=self.settings.release,
        )
        return DependencyNode(
            name=manifest.name,
            manifest=manifest,
            version_data=version_data,
            analysis=analysis,
            commits=commits[: analysis.commit_drift],
            dirty_files=dirty_files,
        )

    async def load(self, name: str, *, required_by: str | None = None) -> DependencyNode:
        """Load a package's manifest and build its node."""
        return await self.create(self.source.load_manifest(name, required_by=required_by))


async def walk_dependencies(
    root: DependencyNode,
    graph: DependencyGraph,
    factory: NodeFactory,
) -> AsyncIterator[tuple[DependencyNode, DependencyGraph]]:
    """Explore the dependency closure of ``root``.

    New dependencies are built, inserted with a reference count of one and
    explored in turn; dependencies already in the graph only gain a
    reference. A node is yielded after all of its dependencies.

    Raises:
        UnresolvedDependencyError: If a managed dependency cannot be located.
    """
    if root.processed:
        return
    root.processed = True
    if root.name not in graph:
        graph.add(root)

    for name in factory.managed_dependencies(root.manifest):
        existing = graph.get(name)
        if existing is not None:
            existing.reference_count += 1
            continue

        node = await factory.load(name, required_by=root.name)
        node.reference_count = 1
        graph.add(node)
        log.info("discovered dependency", package=name, required_by=root.name)

        async for item in walk_dependencies(node, graph, factory):
            yield item

    yield root, graph


async def resolve_graph(
    roots: list[str],
    factory: NodeFactory,
    graph: DependencyGraph | None = None,
) -> DependencyGraph:
    """Build the dependency graph of one or more root packages.

    Root nodes are built concurrently and inserted with a reference count
    of zero before any traversal starts.
    """
    graph = graph if graph is not None else DependencyGraph()
    names = [name for name in dict.fromkeys(roots) if name not in graph]

    nodes = await asyncio.gather(*(factory.load(name) for name in names))
    for node in nodes:
        graph.add(node)

    for name in dict.fromkeys(roots):
        async for _ in walk_dependencies(graph[name], graph, factory):
            pass
    return graph
