"""Workspace, manifests and the dependency graph."""

from bumpgraph.workspace.manifest import (
    Manifest,
    declared_version,
    load_manifest,
    pin_constraint,
    write_manifest,
)
from bumpgraph.workspace.workspace import Workspace
from bumpgraph.workspace.graph import (
    DependencyGraph,
    DependencyNode,
    NodeFactory,
    TestStatus,
    resolve_graph,
    walk_dependencies,
)
from bumpgraph.workspace.source import PackageSource

__all__ = [
    "DependencyGraph",
    "DependencyNode",
    "Manifest",
    "NodeFactory",
    "PackageSource",
    "TestStatus",
    "Workspace",
    "declared_version",
    "load_manifest",
    "pin_constraint",
    "resolve_graph",
    "walk_dependencies",
    "write_manifest",
]
