"""Interface between the dependency graph and the package store."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from bumpgraph.git.commits import Commit
from bumpgraph.workspace.manifest import Manifest


class PackageSource(Protocol):
    """Where the graph builder gets packages, history and tree state from.

    :class:`bumpgraph.workspace.Workspace` is the production implementation;
    tests substitute an in-memory one.
    """

    def is_managed(self, name: str) -> bool:
        """Whether dependency ``name`` belongs to the managed graph."""
        ...

    def load_manifest(self, name: str, *, required_by: str | None = None) -> Manifest:
        """Load the manifest of a managed package.

        Raises:
            UnresolvedDependencyError: If the package cannot be located.
        """
        ...

    async def read_commit_log(self, location: Path, since: str | None = None) -> list[Commit]:
        """Commits touching ``location``, newest first."""
        ...

    async def working_tree_status(self, location: Path) -> list[str]:
        """Uncommitted paths below ``location``."""
        ...
