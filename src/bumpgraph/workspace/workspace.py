"""Workspace discovery and package index."""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING

from bumpgraph.errors import ManifestError, UnresolvedDependencyError
from bumpgraph.git.commits import Commit, get_commits
from bumpgraph.git.repo import get_status
from bumpgraph.logging import get_logger
from bumpgraph.workspace.manifest import Manifest, load_manifest

if TYPE_CHECKING:
    from bumpgraph.config.schema import BumpGraphConfig

log = get_logger(__name__)


class Workspace:
    """A monorepo of packages described by bumpgraph.yaml.

    Attributes:
        root: Workspace root directory.
        config: Validated configuration.
    """

    def __init__(self, root: Path, config: BumpGraphConfig) -> None:
        self.root = root
        self.config = config
        self._index: dict[str, Path] | None = None

    @classmethod
    def discover(cls, path: Path | None = None) -> Workspace:
        """Load the workspace containing ``path`` (default: the cwd).

        Raises:
            WorkspaceNotFoundError: If no bumpgraph.yaml is found.
            ConfigurationError: If the configuration is invalid.
        """
        from bumpgraph.config import find_config, load_config

        config_path = find_config(path)
        return cls(config_path.parent, load_config(config_path))

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def packages(self) -> dict[str, Path]:
        """Package name to directory, built on first access."""
        if self._index is None:
            self._index = self._build_index()
        return self._index

    def _is_ignored(self, name: str) -> bool:
        return any(fnmatch(name, pattern) for pattern in self.config.ignore)

    def _build_index(self) -> dict[str, Path]:
        index: dict[str, Path] = {}
        filename = self.config.manifest
        for pattern in self.config.packages:
            for directory in sorted(self.root.glob(pattern)):
                if not (directory / filename).is_file():
                    continue
                try:
                    manifest = load_manifest(directory, filename)
                except ManifestError as e:
                    log.warning(
                        "skipping unreadable manifest", path=str(directory), error=e.message
                    )
                    continue
                if self._is_ignored(manifest.name):
                    continue
                if manifest.name in index and index[manifest.name] != directory:
                    log.warning(
                        "duplicate package name",
                        package=manifest.name,
                        kept=str(index[manifest.name]),
                        skipped=str(directory),
                    )
                    continue
                index[manifest.name] = directory
        log.debug("indexed workspace", packages=len(index))
        return index

    def resolve_name(self, name: str) -> str:
        """Resolve a package name given on the command line.

        ``core`` matches ``@scope/core`` when it is the only such package.

        Raises:
            UnresolvedDependencyError: If no single package matches.
        """
        if name in self.packages:
            return name
        matches = [n for n in self.packages if n.endswith("/" + name)]
        if len(matches) == 1:
            return matches[0]
        raise UnresolvedDependencyError(name)

    def package_at(self, path: Path) -> str | None:
        """Name of the innermost package whose directory contains ``path``."""
        path = path.resolve()
        matches = []
        for name, directory in self.packages.items():
            directory = directory.resolve()
            if path == directory or directory in path.parents:
                matches.append((len(directory.parts), name))
        return max(matches)[1] if matches else None

    def is_managed(self, name: str) -> bool:
        if self._is_ignored(name):
            return False
        if self.config.namespace:
            return any(fnmatch(name, pattern) for pattern in self.config.namespace)
        return name in self.packages

    def load_manifest(self, name: str, *, required_by: str | None = None) -> Manifest:
        location = self.packages.get(name)
        if location is None:
            raise UnresolvedDependencyError(name, required_by=required_by)
        return load_manifest(location, self.config.manifest)

    def manifests(self) -> list[Manifest]:
        """Load every package manifest, ordered by name."""
        return [self.load_manifest(name) for name in sorted(self.packages)]

    async def read_commit_log(self, location: Path, since: str | None = None) -> list[Commit]:
        return await get_commits(location, since)

    async def working_tree_status(self, location: Path) -> list[str]:
        return await get_status(location)
