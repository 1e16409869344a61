"""Tests for workspace discovery and the package index."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from bumpgraph.errors import UnresolvedDependencyError, WorkspaceNotFoundError
from bumpgraph.workspace import Workspace


class TestWorkspace:
    """Tests for Workspace."""

    def test_discover_from_package_directory(self, workspace_dir: Path) -> None:
        """Discovery walks up to bumpgraph.yaml."""
        workspace = Workspace.discover(workspace_dir / "packages" / "core")

        assert workspace.root == workspace_dir.resolve()
        assert workspace.name == "test-workspace"

    def test_discover_without_config(self, tmp_path: Path) -> None:
        with pytest.raises(WorkspaceNotFoundError):
            Workspace.discover(tmp_path)

    def test_package_index(self, workspace_dir: Path) -> None:
        workspace = Workspace.discover(workspace_dir)

        assert sorted(workspace.packages) == ["@scope/app", "@scope/core", "@scope/util"]
        assert workspace.packages["@scope/core"].name == "core"

    def test_resolve_name(self, workspace_dir: Path) -> None:
        workspace = Workspace.discover(workspace_dir)

        assert workspace.resolve_name("@scope/core") == "@scope/core"
        assert workspace.resolve_name("core") == "@scope/core"
        with pytest.raises(UnresolvedDependencyError):
            workspace.resolve_name("missing")

    def test_package_at(self, workspace_dir: Path) -> None:
        workspace = Workspace.discover(workspace_dir)
        nested = workspace_dir / "packages" / "util" / "src"
        nested.mkdir()

        assert workspace.package_at(nested) == "@scope/util"
        assert workspace.package_at(workspace_dir / "packages" / "app") == "@scope/app"
        assert workspace.package_at(workspace_dir) is None

    def test_is_managed_uses_namespace(self, workspace_dir: Path) -> None:
        workspace = Workspace.discover(workspace_dir)

        assert workspace.is_managed("@scope/core")
        assert workspace.is_managed("@scope/not-here")
        assert not workspace.is_managed("left-pad")

    def test_is_managed_without_namespace(
        self, tmp_path: Path, write_package: Callable[..., Path]
    ) -> None:
        """Without a namespace every indexed package is managed."""
        (tmp_path / "bumpgraph.yaml").write_text("name: ws\npackages: ['packages/*']\n")
        write_package(tmp_path, "core", "1.0.0")
        workspace = Workspace.discover(tmp_path)

        assert workspace.is_managed("core")
        assert not workspace.is_managed("left-pad")

    def test_ignore(self, workspace_dir: Path) -> None:
        config = workspace_dir / "bumpgraph.yaml"
        config.write_text(config.read_text() + "ignore:\n  - '@scope/app'\n")
        workspace = Workspace.discover(workspace_dir)

        assert "@scope/app" not in workspace.packages
        assert not workspace.is_managed("@scope/app")

    def test_load_manifest(self, workspace_dir: Path) -> None:
        workspace = Workspace.discover(workspace_dir)

        manifest = workspace.load_manifest("@scope/core")
        assert manifest.version == "1.2.0"
        assert manifest.dependencies == {"@scope/util": "^1.0.5"}

    def test_load_manifest_unknown(self, workspace_dir: Path) -> None:
        workspace = Workspace.discover(workspace_dir)

        with pytest.raises(UnresolvedDependencyError) as exc_info:
            workspace.load_manifest("@scope/ghost", required_by="@scope/app")

        assert exc_info.value.message == "Cannot locate package @scope/ghost required by @scope/app"

    def test_directories_without_manifest_are_skipped(self, workspace_dir: Path) -> None:
        (workspace_dir / "packages" / "docs").mkdir()
        workspace = Workspace.discover(workspace_dir)

        assert len(workspace.packages) == 3

    def test_manifests_are_fresh_copies(self, workspace_dir: Path) -> None:
        workspace = Workspace.discover(workspace_dir)

        first = workspace.load_manifest("@scope/core")
        first.dependencies["@scope/util"] = "9.9.9"

        assert workspace.load_manifest("@scope/core").dependencies["@scope/util"] == "^1.0.5"
        assert [m.name for m in workspace.manifests()] == [
            "@scope/app",
            "@scope/core",
            "@scope/util",
        ]
