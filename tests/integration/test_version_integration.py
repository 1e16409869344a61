"""End-to-end versioning against a real git repository."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bumpgraph.cli.app import app
from bumpgraph.commands import publish, resolve_and_version
from bumpgraph.workspace import Workspace

pytestmark = pytest.mark.integration


def run_git(args: list[str], cwd: Path) -> str:
    return subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    ).stdout


def commit_change(root: Path, directory: str, message: str) -> None:
    source = root / "packages" / directory / "index.js"
    source.write_text(source.read_text() + "// change\n")
    run_git(["add", "-A"], root)
    run_git(["commit", "-q", "-m", message], root)


def manifest(root: Path, directory: str) -> dict:
    return json.loads((root / "packages" / directory / "package.json").read_text())


@pytest.mark.asyncio
async def test_version_and_publish(git_workspace: Path):
    commit_change(git_workspace, "util", "#feature add pad option #changelog")

    result = await resolve_and_version(Workspace.discover(git_workspace), ["app"])

    assert result.success, result.error
    assert manifest(git_workspace, "util")["version"] == "1.1.0"
    assert manifest(git_workspace, "core")["version"] == "1.2.1"
    assert manifest(git_workspace, "core")["dependencies"] == {"@scope/util": "^1.1.0"}
    assert manifest(git_workspace, "app")["version"] == "0.3.1"
    changelog = (git_workspace / "packages" / "util" / "CHANGELOG.md").read_text()
    assert "add pad option" in changelog

    published = await publish(Workspace.discover(git_workspace))

    assert published.success, published.error
    assert len(published.scripts) == 6
    assert not list(git_workspace.glob("packages/*/*.bounty"))
    log = run_git(["log", "--format=%s"], git_workspace).splitlines()
    assert log[:3] == [
        "version @scope/util to 1.1.0",
        "version @scope/core to 1.2.1",
        "version @scope/app to 0.3.1",
    ]
    assert run_git(["status", "--porcelain"], git_workspace) == ""

    again = await resolve_and_version(Workspace.discover(git_workspace), ["app"])

    assert again.success
    assert again.releases == []


@pytest.mark.asyncio
async def test_simulation_leaves_tree_untouched(git_workspace: Path):
    commit_change(git_workspace, "core", "fix loader")

    result = await resolve_and_version(
        Workspace.discover(git_workspace), ["app"], simulate=True
    )

    assert result.success
    assert result.get("@scope/core").next_version == "1.2.1"
    assert result.get("@scope/app").next_version == "0.3.1"
    assert not result.get("@scope/util").bump_required
    assert run_git(["status", "--porcelain"], git_workspace) == ""


@pytest.mark.asyncio
async def test_dirty_tree_is_rejected(git_workspace: Path):
    commit_change(git_workspace, "util", "fix padding")
    (git_workspace / "packages" / "core" / "index.js").write_text("// edited\n")

    result = await resolve_and_version(Workspace.discover(git_workspace), ["app"])

    assert not result.success
    assert [p.name for p in result.packages if not p.eligible] == ["@scope/core"]
    assert manifest(git_workspace, "util")["version"] == "1.0.5"


def test_cli_graph_json(git_workspace: Path, monkeypatch: pytest.MonkeyPatch):
    commit_change(git_workspace, "util", "fix padding")
    monkeypatch.chdir(git_workspace / "packages" / "app")

    result = CliRunner().invoke(app, ["-q", "graph", "app", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["@scope/util"]["next_version"] == "1.0.6"
    assert data["@scope/app"]["reference_count"] == 0
