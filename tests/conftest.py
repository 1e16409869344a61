"""Shared test fixtures for bumpgraph tests."""

from __future__ import annotations

import copy
import json
import shutil
import subprocess
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from bumpgraph.errors import UnresolvedDependencyError
from bumpgraph.git.commits import Commit
from bumpgraph.workspace.manifest import Manifest, parse_manifest

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")


def run_git(args: list[str], cwd: Path) -> str:
    result = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout


def make_commit(message: str, index: int = 0, date: str = "2024-03-01T10:00:00+00:00") -> Commit:
    return Commit(
        sha=f"{index + 1:040x}", author="Test <test@test.com>", date=date, message=message
    )


class InMemorySource:
    """Package source backed by dictionaries instead of a real workspace.

    Names under ``@scope/`` are managed; anything else is external.
    """

    def __init__(self, namespace: str = "@scope/") -> None:
        self.namespace = namespace
        self.documents: dict[str, dict[str, Any]] = {}
        self.commits: dict[Path, list[Commit]] = {}
        self.status: dict[Path, list[str]] = {}
        self.log_reads: list[Path] = []

    def location(self, name: str) -> Path:
        return Path("/workspace/packages") / name.split("/")[-1]

    def add(
        self,
        name: str,
        version: str = "1.0.0",
        dependencies: dict[str, str] | None = None,
        *,
        messages: list[str] | None = None,
        dirty: list[str] | None = None,
        test_command: str | None = "true",
    ) -> None:
        """Register a package; ``messages`` are commit messages, newest first."""
        document: dict[str, Any] = {"name": name, "version": version}
        if test_command:
            document["scripts"] = {"test": test_command}
        document["dependencies"] = dict(dependencies or {})
        self.documents[name] = document

        location = self.location(name)
        self.commits[location] = [make_commit(m, i) for i, m in enumerate(messages or [])]
        self.status[location] = list(dirty or [])

    def is_managed(self, name: str) -> bool:
        return name.startswith(self.namespace)

    def load_manifest(self, name: str, *, required_by: str | None = None) -> Manifest:
        if name not in self.documents:
            raise UnresolvedDependencyError(name, required_by=required_by)
        return parse_manifest(copy.deepcopy(self.documents[name]), self.location(name))

    async def read_commit_log(self, location: Path, since: str | None = None) -> list[Commit]:
        self.log_reads.append(location)
        return list(self.commits.get(location, []))

    async def working_tree_status(self, location: Path) -> list[str]:
        return list(self.status.get(location, []))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def memory_source() -> InMemorySource:
    """Empty in-memory package source."""
    return InMemorySource()


@pytest.fixture
def sample_bumpgraph_yaml() -> str:
    """Sample bumpgraph.yaml content."""
    return """\
name: test-workspace
packages:
  - packages/*

namespace:
  - "@scope/*"

versioning:
  commit_format: marker
  forced_bump: patch

eligibility:
  test_command: "true"
  test_timeout: 30

publish:
  command: "echo publish {name} {version}"
"""


@pytest.fixture
def write_package() -> Callable[..., Path]:
    """Write a package.json into ``root/packages/<dir>``."""

    def _write(
        root: Path,
        name: str,
        version: str = "1.0.0",
        dependencies: dict[str, str] | None = None,
        test_command: str | None = None,
    ) -> Path:
        location = root / "packages" / name.split("/")[-1]
        location.mkdir(parents=True, exist_ok=True)
        document: dict[str, Any] = {"name": name, "version": version, "description": name}
        if test_command:
            document["scripts"] = {"test": test_command}
        if dependencies is not None:
            document["dependencies"] = dependencies
        (location / "package.json").write_text(json.dumps(document, indent=4) + "\n")
        (location / "index.js").write_text(f"// {name}\n")
        return location

    return _write


@pytest.fixture
def workspace_dir(
    temp_dir: Path, sample_bumpgraph_yaml: str, write_package: Callable[..., Path]
) -> Path:
    """Workspace with three packages: app -> core -> util, app -> util."""
    (temp_dir / "bumpgraph.yaml").write_text(sample_bumpgraph_yaml)
    write_package(temp_dir, "@scope/util", "1.0.5", {"left-pad": "^1.3.0"})
    write_package(temp_dir, "@scope/core", "1.2.0", {"@scope/util": "^1.0.5"})
    write_package(
        temp_dir,
        "@scope/app",
        "0.3.0",
        {"@scope/core": "^1.2.0", "@scope/util": "1.0.5"},
    )
    return temp_dir


@pytest.fixture
def git_workspace(workspace_dir: Path) -> Path:
    """Create a workspace with git initialized and one marker commit per package."""
    if not shutil.which("git"):
        pytest.skip("git not found")

    run_git(["init", "-q"], workspace_dir)
    run_git(["config", "user.email", "test@test.com"], workspace_dir)
    run_git(["config", "user.name", "Test"], workspace_dir)
    run_git(["config", "commit.gpgsign", "false"], workspace_dir)
    run_git(["add", "-A"], workspace_dir)
    run_git(
        [
            "commit",
            "-q",
            "-m",
            "version @scope/util to 1.0.5, @scope/core to 1.2.0, @scope/app to 0.3.0",
        ],
        workspace_dir,
    )
    return workspace_dir
