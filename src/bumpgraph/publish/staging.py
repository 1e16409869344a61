"""Stage the outputs of a versioning run.

For every package that requires a bump a :class:`StagedRelease` collects
the changelog entry, the rewritten manifest and the deferred commit and
publish actions. Staging never touches the filesystem; :func:`materialize`
writes a list of staged releases out.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from bumpgraph.logging import get_logger
from bumpgraph.versioning.changelog import generate_changelog_entry, prepend_to_changelog
from bumpgraph.versioning.classify import CommitClassifier
from bumpgraph.workspace.manifest import Manifest, write_manifest

if TYPE_CHECKING:
    from bumpgraph.config.schema import BumpGraphConfig
    from bumpgraph.workspace.graph import DependencyGraph, DependencyNode

log = get_logger(__name__)


class ActionKind(Enum):
    """Deferred action types, in the order they must run."""

    COMMIT = "commit"
    PUBLISH = "publish"


@dataclass(frozen=True)
class DeferredAction:
    """A shell step recorded now and executed later by ``bumpgraph publish``.

    Attributes:
        kind: What the action does.
        package: Package the action belongs to.
        location: Package directory the script runs in.
        script_name: File name of the script inside ``location``.
        commands: Shell commands, in order.
    """

    kind: ActionKind
    package: str
    location: Path
    script_name: str
    commands: tuple[str, ...]

    @property
    def path(self) -> Path:
        return self.location / self.script_name


@dataclass
class StagedRelease:
    """Everything a versioning run produces for one package.

    Attributes:
        package: Package name.
        previous_version: Version declared before the run.
        version: The new version.
        manifest: Manifest carrying the new version and dependency pins.
        changelog_entry: Markdown entry, or None when no commit asked for one.
        changelog_path: Changelog file the entry is prepended to.
        actions: Deferred commit and publish actions.
    """

    package: str
    previous_version: str
    version: str
    manifest: Manifest
    changelog_entry: str | None = None
    changelog_path: Path | None = None
    actions: list[DeferredAction] = field(default_factory=list)

    @property
    def location(self) -> Path:
        return self.manifest.location


def commit_action(
    package: str,
    location: Path,
    version: str,
    config: BumpGraphConfig,
) -> DeferredAction:
    """Action recording the new version in git.

    The commit message is itself a version marker for the next run.
    """
    message = config.versioning.commit_message.format(name=package, version=version)
    script = config.publish.commit_script
    return DeferredAction(
        kind=ActionKind.COMMIT,
        package=package,
        location=location,
        script_name=script,
        commands=(
            "git add ./",
            f"git reset -q -- ./{script} ./{config.publish.publish_script} || true",
            f"git commit -m {shlex.quote(message)}",
            f"rm ./{script}",
        ),
    )


def publish_action(
    package: str,
    location: Path,
    version: str,
    config: BumpGraphConfig,
) -> DeferredAction:
    """Action publishing the package at its new version."""
    script = config.publish.publish_script
    return DeferredAction(
        kind=ActionKind.PUBLISH,
        package=package,
        location=location,
        script_name=script,
        commands=(
            config.publish.command.format(name=package, version=version),
            f"rm ./{script}",
        ),
    )


def stage_release(
    node: DependencyNode,
    config: BumpGraphConfig,
    *,
    classifier: CommitClassifier | None = None,
    changelog: bool = True,
    today: str | None = None,
) -> StagedRelease:
    """Stage the release of one node.

    Args:
        node: A node that requires a bump, after propagation.
        config: Workspace configuration.
        classifier: Classifier extracting changelog text from commits.
        changelog: Whether to stage a changelog entry.
        today: Release date for the changelog header.
    """
    data = node.version_data
    version = data.next_version
    manifest = replace(
        node.manifest,
        version=version,
        dependencies=dict(node.manifest.dependencies),
    )

    entry = None
    changelog_path = None
    if changelog and config.changelog.enabled:
        entry = generate_changelog_entry(
            version, node.analysis.changelog, classifier=classifier, today=today
        )
        changelog_path = node.location / config.changelog.filename

    release = StagedRelease(
        package=node.name,
        previous_version=data.current_version,
        version=version,
        manifest=manifest,
        changelog_entry=entry,
        changelog_path=changelog_path,
        actions=[
            commit_action(node.name, node.location, version, config),
            publish_action(node.name, node.location, version, config),
        ],
    )
    log.info(
        "staged release",
        package=node.name,
        previous=data.current_version,
        version=version,
        changelog=entry is not None,
    )
    return release


def stage_releases(
    graph: DependencyGraph,
    config: BumpGraphConfig,
    *,
    classifier: CommitClassifier | None = None,
    changelog: bool = True,
    today: str | None = None,
) -> list[StagedRelease]:
    """Stage a release for every node requiring a bump, in name order."""
    return [
        stage_release(node, config, classifier=classifier, changelog=changelog, today=today)
        for node in graph.requiring_bump()
    ]


def materialize(releases: list[StagedRelease]) -> None:
    """Write staged manifests, changelog entries and action scripts to disk."""
    from bumpgraph.publish.scripts import write_action_script

    for release in releases:
        write_manifest(release.manifest)
        if release.changelog_entry and release.changelog_path is not None:
            prepend_to_changelog(release.changelog_path, release.changelog_entry)
        for action in release.actions:
            write_action_script(action)
        log.debug("materialized release", package=release.package, version=release.version)
