"""Per-package next version resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bumpgraph.errors import MalformedVersionError
from bumpgraph.logging import get_logger
from bumpgraph.versioning.classify import (
    CommitClassifier,
    MarkerClassifier,
    VersionMarkerPolicy,
    get_classifier,
)
from bumpgraph.versioning.history import HistoryAnalysis
from bumpgraph.versioning.semver import Version, bump, latest, parse

if TYPE_CHECKING:
    from bumpgraph.config.schema import VersioningConfig

log = get_logger(__name__)


@dataclass
class VersionData:
    """Version state of one package during a resolution run.

    Attributes:
        current_version: Version declared in the manifest.
        recovered_version: Version recovered from the commit history.
        baseline_version: Newest of the current and recovered versions.
        next_version: Version the package moves to when bumped.
        bump_required: Whether the package must be versioned.
    """

    current_version: str
    recovered_version: str
    baseline_version: str
    next_version: str
    bump_required: bool

    @property
    def resolved_version(self) -> str:
        """The version dependents should declare after this run."""
        return self.next_version if self.bump_required else self.baseline_version


@dataclass(frozen=True)
class ResolverSettings:
    """Inputs to version resolution shared by every package of a run.

    Attributes:
        classifier: Commit classification strategy.
        marker_policy: Version-marker recognition rule.
        channel: Release channel next versions are placed in.
        release: Treat breaking changes as major bumps even before 1.0.
        since: Only consider commits after this ref.
    """

    classifier: CommitClassifier = field(default_factory=MarkerClassifier)
    marker_policy: VersionMarkerPolicy = field(default_factory=VersionMarkerPolicy)
    channel: str = ""
    release: bool = False
    since: str | None = None

    @classmethod
    def from_config(
        cls,
        config: VersioningConfig,
        *,
        channel: str | None = None,
        release: bool | None = None,
        since: str | None = None,
    ) -> ResolverSettings:
        return cls(
            classifier=get_classifier(config),
            marker_policy=VersionMarkerPolicy.from_config(config),
            channel=config.channel if channel is None else channel,
            release=config.release if release is None else release,
            since=since,
        )


def _parse(version: str, package: str) -> Version:
    try:
        return parse(version)
    except MalformedVersionError as e:
        raise MalformedVersionError(version, package=package) from e


def resolve_version(
    name: str,
    current_version: str,
    analysis: HistoryAnalysis,
    *,
    channel: str = "",
    release: bool = False,
) -> VersionData:
    """Compute a package's baseline and next version.

    Args:
        name: Package name.
        current_version: Version declared in the manifest.
        analysis: Commit history analysis for the package.
        channel: Release channel of the next version.
        release: Release mode for breaking changes.

    Returns:
        Version data for the package.

    Raises:
        MalformedVersionError: If either version cannot be parsed.
    """
    current = _parse(current_version, name)
    recovered = _parse(analysis.recovered_version, name)
    baseline = latest(current, recovered)

    next_version = bump(
        baseline,
        breaking=analysis.breaking,
        feature=analysis.feature,
        release_mode=release,
    ).with_channel(channel)

    data = VersionData(
        current_version=str(current),
        recovered_version=str(recovered),
        baseline_version=str(baseline),
        next_version=str(next_version),
        bump_required=analysis.changed,
    )

    if data.bump_required:
        log.info(
            "determined next version",
            package=name,
            latest=data.baseline_version,
            next=data.next_version,
            commits=analysis.commit_drift,
        )
    else:
        log.debug("no changes since last version", package=name, version=data.baseline_version)

    return data
