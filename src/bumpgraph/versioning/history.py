"""Commit history analysis.

Walks a package's commits newest-first up to the commit that recorded the
current version and summarizes what changed since then.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bumpgraph.git.commits import Commit
from bumpgraph.versioning.classify import (
    CommitClassifier,
    MarkerClassifier,
    VersionMarkerPolicy,
)
from bumpgraph.versioning.semver import DEFAULT_RECOVERED_VERSION


@dataclass
class HistoryAnalysis:
    """Summary of the commits made since the last recorded version.

    Attributes:
        breaking: A breaking change was committed.
        feature: A feature was committed.
        commit_drift: Number of commits newer than the version marker, or
            all commits when no marker was found.
        recovered_version: Version recorded by the marker commit, or
            ``0.0.0-experimental`` when there is none.
        marker: The version-marker commit, if found.
        changelog: Commits flagged for the changelog, newest first.
    """

    breaking: bool = False
    feature: bool = False
    commit_drift: int = 0
    recovered_version: str = DEFAULT_RECOVERED_VERSION
    marker: Commit | None = None
    changelog: list[Commit] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether anything was committed since the last version."""
        return self.commit_drift > 0


def analyze_history(
    commits: list[Commit],
    *,
    name: str,
    current_version: str,
    classifier: CommitClassifier | None = None,
    marker_policy: VersionMarkerPolicy | None = None,
) -> HistoryAnalysis:
    """Classify commits up to the first version-marker commit.

    Args:
        commits: Commits, newest first.
        name: Package name, used to recognize the marker commit.
        current_version: Version declared in the manifest.
        classifier: Commit classification strategy.
        marker_policy: Version-marker recognition rule.

    Returns:
        The analysis. Commits older than the marker are never inspected.
    """
    classifier = classifier or MarkerClassifier()
    marker_policy = marker_policy or VersionMarkerPolicy()
    analysis = HistoryAnalysis()

    for commit in commits:
        if marker_policy.is_marker(commit, name, current_version):
            analysis.marker = commit
            recovered = marker_policy.recover_version(commit, name)
            if recovered:
                analysis.recovered_version = recovered
            break

        classification = classifier.classify(commit.message)
        if classification.breaking:
            analysis.breaking = True
        if classification.feature:
            analysis.feature = True
        if classification.changelog:
            analysis.changelog.append(commit)
        analysis.commit_drift += 1

    return analysis
