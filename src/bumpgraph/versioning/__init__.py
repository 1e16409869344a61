"""Version arithmetic, commit classification and propagation."""

from bumpgraph.versioning.changelog import generate_changelog_entry, prepend_to_changelog
from bumpgraph.versioning.classify import (
    Classification,
    CommitClassifier,
    CommitFormat,
    ConventionalClassifier,
    MarkerClassifier,
    VersionMarkerPolicy,
    get_classifier,
)
from bumpgraph.versioning.history import HistoryAnalysis, analyze_history
from bumpgraph.versioning.propagation import (
    ForcedBump,
    Mutation,
    PropagationEngine,
    PropagationState,
    propagate,
)
from bumpgraph.versioning.resolver import ResolverSettings, VersionData, resolve_version
from bumpgraph.versioning.semver import BumpType, Version, bump, compare, format_version, parse

__all__ = [
    "BumpType",
    "Classification",
    "CommitClassifier",
    "CommitFormat",
    "ConventionalClassifier",
    "ForcedBump",
    "HistoryAnalysis",
    "MarkerClassifier",
    "Mutation",
    "PropagationEngine",
    "PropagationState",
    "ResolverSettings",
    "Version",
    "VersionData",
    "VersionMarkerPolicy",
    "analyze_history",
    "bump",
    "compare",
    "format_version",
    "generate_changelog_entry",
    "get_classifier",
    "parse",
    "prepend_to_changelog",
    "propagate",
    "resolve_version",
]
