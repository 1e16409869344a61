"""Commit message classification.

A classifier decides, from a commit message alone, whether the commit is a
breaking change, a feature, and whether it should appear in the changelog.
Two strategies are provided:

- :class:`MarkerClassifier` matches hashtag-style prefixes such as
  ``#breaking``, ``#feature`` and a trailing ``#changelog`` marker.
- :class:`ConventionalClassifier` understands conventional commit headers
  (``feat(core)!: description``).

The rule recognizing the commit that recorded the previous version is a
separate policy, :class:`VersionMarkerPolicy`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from bumpgraph.git.commits import Commit

if TYPE_CHECKING:
    from bumpgraph.config.schema import VersioningConfig

DEFAULT_BREAKING_PATTERN = r"^#?[Bb]reak(ing)?"
DEFAULT_FEATURE_PATTERN = r"^#?[Ff]eat(ure)?"
DEFAULT_CHANGELOG_PATTERN = r"#changelog\s*$"
DEFAULT_VERSION_PREFIX = r"^v?\d+\.\d+\.\d+"

VERSION_TOKEN_PATTERN = re.compile(r"\d+\.\d+\.\d+(?:-[0-9A-Za-z]+)?")

# Conventional commit regex
# Matches: type(scope)!: description
# Examples:
#   feat: add new feature
#   fix(core): fix bug
#   feat!: breaking change
CONVENTIONAL_PATTERN = re.compile(
    r"^(?P<type>feat|fix|docs|style|refactor|perf|test|chore|ci|build|revert)"
    r"(?:\((?P<scope>[^)]+)\))?"
    r"(?P<breaking>!)?"
    r": (?P<description>.+)$",
    re.IGNORECASE,
)

CHANGELOG_TYPES = frozenset({"feat", "fix", "perf", "revert"})


class CommitFormat(str, Enum):
    """How commit messages are classified."""

    MARKER = "marker"
    CONVENTIONAL = "conventional"


@dataclass(frozen=True, slots=True)
class Classification:
    """What a single commit message says about the change."""

    breaking: bool = False
    feature: bool = False
    changelog: bool = False


class CommitClassifier(Protocol):
    """Strategy interface for commit classification."""

    def classify(self, message: str) -> Classification: ...

    def changelog_message(self, message: str) -> str: ...


class MarkerClassifier:
    """Classify commits by hashtag markers.

    Breaking and feature markers are matched at the start of the message,
    the changelog marker at the end of any line. The changelog text is
    whatever follows the line carrying the changelog marker, or that line
    itself when nothing follows.
    """

    def __init__(
        self,
        breaking: str = DEFAULT_BREAKING_PATTERN,
        feature: str = DEFAULT_FEATURE_PATTERN,
        changelog: str = DEFAULT_CHANGELOG_PATTERN,
    ) -> None:
        self.breaking = re.compile(breaking)
        self.feature = re.compile(feature)
        self.changelog = re.compile(changelog, re.MULTILINE | re.IGNORECASE)

    def classify(self, message: str) -> Classification:
        return Classification(
            breaking=bool(self.breaking.search(message)),
            feature=bool(self.feature.search(message)),
            changelog=bool(self.changelog.search(message)),
        )

    def changelog_message(self, message: str) -> str:
        match = self.changelog.search(message)
        if not match:
            return " ".join(line.strip() for line in message.splitlines()).strip()

        line_end = message.find("\n", match.end())
        following = "" if line_end == -1 else message[line_end + 1 :]
        text = " ".join(line.strip() for line in following.splitlines() if line.strip())
        if text:
            return text

        line_start = message.rfind("\n", 0, match.start()) + 1
        return message[line_start : match.start()].strip()


@dataclass(frozen=True, slots=True)
class ParsedCommit:
    """A parsed conventional commit.

    Attributes:
        type: Commit type (feat, fix, etc.).
        scope: Optional scope.
        description: Commit description.
        body: Commit body.
        breaking: Whether this is a breaking change.
        raw_message: Original commit message.
    """

    type: str
    scope: str | None
    description: str
    body: str | None
    breaking: bool
    raw_message: str


def parse_commit_message(message: str) -> ParsedCommit | None:
    """Parse a commit message in conventional commit format.

    Args:
        message: Commit message to parse.

    Returns:
        ParsedCommit if the message follows conventional commit format, None otherwise.
    """
    lines = message.strip().split("\n")
    first_line = lines[0]

    match = CONVENTIONAL_PATTERN.match(first_line)
    if not match:
        return None

    body = "\n".join(lines[1:]).strip() if len(lines) > 1 else None

    # Check for breaking change in body
    breaking = bool(match.group("breaking"))
    if body and ("BREAKING CHANGE:" in body or "BREAKING-CHANGE:" in body):
        breaking = True

    return ParsedCommit(
        type=match.group("type").lower(),
        scope=match.group("scope"),
        description=match.group("description"),
        body=body,
        breaking=breaking,
        raw_message=message,
    )


class ConventionalClassifier:
    """Classify commits written in conventional commit format.

    Messages that are not conventional commits fall back to the explicit
    changelog marker only.
    """

    def __init__(self, changelog: str = DEFAULT_CHANGELOG_PATTERN) -> None:
        self.markers = MarkerClassifier(changelog=changelog)

    def classify(self, message: str) -> Classification:
        marked = self.markers.changelog.search(message) is not None
        parsed = parse_commit_message(message)
        if parsed is None:
            return Classification(changelog=marked)
        return Classification(
            breaking=parsed.breaking,
            feature=parsed.type == "feat",
            changelog=marked or parsed.type in CHANGELOG_TYPES,
        )

    def changelog_message(self, message: str) -> str:
        parsed = parse_commit_message(message)
        if parsed is None:
            return self.markers.changelog_message(message)
        scope = f"**{parsed.scope}:** " if parsed.scope else ""
        return f"{scope}{parsed.description}"


def get_classifier(config: VersioningConfig) -> CommitClassifier:
    """Build the classifier selected by the versioning configuration."""
    if config.commit_format == CommitFormat.CONVENTIONAL:
        return ConventionalClassifier(changelog=config.markers.changelog)
    return MarkerClassifier(
        breaking=config.markers.breaking,
        feature=config.markers.feature,
        changelog=config.markers.changelog,
    )


@dataclass(frozen=True)
class VersionMarkerPolicy:
    """Recognize the commit that recorded a package's current version.

    Attributes:
        match_name_and_version: Treat a commit mentioning both the package
            name and its declared version as the marker.
        version_prefix: Pattern for messages that begin with an explicit
            version token; ``None`` disables the rule.
    """

    match_name_and_version: bool = True
    version_prefix: str | None = DEFAULT_VERSION_PREFIX

    @classmethod
    def from_config(cls, config: VersioningConfig) -> VersionMarkerPolicy:
        marker = config.version_marker
        return cls(
            match_name_and_version=marker.match_name_and_version,
            version_prefix=marker.version_prefix,
        )

    def is_marker(self, commit: Commit, name: str, version: str) -> bool:
        """Check whether ``commit`` recorded ``version`` of package ``name``."""
        message = commit.message
        if self.match_name_and_version and name in message and version in message:
            return True
        if self.version_prefix and re.match(self.version_prefix, message):
            return True
        return False

    def recover_version(self, commit: Commit, name: str | None = None) -> str | None:
        """Extract the version recorded by a marker commit.

        The first version token following the package name wins. Otherwise
        the last token of the subject line, falling back to the last one
        anywhere in the message.
        """
        if name and name in commit.message:
            after = commit.message[commit.message.index(name) + len(name) :]
            match = VERSION_TOKEN_PATTERN.search(after)
            if match:
                return match.group(0)

        tokens = VERSION_TOKEN_PATTERN.findall(commit.subject)
        if not tokens:
            tokens = VERSION_TOKEN_PATTERN.findall(commit.message)
        return tokens[-1] if tokens else None
