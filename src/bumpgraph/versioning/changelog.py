"""Changelog entry generation."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from bumpgraph.git.commits import Commit
from bumpgraph.versioning.classify import CommitClassifier, MarkerClassifier


def iso_date(value: str | None = None) -> str:
    """Format a git date (or today) as ``YYYY-MM-DD``."""
    if not value:
        return date.today().isoformat()
    try:
        return datetime.fromisoformat(value.strip()).date().isoformat()
    except ValueError:
        return value.strip()[:10]


def format_changelog_line(commit: Commit, classifier: CommitClassifier) -> str:
    """Render one commit as a changelog bullet."""
    breaking = " **breaking change** " if classifier.classify(commit.message).breaking else ""
    message = classifier.changelog_message(commit.message)
    return f"- [{iso_date(commit.date)}]{breaking}\n\n    {message}"


def generate_changelog_entry(
    version: str,
    commits: list[Commit],
    *,
    classifier: CommitClassifier | None = None,
    today: str | None = None,
) -> str | None:
    """Generate the changelog section for a new version.

    Args:
        version: The new version.
        commits: Changelog commits, newest first.
        classifier: Classifier that extracts the changelog text.
        today: Release date, defaults to the current date.

    Returns:
        Markdown section, or None when there is nothing to record.
    """
    if not commits:
        return None

    classifier = classifier or MarkerClassifier()
    lines = [format_changelog_line(commit, classifier) for commit in commits]
    header = f"## [v{version}] - {today or iso_date()}"
    return header + "\n\n" + "\n\n".join(lines) + "\n\n"


def prepend_to_changelog(path: Path, entry: str) -> None:
    """Insert an entry at the top of a changelog file, creating it if needed."""
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    path.write_text(entry + existing, encoding="utf-8")
