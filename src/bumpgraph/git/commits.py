"""Commit log reading and parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from bumpgraph.git.repo import run_git_command_async

# Each unit produced by splitting the log on "commit " headers looks like:
#
#   3f2a9c1...
#   Author: Jane Doe <jane@example.com>
#   Date:   2024-03-01T10:00:00+00:00
#
#       #feature add parser
COMMIT_SPLIT_PATTERN = re.compile(r"^commit[ \t]+(?=[0-9a-f]{4,64})", re.MULTILINE)
COMMIT_PATTERN = re.compile(
    r"^(?P<sha>[0-9a-f]{4,64})[^\n]*\n"
    r"(?:Merge:[^\n]*\n)?"
    r"\s*Author:\s*(?P<author>[^\n]*)\n"
    r"\s*Date:\s*(?P<date>[^\n]*)\n"
    r"(?P<message>.*)$",
    re.IGNORECASE | re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class Commit:
    """A single commit from the log.

    Attributes:
        sha: Commit SHA.
        author: Author name and email.
        date: Author date as printed by git.
        message: Full commit message with indentation removed.
    """

    sha: str
    author: str
    date: str
    message: str

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]

    @property
    def short_sha(self) -> str:
        """Abbreviated SHA."""
        return self.sha[:7]


def _dedent_message(raw: str) -> str:
    lines = [line.strip() for line in raw.strip("\n").splitlines()]
    return "\n".join(lines).strip()


def parse_commit_log(log: str) -> list[Commit]:
    """Parse ``git log`` output into commits.

    Units that do not look like a commit are skipped so a single odd entry
    cannot abort a run.

    Args:
        log: Raw ``git log --no-decorate`` output, newest first.

    Returns:
        Commits in log order (newest first).
    """
    commits: list[Commit] = []
    for unit in COMMIT_SPLIT_PATTERN.split(log):
        match = COMMIT_PATTERN.match(unit.strip("\n"))
        if not match:
            continue
        commits.append(
            Commit(
                sha=match.group("sha").strip(),
                author=match.group("author").strip(),
                date=match.group("date").strip(),
                message=_dedent_message(match.group("message")),
            )
        )
    return commits


async def read_commit_log(location: Path, since: str | None = None) -> str:
    """Read the raw commit log for a package directory.

    Args:
        location: Package directory. Only commits touching it are listed.
        since: Optional commit or tag; only commits after it are listed.

    Returns:
        Raw log text, newest commit first.

    Raises:
        GitError: If git fails.
    """
    args = ["log", "--no-decorate", "--date=iso-strict"]
    if since:
        args.append(f"{since}..HEAD")
    args.extend(["--", "."])
    _, stdout, _ = await run_git_command_async(args, cwd=location)
    return stdout


async def get_commits(location: Path, since: str | None = None) -> list[Commit]:
    """Read and parse the commit log for a package directory."""
    return parse_commit_log(await read_commit_log(location, since))
