"""Git operations."""

from bumpgraph.git.commits import Commit, get_commits, parse_commit_log, read_commit_log
from bumpgraph.git.repo import get_status, run_git_command_async

__all__ = [
    "Commit",
    "get_commits",
    "get_status",
    "parse_commit_log",
    "read_commit_log",
    "run_git_command_async",
]
