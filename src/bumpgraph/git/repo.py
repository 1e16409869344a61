"""Git subprocess helpers."""

from __future__ import annotations

import asyncio
from pathlib import Path

from bumpgraph.errors import GitError


async def run_git_command_async(
    args: list[str],
    cwd: Path | None = None,
    *,
    check: bool = True,
) -> tuple[int, str, str]:
    """Run a git command asynchronously.

    Args:
        args: Git command arguments (without 'git').
        cwd: Working directory.
        check: Raise on non-zero exit code.

    Returns:
        Tuple of (exit_code, stdout, stderr).

    Raises:
        GitError: If command fails and check is True.
    """
    cmd = ["git"] + args

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")

        if check and process.returncode != 0:
            raise GitError(
                stderr.strip() or f"Command failed with exit code {process.returncode}",
                command=" ".join(cmd),
            )

        return process.returncode or 0, stdout, stderr
    except FileNotFoundError as e:
        raise GitError("Git is not installed") from e


async def get_status(cwd: Path) -> list[str]:
    """List uncommitted changes below a directory.

    Args:
        cwd: Package directory. Only paths inside it are reported.

    Returns:
        ``git status --porcelain`` lines, empty when the tree is clean.
    """
    _, stdout, _ = await run_git_command_async(["status", "--porcelain", "--", "."], cwd=cwd)
    return [line for line in stdout.splitlines() if line.strip()]

