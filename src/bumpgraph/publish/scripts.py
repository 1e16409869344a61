"""Deferred action scripts.

Actions are written as executable shell scripts in the package directory
(``commit.bounty`` and ``publish.bounty`` by default). Each script deletes
itself when it succeeds, so whatever is left on disk is still pending.
"""

from __future__ import annotations

import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from bumpgraph.errors import BumpGraphError
from bumpgraph.execution.runner import run_command
from bumpgraph.logging import get_logger
from bumpgraph.publish.staging import ActionKind, DeferredAction

if TYPE_CHECKING:
    from bumpgraph.config.schema import PublishConfig

log = get_logger(__name__)

SCRIPT_MODE = stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH


def render_script(action: DeferredAction) -> str:
    """Render an action as a POSIX shell script."""
    lines = ["#!/bin/sh", "", "set -e", ""]
    lines.extend(action.commands)
    return "\n".join(lines) + "\n"


def write_action_script(action: DeferredAction) -> Path:
    """Write an action script to its package directory and make it executable.

    Raises:
        BumpGraphError: If the script cannot be written.
    """
    path = action.path
    try:
        path.write_text(render_script(action), encoding="utf-8")
        path.chmod(SCRIPT_MODE)
    except OSError as e:
        raise BumpGraphError(f"Cannot write {path}: {e.strerror or e}") from e
    log.debug("wrote action script", package=action.package, script=str(path))
    return path


@dataclass
class PendingScript:
    """An action script found on disk."""

    package: str
    kind: ActionKind
    path: Path


def find_pending_scripts(
    packages: dict[str, Path],
    config: PublishConfig,
    *,
    include_commit: bool = True,
) -> list[PendingScript]:
    """List action scripts left in package directories.

    Commit scripts come before publish scripts within a package; packages
    are visited in name order.
    """
    kinds = [(ActionKind.PUBLISH, config.publish_script)]
    if include_commit:
        kinds.insert(0, (ActionKind.COMMIT, config.commit_script))

    pending = []
    for name in sorted(packages):
        for kind, script in kinds:
            path = packages[name] / script
            if path.is_file():
                pending.append(PendingScript(package=name, kind=kind, path=path))
    return pending


async def run_action_script(
    script: PendingScript,
    *,
    timeout: float | None = None,
    on_output: Callable[[str], None] | None = None,
) -> int:
    """Run a pending action script inside its package directory.

    Returns:
        The script's exit code.
    """
    log.info("running action script", package=script.package, script=script.path.name)
    output = await run_command(
        f"sh ./{script.path.name}",
        cwd=script.path.parent,
        timeout=timeout,
        on_stdout=on_output,
        on_stderr=on_output,
    )
    if output.exit_code != 0:
        log.error(
            "action script failed",
            package=script.package,
            script=script.path.name,
            exit_code=output.exit_code,
        )
    return output.exit_code
