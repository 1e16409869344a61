"""Release staging and deferred actions."""

from bumpgraph.publish.scripts import (
    PendingScript,
    find_pending_scripts,
    render_script,
    run_action_script,
    write_action_script,
)
from bumpgraph.publish.staging import (
    ActionKind,
    DeferredAction,
    StagedRelease,
    materialize,
    stage_release,
    stage_releases,
)

__all__ = [
    "ActionKind",
    "DeferredAction",
    "PendingScript",
    "StagedRelease",
    "find_pending_scripts",
    "materialize",
    "render_script",
    "run_action_script",
    "stage_release",
    "stage_releases",
    "write_action_script",
]
