"""bumpgraph commands."""

from bumpgraph.commands.base import Command, CommandContext, SyncCommand
from bumpgraph.commands.graph import (
    GraphCommand,
    GraphEntry,
    GraphOptions,
    GraphResult,
    handle_graph_command,
    show_graph,
)
from bumpgraph.commands.publish import (
    PublishCommand,
    PublishOptions,
    PublishResult,
    ScriptOutcome,
    handle_publish_command,
    publish,
)
from bumpgraph.commands.sync import (
    PinChange,
    SyncDependenciesCommand,
    SyncOptions,
    SyncResult,
    handle_sync_command,
    sync_dependencies,
)
from bumpgraph.commands.version import (
    PackageOutcome,
    VersionCommand,
    VersionOptions,
    VersionResult,
    handle_version_command,
    resolve_and_version,
)

__all__ = [
    # Base
    "Command",
    "CommandContext",
    "SyncCommand",
    # Version
    "PackageOutcome",
    "VersionCommand",
    "VersionOptions",
    "VersionResult",
    "handle_version_command",
    "resolve_and_version",
    # Graph
    "GraphCommand",
    "GraphEntry",
    "GraphOptions",
    "GraphResult",
    "handle_graph_command",
    "show_graph",
    # Sync
    "PinChange",
    "SyncDependenciesCommand",
    "SyncOptions",
    "SyncResult",
    "handle_sync_command",
    "sync_dependencies",
    # Publish
    "PublishCommand",
    "PublishOptions",
    "PublishResult",
    "ScriptOutcome",
    "handle_publish_command",
    "publish",
]
