"""Graph command: show the dependency closure of packages."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING

from bumpgraph.commands.base import Command, CommandContext
from bumpgraph.errors import BumpGraphError
from bumpgraph.versioning.propagation import propagate
from bumpgraph.versioning.resolver import ResolverSettings
from bumpgraph.workspace.graph import NodeFactory, resolve_graph

if TYPE_CHECKING:
    from rich.console import Console

    from bumpgraph.workspace.workspace import Workspace


@dataclass
class GraphEntry:
    """One package of the closure."""

    name: str
    current_version: str
    next_version: str
    bump_required: bool
    reference_count: int
    dependencies: list[str] = field(default_factory=list)


@dataclass
class GraphResult:
    """Result of graph command."""

    entries: list[GraphEntry]

    def to_dict(self) -> dict[str, dict]:
        return {e.name: asdict(e) for e in self.entries}


@dataclass
class GraphOptions:
    """Options for graph command."""

    packages: list[str] = field(default_factory=list)
    since: str | None = None


class GraphCommand(Command[GraphResult]):
    """Discover the dependency closure and the versions it would get.

    Bumps are propagated in memory so the listed next versions match what
    ``version`` would produce. No tests run and nothing is written.
    """

    def __init__(self, context: CommandContext, options: GraphOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or GraphOptions()

    async def execute(self) -> GraphResult:
        config = self.workspace.config
        settings = ResolverSettings.from_config(config.versioning, since=self.options.since)
        factory = NodeFactory(self.workspace, settings)
        names = [self.workspace.resolve_name(n) for n in self.options.packages]

        graph = await resolve_graph(names, factory)
        propagate(graph, config.versioning.forced_bump)

        entries = [
            GraphEntry(
                name=node.name,
                current_version=node.version_data.current_version,
                next_version=node.version_data.resolved_version,
                bump_required=node.version_data.bump_required,
                reference_count=node.reference_count,
                dependencies=[d for d in node.dependencies if d in graph],
            )
            for node in graph.sorted_nodes()
        ]
        return GraphResult(entries=entries)


async def show_graph(
    workspace: Workspace,
    packages: list[str],
    *,
    since: str | None = None,
) -> GraphResult:
    """Convenience function for graph discovery."""
    context = CommandContext(workspace=workspace, dry_run=True)
    return await GraphCommand(context, GraphOptions(packages=packages, since=since)).execute()


async def handle_graph_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    packages: list[str],
    since: str | None = None,
    as_json: bool = False,
) -> None:
    """CLI handler for the graph command."""
    import json

    import typer
    from rich.table import Table

    try:
        result = await show_graph(workspace, packages, since=since)
    except BumpGraphError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    table = Table()
    table.add_column("Package", style="cyan")
    table.add_column("Version")
    table.add_column("Refs", justify="right")
    table.add_column("Dependencies", style="dim")
    for e in result.entries:
        version = e.current_version
        if e.bump_required:
            version = f"{e.current_version} -> [green]{e.next_version}[/green]"
        table.add_row(e.name, version, str(e.reference_count), ", ".join(e.dependencies))
    console.print(table)
