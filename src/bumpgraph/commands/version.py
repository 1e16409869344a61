"""Version command: resolve, validate, propagate and stage releases."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from bumpgraph.commands.base import Command, CommandContext
from bumpgraph.errors import BumpGraphError
from bumpgraph.execution.eligibility import EligibilityValidator, GraphEligibility
from bumpgraph.logging import get_logger
from bumpgraph.publish.staging import StagedRelease, materialize, stage_releases
from bumpgraph.versioning.propagation import Mutation, propagate
from bumpgraph.versioning.resolver import ResolverSettings
from bumpgraph.workspace.graph import DependencyGraph, NodeFactory, resolve_graph

if TYPE_CHECKING:
    from rich.console import Console

    from bumpgraph.workspace.source import PackageSource
    from bumpgraph.workspace.workspace import Workspace

log = get_logger(__name__)


@dataclass
class PackageOutcome:
    """Per-package outcome of a versioning run."""

    name: str
    current_version: str
    next_version: str
    bump_required: bool
    eligible: bool
    reasons: list[str] = field(default_factory=list)
    reference_count: int = 0


@dataclass
class VersionResult:
    """Result of version command."""

    packages: list[PackageOutcome]
    releases: list[StagedRelease] = field(default_factory=list)
    mutations: list[Mutation] = field(default_factory=list)
    simulate: bool = False
    success: bool = True
    error: str | None = None

    def get(self, name: str) -> PackageOutcome | None:
        return next((p for p in self.packages if p.name == name), None)


@dataclass
class VersionOptions:
    """Options for version command."""

    packages: list[str] = field(default_factory=list)
    simulate: bool = False
    since: str | None = None
    channel: str | None = None
    release: bool | None = None
    no_changelog: bool = False
    today: str | None = None
    cwd: Path | None = None


class VersionCommand(Command[VersionResult]):
    """Version packages and everything they depend on.

    Runs the full pipeline: discover the dependency closure, gate every
    node on a clean tree and passing tests, propagate bumps to dependents,
    then stage (and unless simulating, write) the release outputs.
    """

    def __init__(
        self,
        context: CommandContext,
        options: VersionOptions | None = None,
        *,
        source: PackageSource | None = None,
        validator: EligibilityValidator | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options or VersionOptions()
        self.source = source or self.workspace
        config = self.workspace.config
        self.validator = validator or EligibilityValidator(
            config.eligibility, env={**config.env, **context.env}
        )
        self.settings = ResolverSettings.from_config(
            config.versioning,
            channel=self.options.channel,
            release=self.options.release,
            since=self.options.since,
        )

    @property
    def is_simulation(self) -> bool:
        return self.options.simulate or self.context.dry_run

    def requested_packages(self) -> list[str]:
        """Packages given by name, else the package holding the working directory."""
        if self.options.packages:
            return self.options.packages
        current = self.workspace.package_at(self.options.cwd or Path.cwd())
        return [current] if current else []

    def validate(self) -> list[str]:
        if not self.requested_packages():
            return ["No packages given and the current directory is not inside a package"]
        return []

    async def build_graph(self) -> DependencyGraph:
        """Discover the dependency closure of the requested packages."""
        names = [self.workspace.resolve_name(name) for name in self.requested_packages()]
        factory = NodeFactory(self.source, self.settings)
        return await resolve_graph(names, factory)

    def _outcomes(self, graph: DependencyGraph) -> list[PackageOutcome]:
        outcomes = []
        for node in graph.sorted_nodes():
            report = node.eligibility
            outcomes.append(
                PackageOutcome(
                    name=node.name,
                    current_version=node.version_data.current_version,
                    next_version=node.version_data.next_version,
                    bump_required=node.version_data.bump_required,
                    eligible=report.eligible if report else True,
                    reasons=report.reasons if report else [],
                    reference_count=node.reference_count,
                )
            )
        return outcomes

    async def execute(self) -> VersionResult:
        if errors := self.validate():
            return VersionResult(packages=[], success=False, error="; ".join(errors))

        simulate = self.is_simulation
        graph = await self.build_graph()

        eligibility: GraphEligibility = await self.validator.validate_graph(
            graph, simulate=simulate
        )
        if not eligibility.eligible:
            failed = ", ".join(r.package for r in eligibility.failures)
            return VersionResult(
                packages=self._outcomes(graph),
                simulate=simulate,
                success=False,
                error=f"Packages not eligible for versioning: {failed}",
            )

        mutations = propagate(graph, self.workspace.config.versioning.forced_bump)
        releases = stage_releases(
            graph,
            self.workspace.config,
            classifier=self.settings.classifier,
            changelog=not self.options.no_changelog,
            today=self.options.today,
        )

        if simulate:
            log.info("simulation, nothing written", releases=len(releases))
        else:
            materialize(releases)

        return VersionResult(
            packages=self._outcomes(graph),
            releases=releases,
            mutations=mutations,
            simulate=simulate,
            success=True,
        )


async def resolve_and_version(
    workspace: Workspace,
    packages: list[str],
    *,
    simulate: bool = False,
    since: str | None = None,
    channel: str | None = None,
    release: bool | None = None,
    no_changelog: bool = False,
) -> VersionResult:
    """Convenience function for versioning."""
    context = CommandContext(workspace=workspace, dry_run=simulate)
    options = VersionOptions(
        packages=packages,
        simulate=simulate,
        since=since,
        channel=channel,
        release=release,
        no_changelog=no_changelog,
    )
    return await VersionCommand(context, options).execute()


def _print_outcomes(console: Console, result: VersionResult) -> None:
    from rich.table import Table

    table = Table()
    table.add_column("Package", style="cyan")
    table.add_column("Current", style="dim")
    table.add_column("Next", style="green")
    table.add_column("Bump", style="magenta")
    table.add_column("Eligible")

    for p in result.packages:
        table.add_row(
            p.name,
            p.current_version,
            p.next_version if p.bump_required else "-",
            "yes" if p.bump_required else "no",
            "[green]yes[/green]" if p.eligible else "[red]no[/red]",
        )
    console.print(table)


async def handle_version_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    packages: list[str],
    simulate: bool = False,
    since: str | None = None,
    channel: str | None = None,
    release: bool | None = None,
    no_changelog: bool = False,
) -> None:
    """CLI handler for the version command."""
    import typer

    try:
        result = await resolve_and_version(
            workspace,
            packages,
            simulate=simulate,
            since=since,
            channel=channel,
            release=release,
            no_changelog=no_changelog,
        )
    except BumpGraphError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if result.packages:
        _print_outcomes(console, result)

    for p in result.packages:
        for reason in p.reasons:
            error_console.print(f"[red]{p.name}:[/red] {reason}")

    if not result.success:
        error_console.print(f"\n[red]Versioning failed:[/red] {result.error}")
        raise typer.Exit(1)

    if not result.releases:
        console.print("[yellow]No packages require versioning.[/yellow]")
    elif result.simulate:
        console.print("\n[yellow]Simulation: no files were written.[/yellow]")
    else:
        console.print(f"\n[green]Staged {len(result.releases)} releases.[/green]")
        console.print("Run [bold]bumpgraph publish[/bold] to commit and publish them.")
