"""Sync command: pin managed dependencies to current workspace versions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bumpgraph.commands.base import CommandContext, SyncCommand
from bumpgraph.errors import BumpGraphError
from bumpgraph.logging import get_logger
from bumpgraph.workspace.manifest import declared_version, pin_constraint, write_manifest

if TYPE_CHECKING:
    from rich.console import Console

    from bumpgraph.workspace.workspace import Workspace

log = get_logger(__name__)


@dataclass
class PinChange:
    """A dependency constraint rewritten by sync."""

    package: str
    dependency: str
    previous: str
    constraint: str


@dataclass
class SyncResult:
    """Result of sync command."""

    changes: list[PinChange] = field(default_factory=list)
    written: list[str] = field(default_factory=list)

    @property
    def changed_packages(self) -> list[str]:
        return sorted({c.package for c in self.changes})


@dataclass
class SyncOptions:
    """Options for sync command."""

    dry_run: bool = False


class SyncDependenciesCommand(SyncCommand[SyncResult]):
    """Point every managed dependency at the version its package declares.

    Constraints keep their operator (``^1.0.0`` becomes ``^1.2.0``);
    constraints without a version, such as ``workspace:*``, are left alone.
    """

    def __init__(self, context: CommandContext, options: SyncOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or SyncOptions()

    def execute(self) -> SyncResult:
        manifests = self.workspace.manifests()
        versions = {m.name: m.version for m in manifests}
        result = SyncResult()

        for manifest in manifests:
            changed = False
            for dependency, constraint in manifest.dependencies.items():
                target = versions.get(dependency)
                if target is None or not self.workspace.is_managed(dependency):
                    continue
                declared = declared_version(constraint)
                if declared is None or declared == target:
                    continue
                pinned = pin_constraint(constraint, target)
                manifest.dependencies[dependency] = pinned
                result.changes.append(PinChange(manifest.name, dependency, constraint, pinned))
                changed = True

            if changed and not (self.options.dry_run or self.context.dry_run):
                write_manifest(manifest)
                result.written.append(manifest.name)
                log.info("synced dependency versions", package=manifest.name)

        return result


def sync_dependencies(workspace: Workspace, *, dry_run: bool = False) -> SyncResult:
    """Convenience function for dependency sync."""
    context = CommandContext(workspace=workspace, dry_run=dry_run)
    return SyncDependenciesCommand(context, SyncOptions(dry_run=dry_run)).execute()


def handle_sync_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    dry_run: bool = False,
) -> None:
    """CLI handler for the sync command."""
    import typer

    try:
        result = sync_dependencies(workspace, dry_run=dry_run)
    except BumpGraphError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if not result.changes:
        console.print("[green]All dependency versions are in sync.[/green]")
        return

    for change in result.changes:
        console.print(
            f"[cyan]{change.package}[/cyan]: {change.dependency} "
            f"[dim]{change.previous}[/dim] -> [green]{change.constraint}[/green]"
        )
    if dry_run:
        console.print("\n[yellow]Dry run: no manifests were written.[/yellow]")
    else:
        console.print(f"\n[green]Updated {len(result.written)} manifests.[/green]")
