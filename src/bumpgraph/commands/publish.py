"""Publish command: run pending deferred action scripts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bumpgraph.commands.base import Command, CommandContext
from bumpgraph.errors import BumpGraphError
from bumpgraph.publish.scripts import PendingScript, find_pending_scripts, run_action_script

if TYPE_CHECKING:
    from rich.console import Console

    from bumpgraph.workspace.workspace import Workspace


@dataclass
class ScriptOutcome:
    """A pending script and, when it ran, its exit code."""

    script: PendingScript
    exit_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class PublishResult:
    """Result of publish command."""

    scripts: list[ScriptOutcome] = field(default_factory=list)
    success: bool = True
    error: str | None = None


@dataclass
class PublishOptions:
    """Options for publish command."""

    no_commit: bool = False
    dry_run: bool = False
    timeout: float | None = None


class PublishCommand(Command[PublishResult]):
    """Run the commit and publish scripts left by ``bumpgraph version``.

    Scripts run one at a time, commit before publish, and the command stops
    at the first failing script.
    """

    def __init__(self, context: CommandContext, options: PublishOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or PublishOptions()

    async def execute(self) -> PublishResult:
        pending = find_pending_scripts(
            self.workspace.packages,
            self.workspace.config.publish,
            include_commit=not self.options.no_commit,
        )
        result = PublishResult(scripts=[ScriptOutcome(s) for s in pending])

        if self.options.dry_run or self.context.dry_run:
            return result

        for outcome in result.scripts:
            outcome.exit_code = await run_action_script(
                outcome.script, timeout=self.options.timeout
            )
            if not outcome.ok:
                result.success = False
                result.error = (
                    f"{outcome.script.path.name} failed in {outcome.script.package} "
                    f"(exit {outcome.exit_code})"
                )
                break
        return result


async def publish(
    workspace: Workspace,
    *,
    no_commit: bool = False,
    dry_run: bool = False,
) -> PublishResult:
    """Convenience function to run pending scripts."""
    context = CommandContext(workspace=workspace, dry_run=dry_run)
    options = PublishOptions(no_commit=no_commit, dry_run=dry_run)
    return await PublishCommand(context, options).execute()


async def handle_publish_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    no_commit: bool = False,
    dry_run: bool = False,
) -> None:
    """CLI handler for the publish command."""
    import typer

    try:
        result = await publish(workspace, no_commit=no_commit, dry_run=dry_run)
    except BumpGraphError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if not result.scripts:
        console.print("[yellow]Nothing to publish.[/yellow]")
        return

    for outcome in result.scripts:
        script = outcome.script
        if outcome.exit_code is None:
            status = "[dim]pending[/dim]"
        elif outcome.ok:
            status = "[green]done[/green]"
        else:
            status = f"[red]failed ({outcome.exit_code})[/red]"
        console.print(f"[cyan]{script.package}[/cyan] {script.kind.value}: {status}")

    if not result.success:
        error_console.print(f"\n[red]Publish failed:[/red] {result.error}")
        raise typer.Exit(1)
