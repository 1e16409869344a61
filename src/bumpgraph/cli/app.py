"""bumpgraph CLI application."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from bumpgraph.errors import BumpGraphError
from bumpgraph.logging import configure_logging
from bumpgraph.workspace import Workspace


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from bumpgraph import __version__

        print(f"bumpgraph {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="bumpgraph",
    help="Coordinated semantic versioning for monorepos",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _app_callback(
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", "-V", help="Show version and exit", callback=version_callback),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logs"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only show warnings and errors"),
    ] = False,
    json_log: Annotated[
        bool,
        typer.Option("--json-log", help="Write logs as JSON lines"),
    ] = False,
) -> None:
    """Version interdependent monorepo packages together."""
    configure_logging(verbose=verbose, quiet=quiet, json_log=json_log)


console = Console()
error_console = Console(stderr=True)


def get_workspace(path: Path | None = None) -> Workspace:
    """Load workspace from current directory or specified path."""
    try:
        return Workspace.discover(path)
    except BumpGraphError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e


@app.command()
def version(
    packages: Annotated[
        list[str] | None,
        typer.Argument(
            help="Packages to version, with everything they depend on "
            "(default: the package in the current directory)"
        ),
    ] = None,
    simulate: Annotated[
        bool,
        typer.Option("--simulate", "--dry-run", help="Compute versions without writing files"),
    ] = False,
    since: Annotated[
        str | None,
        typer.Option("--since", help="Only consider commits after this git ref"),
    ] = None,
    channel: Annotated[
        str | None,
        typer.Option("--channel", "-c", help="Release channel (release, beta, alpha, ...)"),
    ] = None,
    release: Annotated[
        bool | None,
        typer.Option("--release/--no-release", help="Breaking changes bump the major version"),
    ] = None,
    no_changelog: Annotated[
        bool,
        typer.Option("--no-changelog", help="Skip changelog entries"),
    ] = False,
) -> None:
    """Resolve, validate and stage new versions."""
    from bumpgraph.commands import handle_version_command

    workspace = get_workspace()

    asyncio.run(
        handle_version_command(
            workspace,
            console=console,
            error_console=error_console,
            packages=packages or [],
            simulate=simulate,
            since=since,
            channel=channel,
            release=release,
            no_changelog=no_changelog,
        )
    )


@app.command()
def graph(
    packages: Annotated[
        list[str],
        typer.Argument(help="Root packages"),
    ],
    since: Annotated[
        str | None,
        typer.Option("--since", help="Only consider commits after this git ref"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the dependency closure of packages."""
    from bumpgraph.commands import handle_graph_command

    workspace = get_workspace()

    asyncio.run(
        handle_graph_command(
            workspace,
            console=console,
            error_console=error_console,
            packages=packages,
            since=since,
            as_json=as_json,
        )
    )


@app.command()
def sync(
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show changes without writing manifests"),
    ] = False,
) -> None:
    """Pin managed dependencies to the current workspace versions."""
    from bumpgraph.commands import handle_sync_command

    workspace = get_workspace()
    handle_sync_command(workspace, console=console, error_console=error_console, dry_run=dry_run)


@app.command()
def publish(
    no_commit: Annotated[
        bool,
        typer.Option("--no-commit", help="Skip pending commit scripts"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="List pending scripts without running them"),
    ] = False,
) -> None:
    """Run pending commit and publish scripts."""
    from bumpgraph.commands import handle_publish_command

    workspace = get_workspace()

    asyncio.run(
        handle_publish_command(
            workspace,
            console=console,
            error_console=error_console,
            no_commit=no_commit,
            dry_run=dry_run,
        )
    )


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
