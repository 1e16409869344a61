"""Error types raised by bumpgraph.

Every error carries a human readable ``message``. Errors derived from
:class:`EligibilityError` are recoverable at the package level: they are
attached to the package's eligibility report instead of aborting the run.
Everything else is fatal to the resolution run.
"""

from __future__ import annotations

from pathlib import Path


class BumpGraphError(Exception):
    """Base class for all bumpgraph errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(BumpGraphError):
    """The workspace configuration is missing or invalid."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)


class WorkspaceNotFoundError(BumpGraphError):
    """No bumpgraph.yaml was found in the directory or any parent."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No bumpgraph workspace found at or above {path}")


class GitError(BumpGraphError):
    """A git command failed."""

    def __init__(self, message: str, *, command: str | None = None) -> None:
        self.command = command
        if command:
            message = f"{message} (command: {command})"
        super().__init__(message)


class ManifestError(BumpGraphError):
    """A package manifest could not be read or written."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)


class MalformedVersionError(BumpGraphError):
    """A version string is not a ``major.minor.patch[-channel]`` triple."""

    def __init__(self, version: str, *, package: str | None = None) -> None:
        self.version = version
        self.package = package
        where = f" in {package}" if package else ""
        super().__init__(f"Malformed version {version!r}{where}")


class UnresolvedDependencyError(BumpGraphError):
    """A managed dependency could not be located in the workspace."""

    def __init__(self, name: str, *, required_by: str | None = None) -> None:
        self.name = name
        self.required_by = required_by
        suffix = f" required by {required_by}" if required_by else ""
        super().__init__(f"Cannot locate package {name}{suffix}")


class EligibilityError(BumpGraphError):
    """A package is not eligible for versioning."""

    def __init__(self, message: str, *, package: str) -> None:
        self.package = package
        super().__init__(message)


class DirtyWorkingTreeError(EligibilityError):
    """The package has uncommitted changes."""

    def __init__(self, package: str, files: list[str]) -> None:
        self.files = files
        listing = "\n".join(f"  {f}" for f in files)
        super().__init__(
            f"{package} has uncommitted changes and cannot be versioned:\n{listing}",
            package=package,
        )


class TestFailureError(EligibilityError):
    """The package's test command failed or timed out."""

    __test__ = False

    def __init__(self, package: str, *, exit_code: int, output: str = "") -> None:
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"{package} failed testing (exit {exit_code})", package=package)
