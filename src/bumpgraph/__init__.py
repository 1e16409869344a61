"""bumpgraph - coordinated semantic versioning for monorepos.

Given packages whose manifests depend on one another, bumpgraph:
- Discovers the transitive dependency closure of each package
- Computes next versions from commit history
- Gates versioning on a clean working tree and passing tests
- Propagates bumps to every dependent, cycles included
- Stages changelog entries, manifest rewrites and deferred publish steps
"""

from bumpgraph.commands import VersionResult, resolve_and_version
from bumpgraph.config import BumpGraphConfig, load_config
from bumpgraph.errors import (
    BumpGraphError,
    ConfigurationError,
    DirtyWorkingTreeError,
    EligibilityError,
    GitError,
    MalformedVersionError,
    ManifestError,
    TestFailureError,
    UnresolvedDependencyError,
    WorkspaceNotFoundError,
)
from bumpgraph.workspace import DependencyGraph, DependencyNode, Manifest, Workspace

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Workspace",
    "Manifest",
    "DependencyGraph",
    "DependencyNode",
    "BumpGraphConfig",
    "load_config",
    "resolve_and_version",
    "VersionResult",
    # Errors
    "BumpGraphError",
    "ConfigurationError",
    "WorkspaceNotFoundError",
    "GitError",
    "ManifestError",
    "MalformedVersionError",
    "UnresolvedDependencyError",
    "EligibilityError",
    "DirtyWorkingTreeError",
    "TestFailureError",
]
