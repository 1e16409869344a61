"""Workspace configuration."""

from bumpgraph.config.loader import CONFIG_FILENAME, find_config, load_config
from bumpgraph.config.schema import (
    BumpGraphConfig,
    ChangelogConfig,
    CommitFormat,
    EligibilityConfig,
    ForcedBump,
    MarkerConfig,
    PublishConfig,
    VersioningConfig,
    VersionMarkerConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "BumpGraphConfig",
    "ChangelogConfig",
    "CommitFormat",
    "EligibilityConfig",
    "ForcedBump",
    "MarkerConfig",
    "PublishConfig",
    "VersionMarkerConfig",
    "VersioningConfig",
    "find_config",
    "load_config",
]
