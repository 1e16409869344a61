"""Locate and load bumpgraph.yaml."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from bumpgraph.config.schema import BumpGraphConfig
from bumpgraph.errors import ConfigurationError, WorkspaceNotFoundError

CONFIG_FILENAME = "bumpgraph.yaml"


def find_config(start: Path | None = None) -> Path:
    """Find the configuration file in ``start`` or one of its parents.

    Args:
        start: Directory to start searching from. Defaults to the cwd.

    Returns:
        Path to bumpgraph.yaml.

    Raises:
        WorkspaceNotFoundError: If no configuration file exists.
    """
    start = (start or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    raise WorkspaceNotFoundError(start)


def load_config(path: Path) -> BumpGraphConfig:
    """Load and validate a configuration file.

    Args:
        path: Path to bumpgraph.yaml.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML,
            or does not match the schema.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration: {e}", path=path) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", path=path) from e

    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration must be a mapping", path=path)

    try:
        return BumpGraphConfig.model_validate(raw)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {errors}", path=path) from e
