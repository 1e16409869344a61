"""Package manifest reading and writing.

Manifests are JSON objects (``package.json`` style)::

    {
        "name": "@scope/core",
        "version": "1.2.0",
        "scripts": {"test": "npm test"},
        "dependencies": {"@scope/util": "^1.0.3", "left-pad": "1.3.0"}
    }

The raw document is kept so a rewrite only touches ``version`` and the
dependency entries, and every other key keeps its value and position.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bumpgraph.errors import ManifestError

DEFAULT_MANIFEST_NAME = "package.json"

# Operator prefix, version token, anything after it: "^1.2.3", ">=1.0.0 <2".
CONSTRAINT_PATTERN = re.compile(
    r"^(?P<prefix>[\s^~=<>v]*)(?P<version>\d+\.\d+\.\d+(?:-[0-9A-Za-z.]+)?)"
)
PINNABLE_OPERATORS = ("", "^", "~", "=", "v")


@dataclass
class Manifest:
    """A package manifest.

    Attributes:
        name: Package name.
        version: Declared version.
        dependencies: Dependency name to declared version constraint.
        test_command: Shell command running the package's tests.
        location: Package directory.
        filename: Manifest file name inside ``location``.
        data: The raw manifest document.
    """

    name: str
    version: str
    location: Path
    dependencies: dict[str, str] = field(default_factory=dict)
    test_command: str | None = None
    filename: str = DEFAULT_MANIFEST_NAME
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> Path:
        """Path of the manifest file."""
        return self.location / self.filename

    def to_dict(self) -> dict[str, Any]:
        """Render the manifest document with the current version and deps."""
        document = dict(self.data)
        document["name"] = self.name
        document["version"] = self.version
        if self.dependencies or "dependencies" in document:
            document["dependencies"] = dict(self.dependencies)
        return document


def declared_version(constraint: str) -> str | None:
    """Extract the version token from a dependency constraint.

    Examples:
        "^1.2.3" -> "1.2.3"
        "1.0.0-beta" -> "1.0.0-beta"
        "workspace:*" -> None
    """
    match = CONSTRAINT_PATTERN.match(constraint)
    return match.group("version") if match else None


def pin_constraint(constraint: str, version: str) -> str:
    """Point a constraint at another version, keeping a single operator.

    Ranges with more than one comparator, and anything without a version,
    are replaced by the bare version.

    Examples:
        pin_constraint("^1.0.5", "1.1.0") -> "^1.1.0"
        pin_constraint("1.0.5", "1.1.0") -> "1.1.0"
        pin_constraint(">=1.0.0 <2.0.0", "2.0.0") -> "2.0.0"
    """
    match = CONSTRAINT_PATTERN.match(constraint)
    if not match or constraint[match.end():].strip():
        return version
    prefix = match.group("prefix").strip()
    if prefix not in PINNABLE_OPERATORS:
        return version
    return f"{prefix}{version}"


def parse_manifest(
    data: dict[str, Any],
    location: Path,
    filename: str = DEFAULT_MANIFEST_NAME,
) -> Manifest:
    """Build a :class:`Manifest` from a decoded manifest document.

    Raises:
        ManifestError: If required fields are missing or mistyped.
    """
    path = location / filename
    name = data.get("name")
    version = data.get("version")
    if not isinstance(name, str) or not name:
        raise ManifestError("Manifest has no package name", path=path)
    if not isinstance(version, str) or not version:
        raise ManifestError(f"Manifest of {name} has no version", path=path)

    dependencies = data.get("dependencies") or {}
    if not isinstance(dependencies, dict):
        raise ManifestError(f"Dependencies of {name} must be an object", path=path)

    scripts = data.get("scripts") or {}
    test_command = scripts.get("test") if isinstance(scripts, dict) else None

    return Manifest(
        name=name,
        version=version,
        location=location,
        dependencies={str(k): str(v) for k, v in dependencies.items()},
        test_command=test_command,
        filename=filename,
        data=data,
    )


def load_manifest(location: Path, filename: str = DEFAULT_MANIFEST_NAME) -> Manifest:
    """Read the manifest of the package in ``location``.

    Raises:
        ManifestError: If the file is missing, not valid JSON, or invalid.
    """
    path = location / filename
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Cannot read manifest: {e.strerror or e}", path=path) from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON: {e}", path=path) from e

    if not isinstance(data, dict):
        raise ManifestError("Manifest must be a JSON object", path=path)
    return parse_manifest(data, location, filename)


def write_manifest(manifest: Manifest) -> None:
    """Write a manifest back to disk.

    Keys keep their original order and the file is indented with four
    spaces, so rewrites produce small diffs.
    """
    text = json.dumps(manifest.to_dict(), indent=4, ensure_ascii=False) + "\n"
    try:
        manifest.path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot write manifest: {e.strerror or e}", path=manifest.path) from e
