"""Configuration schema for bumpgraph.yaml."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

from bumpgraph.versioning.classify import (
    DEFAULT_BREAKING_PATTERN,
    DEFAULT_CHANGELOG_PATTERN,
    DEFAULT_FEATURE_PATTERN,
    DEFAULT_VERSION_PREFIX,
    CommitFormat,
)
from bumpgraph.versioning.propagation import ForcedBump
from bumpgraph.versioning.semver import CHANNEL_PRECEDENCE


def _check_pattern(value: str | None) -> str | None:
    if value is None:
        return value
    try:
        re.compile(value)
    except re.error as e:
        raise ValueError(f"invalid regular expression {value!r}: {e}") from e
    return value


class MarkerConfig(BaseModel):
    """Message patterns used by the marker classifier."""

    breaking: str = DEFAULT_BREAKING_PATTERN
    feature: str = DEFAULT_FEATURE_PATTERN
    changelog: str = DEFAULT_CHANGELOG_PATTERN

    @field_validator("breaking", "feature", "changelog")
    @classmethod
    def validate_pattern(cls, value: str) -> str:
        return _check_pattern(value)


class VersionMarkerConfig(BaseModel):
    """Rules recognizing the commit that recorded the previous version."""

    match_name_and_version: bool = True
    version_prefix: str | None = DEFAULT_VERSION_PREFIX

    @field_validator("version_prefix")
    @classmethod
    def validate_pattern(cls, value: str | None) -> str | None:
        return _check_pattern(value)


class VersioningConfig(BaseModel):
    """Version computation settings."""

    commit_format: CommitFormat = CommitFormat.MARKER
    markers: MarkerConfig = Field(default_factory=MarkerConfig)
    version_marker: VersionMarkerConfig = Field(default_factory=VersionMarkerConfig)
    channel: str = ""
    release: bool = False
    forced_bump: ForcedBump = ForcedBump.PATCH
    commit_message: str = "version {name} to {version}"

    @field_validator("channel")
    @classmethod
    def validate_channel(cls, value: str) -> str:
        if value not in CHANNEL_PRECEDENCE:
            known = ", ".join(repr(c) for c in CHANNEL_PRECEDENCE)
            raise ValueError(f"unknown release channel {value!r}, expected one of {known}")
        return value


class ChangelogConfig(BaseModel):
    """Changelog generation settings."""

    enabled: bool = True
    filename: str = "CHANGELOG.md"


class EligibilityConfig(BaseModel):
    """Settings for the clean-tree and test gate."""

    test_command: str | None = None
    test_timeout: float = Field(default=600.0, gt=0)
    allow_missing_tests: bool = False


class PublishConfig(BaseModel):
    """Deferred publish and commit actions."""

    command: str = "npm publish --new-version {version}"
    commit_script: str = "commit.bounty"
    publish_script: str = "publish.bounty"


class BumpGraphConfig(BaseModel):
    """Root configuration model.

    Attributes:
        name: Workspace name.
        packages: Glob patterns (relative to the workspace root) of package
            directories.
        ignore: Package name patterns left out of the workspace index.
        manifest: Manifest file name inside each package directory.
        namespace: Dependency name patterns managed by bumpgraph. When
            empty, every package found in the workspace is managed.
        env: Extra environment variables for test runs.
    """

    name: str
    packages: list[str] = Field(min_length=1)
    ignore: list[str] = Field(default_factory=list)
    manifest: str = "package.json"
    namespace: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    versioning: VersioningConfig = Field(default_factory=VersioningConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    eligibility: EligibilityConfig = Field(default_factory=EligibilityConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
