"""Semantic version arithmetic.

Versions are ``major.minor.patch`` triples with an optional release
channel label (``1.4.0-beta``). Channels are ranked by a fixed
precedence table and only break ties between identical numeric triples.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from bumpgraph.errors import MalformedVersionError

CHANNEL_DELIMITER = "-"
COMPONENT_DELIMITER = "."

# Higher rank wins when numeric triples are equal. Unknown channels rank
# below every known one and are ordered by name among themselves.
CHANNEL_PRECEDENCE: dict[str, int] = {
    "": 100000,
    "release": 50000,
    "beta": 25000,
    "alpha": 12500,
    "experimental": 6250,
}

DEFAULT_RECOVERED_VERSION = "0.0.0-experimental"


class BumpType(Enum):
    """The kind of increment applied to a version."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


def channel_rank(channel: str) -> int:
    """Get the precedence rank of a release channel."""
    return CHANNEL_PRECEDENCE.get(channel, 0)


@dataclass(frozen=True, slots=True)
class Version:
    """A version triple plus release channel.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        channel: Release channel, empty for stable releases.
    """

    major: int
    minor: int
    patch: int
    channel: str = ""

    @classmethod
    def parse(cls, version: str) -> Version:
        """Parse a version string. See :func:`parse`."""
        return parse(version)

    @property
    def sort_key(self) -> tuple[int, int, int, int, str]:
        """Key implementing the strict total order used by :func:`compare`."""
        return (self.major, self.minor, self.patch, channel_rank(self.channel), self.channel)

    def bump(self, bump_type: BumpType) -> Version:
        """Increment one component, zeroing the less significant ones."""
        if bump_type == BumpType.MAJOR:
            return replace(self, major=self.major + 1, minor=0, patch=0)
        if bump_type == BumpType.MINOR:
            return replace(self, minor=self.minor + 1, patch=0)
        return replace(self, patch=self.patch + 1)

    def with_channel(self, channel: str) -> Version:
        """Return a copy placed in another release channel."""
        return replace(self, channel=channel)

    def __lt__(self, other: Version) -> bool:
        return self.sort_key < other.sort_key

    def __le__(self, other: Version) -> bool:
        return self.sort_key <= other.sort_key

    def __gt__(self, other: Version) -> bool:
        return self.sort_key > other.sort_key

    def __ge__(self, other: Version) -> bool:
        return self.sort_key >= other.sort_key

    def __str__(self) -> str:
        return format_version(self)


def parse(version: str) -> Version:
    """Parse ``major.minor.patch[-channel]`` into a :class:`Version`.

    Args:
        version: Version string, surrounding whitespace is ignored.

    Returns:
        Parsed version.

    Raises:
        MalformedVersionError: If the string does not hold exactly three
            non-negative integer components.
    """
    text = version.strip()
    numbers, _, channel = text.partition(CHANNEL_DELIMITER)
    parts = numbers.split(COMPONENT_DELIMITER)
    if len(parts) != 3 or not all(p.isascii() and p.isdigit() for p in parts):
        raise MalformedVersionError(version)
    major, minor, patch = (int(p) for p in parts)
    return Version(major, minor, patch, channel)


def format_version(version: Version) -> str:
    """Format a :class:`Version` back into its string form."""
    text = f"{version.major}.{version.minor}.{version.patch}"
    if version.channel:
        text += f"{CHANNEL_DELIMITER}{version.channel}"
    return text


def compare(a: Version, b: Version) -> int:
    """Compare two versions.

    Returns:
        ``1`` if ``a`` is newer, ``-1`` if ``b`` is newer, ``0`` only when
        both triples and channels are identical.
    """
    if a.sort_key > b.sort_key:
        return 1
    if a.sort_key < b.sort_key:
        return -1
    return 0


def latest(*versions: Version) -> Version:
    """Return the newest of the given versions."""
    return max(versions, key=lambda v: v.sort_key)


def determine_bump_type(*, breaking: bool, feature: bool, release_mode: bool) -> BumpType:
    """Map change flags to a bump type.

    Breaking changes only bump the major component in release mode; before
    1.0 they bump the minor component.
    """
    if breaking:
        return BumpType.MAJOR if release_mode else BumpType.MINOR
    if feature:
        return BumpType.MINOR
    return BumpType.PATCH


def bump(
    version: Version,
    breaking: bool = False,
    feature: bool = False,
    release_mode: bool = False,
) -> Version:
    """Compute the next version for a set of change flags.

    ``release_mode`` is forced on once the major component is above zero,
    so post-1.0 packages always treat breaking changes as major bumps.

    Example:
        >>> str(bump(parse("1.2.3"), breaking=True, feature=True))
        '2.0.0'
    """
    release_mode = release_mode or version.major > 0
    return version.bump(
        determine_bump_type(breaking=breaking, feature=feature, release_mode=release_mode)
    )
