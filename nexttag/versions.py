"""Parse, format, and order channel-aware semantic versions."""

import enum
import re

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Union

import semver


VERSION_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<channel>[0-9A-Za-z]+)\.(?P<sequence>0|[1-9]\d*))?$"
)

CHANNEL_PATTERN = re.compile(r"^[0-9A-Za-z]+$")


class Ordering(enum.IntEnum):
    """Result of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True)
class StructuredVersion:
    """
    A plain release `M.m.p` or a channel prerelease `M.m.p-channel.sequence`.

    `channel` and `sequence` are either both set or both None.
    """

    major: int
    minor: int
    patch: int
    channel: Optional[str] = None
    sequence: Optional[int] = None

    def __post_init__(self):
        for part in (self.major, self.minor, self.patch):
            if not isinstance(part, int) or part < 0:
                raise ValueError(f"Version parts must be non-negative: {part!r}")

        if (self.channel is None) != (self.sequence is None):
            raise ValueError("Channel and sequence must be set together")

        if self.channel is not None:
            if not CHANNEL_PATTERN.match(self.channel):
                raise ValueError(f"Invalid channel token `{self.channel}`")
            if not isinstance(self.sequence, int) or self.sequence < 0:
                raise ValueError(f"Invalid sequence {self.sequence!r}")

    def __str__(self):
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.channel is not None:
            text += f"-{self.channel}.{self.sequence}"
        return text

    @property
    def is_prerelease(self) -> bool:
        """Return True if this version is on a channel."""
        return self.channel is not None

    @property
    def normal(self) -> tuple[int, int, int]:
        """Return the (major, minor, patch) triple."""
        return (self.major, self.minor, self.patch)

    def stripped(self) -> "StructuredVersion":
        """Return the plain release with the same normal version."""
        return replace(self, channel=None, sequence=None)

    def with_channel(self, channel: str, sequence: int = 0) -> "StructuredVersion":
        """Return the same normal version on the given channel."""
        return replace(self, channel=channel, sequence=sequence)

    def to_semver(self) -> semver.Version:
        """Convert to a `semver.Version`."""
        prerelease = None
        if self.channel is not None:
            prerelease = f"{self.channel}.{self.sequence}"
        return semver.Version(self.major, self.minor, self.patch, prerelease)

    @classmethod
    def from_semver(cls, version: semver.Version) -> "StructuredVersion":
        """
        Convert from a `semver.Version`.

        Raises ValueError for prereleases that are not `channel.sequence` and
        for versions carrying build metadata.
        """
        if version.build:
            raise ValueError(f"Build metadata is not supported: {version}")

        if not version.prerelease:
            return cls(version.major, version.minor, version.patch)

        channel, _, sequence = version.prerelease.partition(".")
        if not sequence.isdigit():
            raise ValueError(f"Prerelease `{version.prerelease}` has no sequence")

        return cls(version.major, version.minor, version.patch, channel, int(sequence))


@dataclass(frozen=True)
class ParseFailure:
    """A tag that does not name a version. Never raised."""

    tag: str
    reason: str

    def __bool__(self):
        return False


class ChannelRank:
    """
    Total order over channel tokens.

    Tokens listed in `order` sort by their position. Every other token sorts
    before all ranked tokens, in ASCII order.
    """

    def __init__(self, order: Sequence[str] = ()):
        self.order = tuple(order)

        for channel in self.order:
            if not CHANNEL_PATTERN.match(channel):
                raise ValueError(f"Invalid channel token `{channel}`")

        if len(set(self.order)) != len(self.order):
            raise ValueError(f"Duplicate channels in rank {self.order}")

        self._ranks = {channel: index for index, channel in enumerate(self.order)}

    def __repr__(self):
        return f"ChannelRank({self.order!r})"

    def __eq__(self, other):
        if not isinstance(other, ChannelRank):
            return NotImplemented
        return self.order == other.order

    def __hash__(self):
        return hash(self.order)

    def key(self, channel: str) -> tuple[int, int, str]:
        """Return a sort key for the channel."""
        if channel in self._ranks:
            return (1, self._ranks[channel], "")
        return (0, 0, channel)

    @classmethod
    def from_string(cls, value: str) -> "ChannelRank":
        """Build a rank from a comma-separated list such as `dev,rc`."""
        return cls([item.strip() for item in value.split(",") if item.strip()])


def _prefix_length(tag_name: str, prefix: Union[str, re.Pattern]) -> Optional[int]:
    """Return the length of the matched prefix, or None."""
    if isinstance(prefix, re.Pattern):
        match = prefix.match(tag_name)
        return match.end() if match else None

    return len(prefix) if tag_name.startswith(prefix) else None


def parse(
    tag_name: str, prefix: Union[str, re.Pattern] = "v"
) -> Union[StructuredVersion, ParseFailure]:
    """Parse a tag name into a version, or return a ParseFailure."""
    length = _prefix_length(tag_name, prefix)
    if length is None:
        return ParseFailure(tag_name, f"missing prefix {prefix!r}")

    match = VERSION_PATTERN.match(tag_name[length:])
    if not match:
        return ParseFailure(tag_name, "not a MAJOR.MINOR.PATCH[-CHANNEL.N] version")

    sequence = match["sequence"]
    return StructuredVersion(
        int(match["major"]),
        int(match["minor"]),
        int(match["patch"]),
        match["channel"],
        int(sequence) if sequence is not None else None,
    )


def format_version(version: StructuredVersion, prefix: str = "v") -> str:
    """Return the tag name for this version."""
    return f"{prefix}{version}"


def sort_key(version: StructuredVersion, rank: Optional[ChannelRank] = None):
    """Return a key function value consistent with `compare`."""
    if version.channel is None:
        # Stable releases sort after every prerelease of the same version
        return (version.normal, 1, (0, 0, ""), 0)

    rank = rank or ChannelRank()
    return (version.normal, 0, rank.key(version.channel), version.sequence)


def compare(
    a: StructuredVersion, b: StructuredVersion, rank: Optional[ChannelRank] = None
) -> Ordering:
    """Compare two versions by precedence."""
    key_a = sort_key(a, rank)
    key_b = sort_key(b, rank)

    if key_a < key_b:
        return Ordering.LESS
    if key_a > key_b:
        return Ordering.GREATER
    return Ordering.EQUAL
