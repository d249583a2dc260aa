"""Compute the next version for a given bump kind."""

import enum

from dataclasses import replace
from typing import Optional

from .versions import StructuredVersion


class ResolutionError(Exception):
    """Base class for failures to compute a next version."""


class InvalidBump(ResolutionError):
    """The bump kind cannot be applied to this version."""


class BumpKind(enum.Enum):
    """The category of version increment to apply."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PREMAJOR = "premajor"
    PREMINOR = "preminor"
    PREPATCH = "prepatch"
    PRERELEASE = "prerelease"
    NONE = "none"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value: str) -> "BumpKind":
        """Return the kind named by `value` (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(kind.value for kind in cls)
            raise ValueError(
                f"Invalid bump kind `{value}` (expected one of {choices})"
            ) from None

    @property
    def is_pre(self) -> bool:
        """True for premajor, preminor, and prepatch."""
        return self in (BumpKind.PREMAJOR, BumpKind.PREMINOR, BumpKind.PREPATCH)

    @property
    def plain(self) -> "BumpKind":
        """Return the plain counterpart of a `pre*` kind."""
        return _PLAIN.get(self, self)

    @property
    def pre(self) -> "BumpKind":
        """Return the `pre*` counterpart of a plain kind."""
        return _PRE.get(self, self)


_PLAIN = {
    BumpKind.PREMAJOR: BumpKind.MAJOR,
    BumpKind.PREMINOR: BumpKind.MINOR,
    BumpKind.PREPATCH: BumpKind.PATCH,
}

_PRE = {plain: pre for pre, plain in _PLAIN.items()}


def bump(
    version: StructuredVersion, kind: BumpKind, channel: Optional[str] = None
) -> StructuredVersion:
    """
    Return the version after applying `kind`.

    `channel` is the channel for new prerelease lines and is required for the
    `pre*` kinds. Plain kinds applied to a prerelease follow semantic-version
    increment rules: `1.2.0-rc.3` bumped by `minor` becomes `1.2.0`.
    """
    if kind is BumpKind.NONE:
        return version

    if kind is BumpKind.PRERELEASE:
        if not version.is_prerelease:
            raise InvalidBump(f"Cannot apply `prerelease` to release {version}")
        return replace(version, sequence=version.sequence + 1)

    if kind.is_pre:
        if channel is None:
            raise InvalidBump(f"`{kind}` requires a channel")

        bumped = getattr(version.to_semver(), f"bump_{kind.plain.value}")()
        return StructuredVersion.from_semver(bumped).with_channel(channel, 0)

    return StructuredVersion.from_semver(
        version.to_semver().next_version(part=kind.value)
    )
