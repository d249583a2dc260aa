"""Tests for the bump calculator."""

import pytest

from nexttag.bump import BumpKind, InvalidBump, bump
from nexttag.versions import StructuredVersion, parse


def v(text):
    """Shorthand to parse an unprefixed version."""
    return parse(text, "")


@pytest.mark.parametrize(
    "start,kind,expected",
    [
        ("1.2.3", BumpKind.MAJOR, "2.0.0"),
        ("1.2.3", BumpKind.MINOR, "1.3.0"),
        ("1.2.3", BumpKind.PATCH, "1.2.4"),
        ("1.2.3-rc.4", BumpKind.MAJOR, "2.0.0"),
        ("1.2.3-rc.4", BumpKind.MINOR, "1.3.0"),
        ("1.2.3-rc.4", BumpKind.PATCH, "1.2.3"),
        ("1.2.0-rc.4", BumpKind.MINOR, "1.2.0"),
        ("2.0.0-dev.1", BumpKind.MAJOR, "2.0.0"),
        ("2.0.0-dev.1", BumpKind.MINOR, "2.0.0"),
        ("1.2.3", BumpKind.PREMAJOR, "2.0.0-dev.0"),
        ("1.2.3", BumpKind.PREMINOR, "1.3.0-dev.0"),
        ("1.2.3", BumpKind.PREPATCH, "1.2.4-dev.0"),
        ("2.0.0-rc.1", BumpKind.PREMAJOR, "3.0.0-dev.0"),
        ("0.1.0-dev.1", BumpKind.PREMINOR, "0.2.0-dev.0"),
        ("0.1.0-dev.1", BumpKind.PRERELEASE, "0.1.0-dev.2"),
        ("0.1.0-rc.9", BumpKind.PRERELEASE, "0.1.0-rc.10"),
        ("0.1.0-rc.9", BumpKind.NONE, "0.1.0-rc.9"),
        ("7.0.1", BumpKind.NONE, "7.0.1"),
    ],
)
def test_bump(start, kind, expected):
    """Each bump kind produces the expected version."""
    assert bump(v(start), kind, "dev") == v(expected)


def test_prerelease_requires_channel():
    """A bare sequence increment needs an existing prerelease."""
    with pytest.raises(InvalidBump):
        bump(v("1.0.0"), BumpKind.PRERELEASE)


@pytest.mark.parametrize(
    "kind", [BumpKind.PREMAJOR, BumpKind.PREMINOR, BumpKind.PREPATCH]
)
def test_pre_kinds_require_channel(kind):
    """New prerelease lines need a channel to start on."""
    with pytest.raises(InvalidBump):
        bump(v("1.0.0"), kind)


def test_repeated_prerelease():
    """Two prerelease bumps advance the sequence by two."""
    start = StructuredVersion(3, 1, 4, "rc", 5)
    result = bump(bump(start, BumpKind.PRERELEASE), BumpKind.PRERELEASE)

    assert result.sequence == start.sequence + 2
    assert result.normal == start.normal
    assert result.channel == start.channel


def test_none_is_identity():
    """The `none` kind never changes the version."""
    for text in ("0.0.0", "1.2.3", "4.5.6-dev.7"):
        assert bump(v(text), BumpKind.NONE) == v(text)
        assert bump(v(text), BumpKind.NONE, "rc") == v(text)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("major", BumpKind.MAJOR),
        ("PreMinor", BumpKind.PREMINOR),
        (" prerelease ", BumpKind.PRERELEASE),
        ("none", BumpKind.NONE),
    ],
)
def test_parse_kind(text, expected):
    """Bump kinds parse case-insensitively."""
    assert BumpKind.parse(text) is expected


def test_parse_invalid_kind():
    """Unknown bump kinds are rejected."""
    with pytest.raises(ValueError):
        BumpKind.parse("exact")


def test_kind_counterparts():
    """Plain and `pre*` kinds map onto each other."""
    assert BumpKind.PREMINOR.plain is BumpKind.MINOR
    assert BumpKind.MAJOR.pre is BumpKind.PREMAJOR
    assert BumpKind.PRERELEASE.plain is BumpKind.PRERELEASE
    assert BumpKind.NONE.pre is BumpKind.NONE
    assert BumpKind.PREPATCH.is_pre
    assert not BumpKind.PATCH.is_pre
