"""Decide the next release tag from the existing tags."""

import re

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from .bump import BumpKind, InvalidBump, ResolutionError, bump
from .logging import NOTICE, LoggingMixin
from .versions import (
    CHANNEL_PATTERN,
    ChannelRank,
    ParseFailure,
    StructuredVersion,
    format_version,
    parse,
    sort_key,
)


class NoBaseVersion(ResolutionError):
    """There is no existing version to build the next one from."""


@dataclass(frozen=True)
class Tag:
    """A tag in the repository and the commit it points at."""

    name: str
    commit: Optional[str] = None

    def version(
        self, prefix: Union[str, re.Pattern] = "v"
    ) -> Union[StructuredVersion, ParseFailure]:
        """Parse this tag's name."""
        return parse(self.name, prefix)


def _to_bump_kind(value: Union[str, BumpKind]) -> BumpKind:
    return value if isinstance(value, BumpKind) else BumpKind.parse(value)


@dataclass(frozen=True)
class ChannelConfig:
    """
    Settings for one resolution.

    `active_channel` is None on production branches. `prefix` is the literal
    prefix added to new tags; `prefix_pattern`, when set, is used instead of
    `prefix` to recognize existing tags. `initial_version` is only used when
    there are no tags at all.
    """

    # pylint: disable=too-many-instance-attributes

    prefix: str = "v"
    active_channel: Optional[str] = None
    default_bump: BumpKind = BumpKind.PATCH
    initial_prerelease_bump: BumpKind = BumpKind.PREPATCH
    explicit_override: Optional[str] = None
    channel_rank: ChannelRank = field(default_factory=ChannelRank)
    initial_version: Optional[str] = None
    escalate_open_line: bool = False
    prefix_pattern: Optional[re.Pattern] = None

    def __post_init__(self):
        # Frozen, so normalize through object.__setattr__
        object.__setattr__(self, "default_bump", _to_bump_kind(self.default_bump))
        object.__setattr__(
            self,
            "initial_prerelease_bump",
            _to_bump_kind(self.initial_prerelease_bump),
        )

        if self.active_channel is not None and not CHANNEL_PATTERN.match(
            self.active_channel
        ):
            raise ValueError(f"Invalid channel `{self.active_channel}`")

        if self.initial_version:
            initial = self.parse_version(self.initial_version)
            if not initial:
                raise ValueError(
                    f"Initial version `{self.initial_version}` is not a valid version"
                )

            # Production starts on a release, a channel starts on that channel
            if initial.channel != self.active_channel:
                raise ValueError(
                    f"Initial version `{self.initial_version}` is not on channel "
                    f"`{self.active_channel or '<production>'}`"
                )

    @property
    def is_production(self) -> bool:
        """True when no prerelease channel is active."""
        return self.active_channel is None

    def parse_tag(self, tag_name: str) -> Union[StructuredVersion, ParseFailure]:
        """Parse an existing tag name."""
        return parse(tag_name, self.prefix_pattern or self.prefix)

    def parse_version(self, value: str) -> Union[StructuredVersion, ParseFailure]:
        """Parse a version given with or without the tag prefix."""
        result = parse(value, self.prefix)
        if not result and self.prefix_pattern:
            result = parse(value, self.prefix_pattern)
        if not result:
            result = parse(value, "")
        return result

    def format(self, version: StructuredVersion) -> str:
        """Return the tag name for a version."""
        return format_version(version, self.prefix)


@dataclass(frozen=True)
class Resolution:
    """The next tag and how it was chosen."""

    tag: str
    version: Optional[StructuredVersion]
    base: Optional[StructuredVersion] = None
    bump_kind: Optional[BumpKind] = None
    reason: str = ""


class TagResolver(LoggingMixin):
    """Compute the next tag for one channel configuration."""

    def __init__(self, config: ChannelConfig):
        self.config = config

    def _key(self, version: StructuredVersion):
        return sort_key(version, self.config.channel_rank)

    def _latest(
        self, versions: Iterable[StructuredVersion]
    ) -> Optional[StructuredVersion]:
        return max(versions, key=self._key, default=None)

    def parse_tags(
        self, tags: Iterable[Union[Tag, str]]
    ) -> list[StructuredVersion]:
        """Return the versions of all tags that match the prefix and pattern."""
        versions = []
        for tag in tags:
            name = tag if isinstance(tag, str) else tag.name
            version = self.config.parse_tag(name)
            if not version:
                self.logger.debug("Ignoring tag `%s`: %s", name, version.reason)
                continue
            versions.append(version)

        return versions

    def resolve(
        self,
        tags: Iterable[Union[Tag, str]],
        bump_kind: Optional[Union[BumpKind, str]] = None,
    ) -> Resolution:
        """
        Return the next tag.

        `bump_kind` defaults to the configured default bump. Raises
        NoBaseVersion when there is nothing to build on and InvalidBump when
        the bump kind cannot apply to the chosen base.
        """
        config = self.config
        kind = config.default_bump if bump_kind is None else _to_bump_kind(bump_kind)

        if config.explicit_override:
            resolution = self._override(config.explicit_override)
        else:
            versions = self.parse_tags(tags)
            if config.is_production:
                resolution = self._production(versions, kind)
            else:
                resolution = self._prerelease(versions, kind)

        self.logger.log(
            NOTICE, "Next tag: %s (%s)", resolution.tag, resolution.reason
        )
        return resolution

    def _override(self, override: str) -> Resolution:
        """
        Return the override verbatim, adding the prefix if it is missing.

        Only `prefix` and `prefix_pattern` count as present; any other prefix is
        kept, so `v1.0.0` with the prefix `release-` becomes `release-v1.0.0`.
        """
        config = self.config
        match = config.prefix_pattern.match(override) if config.prefix_pattern else None
        if override.startswith(config.prefix) or (match and match.end()):
            tag = override
        else:
            tag = config.prefix + override

        version = config.parse_version(override)
        if not version:
            self.logger.debug("Override `%s` is not a channel version", override)
            version = None

        return Resolution(tag, version, reason="explicit override")

    def _initial(self) -> Resolution:
        config = self.config
        if not config.initial_version:
            raise NoBaseVersion(
                "No existing tags; supply an explicit tag or an initial version"
            )

        version = config.parse_version(config.initial_version)
        return Resolution(config.format(version), version, reason="initial version")

    def _production(
        self, versions: list[StructuredVersion], kind: BumpKind
    ) -> Resolution:
        """Promote the furthest-advanced version to a plain release."""
        latest_overall = self._latest(versions)
        self.logger.debug("Latest version: %s", latest_overall)

        if latest_overall is None:
            return self._initial()

        if latest_overall.is_prerelease:
            version = latest_overall.stripped()
            return Resolution(
                self.config.format(version),
                version,
                latest_overall,
                None,
                f"promoted {latest_overall}",
            )

        # Nothing to promote
        if kind.plain in (BumpKind.MAJOR, BumpKind.MINOR, BumpKind.PATCH):
            version = bump(latest_overall, kind.plain)
            reason = f"{kind.plain} bump of {latest_overall}"
        else:
            version = latest_overall
            reason = f"{latest_overall} is already released"

        return Resolution(
            self.config.format(version), version, latest_overall, kind.plain, reason
        )

    def _prerelease(
        self, versions: list[StructuredVersion], kind: BumpKind
    ) -> Resolution:
        """Continue the open line of the active channel or start a new one."""
        config = self.config
        channel = config.active_channel

        latest_stable = self._latest(v for v in versions if not v.is_prerelease)
        latest_overall = self._latest(versions)
        open_line = self._latest(
            version
            for version in versions
            if version.channel == channel
            and (latest_stable is None or version.normal > latest_stable.normal)
        )

        self.logger.debug(
            "Latest stable: %s, latest overall: %s, open %s line: %s",
            latest_stable,
            latest_overall,
            channel,
            open_line,
        )

        if latest_overall is None:
            return self._initial()

        if open_line is not None and open_line.normal >= latest_overall.normal:
            if config.escalate_open_line and kind not in (
                BumpKind.PRERELEASE,
                BumpKind.NONE,
            ):
                step = kind.pre
                version = bump(open_line, step, channel)
            else:
                step = BumpKind.PRERELEASE
                version = bump(open_line, step)

            return Resolution(
                config.format(version),
                version,
                open_line,
                step,
                f"continued open {channel} line",
            )

        if latest_stable is None or latest_overall.normal > latest_stable.normal:
            base = latest_overall
            step = kind
            reason = f"new {channel} line after {base}"
        else:
            base = latest_stable
            step = config.initial_prerelease_bump
            reason = f"new {channel} line on top of {base}"

        if step in (BumpKind.PRERELEASE, BumpKind.NONE):
            if not base.is_prerelease:
                raise InvalidBump(
                    f"Cannot start a {channel} line from release {base} with `{step}`"
                )
            version = base.with_channel(channel)
        elif step.is_pre:
            version = bump(base, step, channel)
        else:
            version = bump(base, step).with_channel(channel)

        return Resolution(config.format(version), version, base, step, reason)


def resolve_next_tag(
    tags: Iterable[Union[Tag, str]],
    config: ChannelConfig,
    bump_kind: Optional[Union[BumpKind, str]] = None,
) -> str:
    """Return the next tag name."""
    return TagResolver(config).resolve(tags, bump_kind).tag
