"Compute the next release tag for a channel."

from .bump import BumpKind, InvalidBump, ResolutionError, bump
from .resolver import (
    ChannelConfig,
    NoBaseVersion,
    Resolution,
    Tag,
    TagResolver,
    resolve_next_tag,
)
from .versions import (
    ChannelRank,
    Ordering,
    ParseFailure,
    StructuredVersion,
    compare,
    format_version,
    parse,
)

__all__ = [
    "BumpKind",
    "ChannelConfig",
    "ChannelRank",
    "InvalidBump",
    "NoBaseVersion",
    "Ordering",
    "ParseFailure",
    "Resolution",
    "ResolutionError",
    "StructuredVersion",
    "Tag",
    "TagResolver",
    "bump",
    "compare",
    "format_version",
    "parse",
    "resolve_next_tag",
]
