"""Pick a bump kind from commit messages (Conventional Commits subset)."""

import logging
import re

from typing import Iterable

from .bump import BumpKind


HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?:\s*\S"
)

BREAKING_FOOTER_PATTERN = re.compile(r"^BREAKING[ -]CHANGE:\s*\S", flags=re.MULTILINE)

TYPE_BUMPS = {
    "feat": BumpKind.MINOR,
    "fix": BumpKind.PATCH,
    "perf": BumpKind.PATCH,
}

# Strongest first
PRECEDENCE = (BumpKind.MAJOR, BumpKind.MINOR, BumpKind.PATCH, BumpKind.NONE)


def classify_commit(message: str) -> BumpKind:
    """Return the bump kind a single commit message warrants."""
    header = message.strip().partition("\n")[0]
    match = HEADER_PATTERN.match(header)
    if not match:
        return BumpKind.NONE

    if match["breaking"] or BREAKING_FOOTER_PATTERN.search(message):
        return BumpKind.MAJOR

    return TYPE_BUMPS.get(match["type"].lower(), BumpKind.NONE)


def classify_commits(
    messages: Iterable[str], default: BumpKind = BumpKind.NONE
) -> BumpKind:
    """Return the strongest bump among the messages, or `default`."""
    logger = logging.getLogger(__name__)

    strongest = BumpKind.NONE
    for message in messages:
        kind = classify_commit(message)
        logger.debug("%s <- %s", kind, message.strip().partition("\n")[0])
        if PRECEDENCE.index(kind) < PRECEDENCE.index(strongest):
            strongest = kind

    if strongest is BumpKind.NONE:
        logger.debug("No commits warrant a bump, using %s", default)
        return default

    return strongest

