"""Get the next tag for the current branch."""

import argparse
import os
import re

from logging import getLogger
from pathlib import Path
from typing import Iterable, Optional

from .bump import BumpKind, ResolutionError
from .commits import classify_commits
from .logging import setup_logging, NOTICE
from .resolver import ChannelConfig, Resolution, Tag, TagResolver
from .utils import create_tag, list_commits_since, list_tags, str_to_bool, tag_exists
from .versions import ChannelRank, sort_key


def latest_tag(tags: Iterable[Tag], config: ChannelConfig) -> Optional[Tag]:
    """Return the tag with the highest version, or None."""
    versioned = [(tag, config.parse_tag(tag.name)) for tag in tags]
    versioned = [(tag, version) for tag, version in versioned if version]

    if not versioned:
        return None

    return max(versioned, key=lambda item: sort_key(item[1], config.channel_rank))[0]


def get_next_tag(
    repo_dir: Path, config: ChannelConfig, bump_kind: Optional[BumpKind] = None
) -> tuple[Resolution, Optional[Tag]]:
    """
    Resolve the next tag for the repository.

    Without an explicit `bump_kind`, the commits since the latest tag decide
    it. Returns the resolution and the previous tag.
    """
    logger = getLogger(__name__)

    tags = list_tags(repo_dir)
    previous = latest_tag(tags, config)
    logger.info("Previous tag: %s", previous.name if previous else "<none>")

    if bump_kind is None and not config.explicit_override:
        messages = list_commits_since(
            repo_dir, previous.commit if previous else None
        )
        logger.info("%d commits since the previous tag", len(messages))
        bump_kind = classify_commits(messages, config.default_bump)

    try:
        resolution = TagResolver(config).resolve(tags, bump_kind)
    except ResolutionError:
        logger.exception("Could not resolve the next tag")
        raise

    if tag_exists(repo_dir, resolution.tag):
        logger.error("Tag %s already exists!", resolution.tag)
        raise RuntimeError(f"Tag {resolution.tag} already exists")

    return resolution, previous


def write_outputs(resolution: Resolution, previous: Optional[Tag]):
    """Append the results to the GitHub Actions output file, if there is one."""
    outputs = {
        "new_tag": resolution.tag,
        "new_version": str(resolution.version or resolution.tag),
        "previous_tag": previous.name if previous else "",
        "bump": str(resolution.bump_kind or ""),
    }

    if "GITHUB_OUTPUT" not in os.environ:
        getLogger(__name__).debug("No GITHUB_OUTPUT, not writing %s", outputs)
        return

    with Path(os.environ["GITHUB_OUTPUT"]).open(mode="a", encoding="utf-8") as outfile:
        for key, value in outputs.items():
            outfile.write(f"{key}={value}\n")


def build_parser() -> argparse.ArgumentParser:
    """Return the command line parser."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("repo_dir", type=Path)
    parser.add_argument(
        "--channel",
        default="",
        help="Prerelease channel (e.g. dev, rc); empty for production",
    )
    parser.add_argument("--bump", type=BumpKind.parse, default=None)
    parser.add_argument("--default-bump", type=BumpKind.parse, default=BumpKind.PATCH)
    parser.add_argument(
        "--initial-prerelease-bump", type=BumpKind.parse, default=BumpKind.PREPATCH
    )
    parser.add_argument("--custom-tag", default="")
    parser.add_argument("--prefix", default="v")
    parser.add_argument(
        "--prefix-pattern",
        type=re.compile,
        default=None,
        help="Regular expression matching the prefix of existing tags",
    )
    parser.add_argument(
        "--channel-rank", type=ChannelRank.from_string, default=ChannelRank()
    )
    parser.add_argument("--initial-version", default="")
    parser.add_argument("--escalate", type=str_to_bool, default=False)
    parser.add_argument("--create-tag", type=str_to_bool, default=False)
    parser.add_argument("--annotated", type=str_to_bool, default=False)
    parser.add_argument("--target", default="HEAD")

    return parser


def entrypoint(argv=None):
    """Main entrypoint for this module."""
    args = build_parser().parse_args(argv)
    setup_logging()

    config = ChannelConfig(
        prefix=args.prefix,
        prefix_pattern=args.prefix_pattern,
        active_channel=args.channel or None,
        default_bump=args.default_bump,
        initial_prerelease_bump=args.initial_prerelease_bump,
        explicit_override=args.custom_tag or None,
        channel_rank=args.channel_rank,
        initial_version=args.initial_version or None,
        escalate_open_line=args.escalate,
    )

    resolution, previous = get_next_tag(args.repo_dir, config, args.bump)

    if args.create_tag:
        create_tag(args.repo_dir, resolution.tag, args.annotated, args.target)
        getLogger(__name__).log(NOTICE, "Created tag %s", resolution.tag)

    write_outputs(resolution, previous)
