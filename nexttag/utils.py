"""Utility functions for talking to git."""

import argparse
import logging
import operator
import re
import subprocess
from pathlib import Path
from typing import Optional

from .resolver import Tag


def tag_exists(repo_dir: Path, tag: str) -> bool:
    """Return True if the tag exists, False otherwise."""
    tag_ref_proc = subprocess.run(
        ["git", "rev-parse", "--verify", f"refs/tags/{tag}"],
        cwd=repo_dir,
        capture_output=True,
        check=False,
    )

    return tag_ref_proc.returncode == 0


def dereference_tags(repo_dir: Path) -> dict[str, str]:
    """Return a dictionary mapping all tags to commit hashes."""
    show_ref_proc = subprocess.run(
        ["git", "show-ref", "--tags", "--dereference"],
        cwd=repo_dir,
        capture_output=True,
        check=False,
    )

    # show-ref exits 1 when there are no tags at all
    if show_ref_proc.returncode == 1 and not show_ref_proc.stdout.strip():
        return {}

    show_ref_proc.check_returncode()
    show_ref_output = show_ref_proc.stdout.decode("utf-8").strip()

    pattern = re.compile(
        r"^(?P<commit>\w+)\s+refs/tags/(?P<tag>.*?)(?P<annotated>\^\{\})?$",
        flags=re.MULTILINE,
    )

    tag_to_commit_map: dict[str, str] = {}
    dereferenced_tags: dict[str, str] = {}

    for match in pattern.finditer(show_ref_output):
        operator.setitem(
            dereferenced_tags if match["annotated"] else tag_to_commit_map,
            match["tag"],
            match["commit"],
        )

    # Annotated tags point at tag objects; use the commits instead
    tag_to_commit_map.update(dereferenced_tags)

    return tag_to_commit_map


def list_tags(repo_dir: Path) -> list[Tag]:
    """Return every tag in the repository with its commit."""
    tags = [Tag(name, commit) for name, commit in dereference_tags(repo_dir).items()]
    logging.getLogger(__name__).debug("Found %d tags", len(tags))
    return tags


def list_commits_since(repo_dir: Path, ref: Optional[str] = None) -> list[str]:
    """
    Return the full messages of the commits in `ref..HEAD`.

    With no `ref`, return every commit reachable from HEAD.
    """
    revision = f"{ref}..HEAD" if ref else "HEAD"

    log_output = subprocess.check_output(
        ["git", "log", "--format=%B%x00", revision], cwd=repo_dir
    ).decode("utf-8")

    messages = [message.strip() for message in log_output.split("\0")]
    return [message for message in messages if message]


def create_tag(
    repo_dir: Path,
    name: str,
    annotated: bool,
    target_ref: str,
    message: Optional[str] = None,
):
    """Create a lightweight or annotated tag pointing at `target_ref`."""
    command = ["git", "tag"]
    if annotated:
        command.extend(["--annotate", "--message", message or name])
    command.extend([name, target_ref])

    logging.getLogger(__name__).info("Creating tag %s at %s", name, target_ref)
    subprocess.check_call(command, cwd=repo_dir)


def str_to_bool(value: str) -> bool:
    """Convert a string to a boolean (case-insensitive)."""
    truthy_values = {"true", "t", "yes", "y", "1"}
    falsey_values = {"false", "f", "no", "n", "0"}

    # Normalize input to lowercase
    value = value.lower()

    if value in truthy_values:
        return True

    if value in falsey_values:
        return False

    raise argparse.ArgumentTypeError(f"Invalid boolean value: '{value}'")
