"""Local plugin to parametrize tests from a JSON file."""

import json

from collections import namedtuple
from pathlib import Path

import pytest


Scenario = namedtuple(
    "Scenario",
    (
        "name",
        "tags",
        "channel",
        "bump",
        "default_bump",
        "initial_prerelease_bump",
        "override",
        "rank",
        "prefix",
        "initial_version",
        "escalate",
        "expected",
    ),
)

# Named stash key for storing the Scenario objects between hook calls
scenarios_key = pytest.StashKey[list[Scenario]]()


def pytest_configure(config: pytest.Config) -> None:
    """
    Configure plugin by loading the resolution scenarios.
    """
    resource_path = Path(__file__).resolve().parent.joinpath("resources")
    scenarios_file = resource_path / "scenarios.json"
    with scenarios_file.open(mode="r", encoding="utf-8") as infile:
        groups = json.load(infile)

    scenarios = []
    for group in groups:
        scenarios.append(
            Scenario(
                group["name"],
                group["tags"],
                group["channel"],
                group.get("bump"),
                group.get("default_bump", "patch"),
                group.get("initial_prerelease_bump", "prepatch"),
                group.get("override"),
                group.get("rank", []),
                group.get("prefix", "v"),
                group.get("initial_version"),
                group.get("escalate", False),
                group["expected"],
            )
        )

    config.stash[scenarios_key] = scenarios


def pytest_generate_tests(metafunc: pytest.Metafunc):
    """
    Inject parameters for the 'scenario' fixture.
    """
    if "scenario" in metafunc.fixturenames:
        scenarios = metafunc.config.stash[scenarios_key]
        metafunc.parametrize(
            "scenario", scenarios, ids=[scenario.name for scenario in scenarios]
        )
