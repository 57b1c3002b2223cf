"""Configuration for pytest fixtures used in brewyaml tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
import yaml

from brewyaml.reconcile import CategoryProfile
from brewyaml.store import CommandError


class FakeStore:
    """In-memory PackageStore that records every call.

    ``installed`` maps the list arguments of a profile to the raw lines brew
    would print. ``failing`` holds names whose install fails, and
    ``failing_lists`` holds list argument tuples whose query fails.
    """

    def __init__(
        self,
        installed: dict[tuple[str, ...], list[str]] | None = None,
        failing: set[str] | None = None,
        failing_lists: set[tuple[str, ...]] | None = None,
        pip_version: str = "brew pip v0.5.0\n",
    ) -> None:
        self.installed = installed or {}
        self.failing = failing or set()
        self.failing_lists = failing_lists or set()
        self.pip_version = pip_version
        self.fail_update = False
        self.fail_version = False
        self.calls: list[tuple[str, ...]] = []
        self.installs: list[tuple[str, ...]] = []

    def list_installed(self, profile: CategoryProfile) -> list[str]:
        self.calls.append(profile.list_args)
        if profile.list_args in self.failing_lists:
            raise CommandError(["brew", *profile.list_args], 1, "list failed")
        return list(self.installed.get(profile.list_args, []))

    def install(self, profile: CategoryProfile, name: str) -> str:
        args = (*profile.install_args, name)
        self.calls.append(args)
        self.installs.append(args)
        if name in self.failing:
            raise CommandError(["brew", *args], 1, f"Error: No available formula with the name \"{name}\"")
        return f"installed {name}"

    def update(self) -> str:
        self.calls.append(("update",))
        if self.fail_update:
            raise CommandError(["brew", "update"], 1, "update failed")
        return "Already up-to-date."

    def version(self, subcommand: str) -> str:
        self.calls.append((subcommand, "--version"))
        if self.fail_version:
            raise CommandError(["brew", subcommand, "--version"], 1)
        return self.pip_version


@pytest.fixture
def fake_store() -> Callable[..., FakeStore]:
    """Return a factory for FakeStore instances."""
    return FakeStore


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[[list], Path]:
    """Write a list of records to brew.yaml in a temporary directory."""

    def _write(records: list) -> Path:
        path = tmp_path / "brew.yaml"
        path.write_text(yaml.safe_dump(records))
        return path

    return _write


FAKE_BREW = """#!/bin/sh
# Lists nothing; `install bad` fails with output that is not valid UTF-8.
if [ "$1" = install ] && [ "$2" = bad ]; then
    printf '\\377 oops\\n'
    exit 1
fi
exit 0
"""


@pytest.fixture
def fake_brew(tmp_path: Path) -> Path:
    """Write an executable shell script standing in for brew."""
    script = tmp_path / "brew"
    script.write_text(FAKE_BREW)
    script.chmod(0o755)
    return script
