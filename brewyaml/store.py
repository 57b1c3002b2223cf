"""Running brew and querying the packages it manages."""

from __future__ import annotations

import os
import subprocess
from typing import TYPE_CHECKING, Protocol

from .config import DEFAULT_BREW
from .utils import BrewYamlError, log

if TYPE_CHECKING:
    from .reconcile import CategoryProfile

NO_AUTO_UPDATE = {"HOMEBREW_NO_AUTO_UPDATE": "1"}


class CommandError(BrewYamlError):
    """A brew invocation failed to start or exited non-zero."""

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        output: str = "",
        message: str | None = None,
    ) -> None:
        """Initialize the CommandError."""
        self.command = command
        self.returncode = returncode
        self.output = output
        if message is None:
            message = f"`{' '.join(command)}` exited with status {returncode}"
        super().__init__(message)


def brew_env() -> dict[str, str]:
    """Return the caller's environment with brew auto-update disabled."""
    env = os.environ.copy()
    env.update(NO_AUTO_UPDATE)
    return env


def run_brew(
    args: list[str],
    *,
    brew: str = DEFAULT_BREW,
    combined: bool = False,
) -> str:
    """Run brew with ``args`` and return its output.

    With ``combined`` stderr is merged into the returned output, so install
    failures carry brew's diagnostics. Otherwise only stdout is captured.
    Bytes that are not valid UTF-8 are replaced rather than raising.
    Raises CommandError on a non-zero exit or if brew cannot be started.
    """
    cmd = [brew, *args]
    log(f"running {' '.join(cmd)}", "debug")
    try:
        result = subprocess.run(  # noqa: S603
            cmd,
            env=brew_env(),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if combined else None,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as e:
        raise CommandError(cmd, None, message=f"could not run {brew}: {e}") from e

    if result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stdout or "")
    return result.stdout or ""


class PackageStore(Protocol):
    """What the reconciler needs from a package manager."""

    def list_installed(self, profile: CategoryProfile) -> list[str]:
        """Return the raw installed identifiers for a category."""
        ...

    def install(self, profile: CategoryProfile, name: str) -> str:
        """Install ``name`` and return the command output."""
        ...

    def update(self) -> str:
        """Refresh the package database."""
        ...

    def version(self, subcommand: str) -> str:
        """Return the version string reported by ``brew <subcommand> --version``."""
        ...


class BrewStore:
    """PackageStore backed by the brew executable."""

    def __init__(self, brew: str = DEFAULT_BREW) -> None:
        self.brew = brew

    def list_installed(self, profile: CategoryProfile) -> list[str]:
        output = run_brew(list(profile.list_args), brew=self.brew)
        return output.splitlines()

    def install(self, profile: CategoryProfile, name: str) -> str:
        return run_brew([*profile.install_args, name], brew=self.brew, combined=True)

    def update(self) -> str:
        return run_brew(["update"], brew=self.brew, combined=True)

    def version(self, subcommand: str) -> str:
        return run_brew([subcommand, "--version"], brew=self.brew)
