"""brewyaml - Declarative Homebrew Installer.

Reads a YAML manifest of taps, formulae, casks, pip and gem packages and
installs whichever of them brew does not already report as installed.

Each category is reconciled on its own, so a failing package or a failing
query never stops the rest of the run.
"""

from __future__ import annotations

__version__ = "0.1.0"

from . import cli, config, reconcile, store, utils
from .cli import install_packages, main
from .config import BrewConfig, Category, ManifestEntry, classify, load_manifest
from .reconcile import CategoryProfile, CategoryReport, select_pip_profile
from .store import BrewStore, CommandError, PackageStore, run_brew
from .utils import log, setup_logging

__all__ = [
    "BrewConfig",
    "BrewStore",
    "Category",
    "CategoryProfile",
    "CategoryReport",
    "CommandError",
    "ManifestEntry",
    "PackageStore",
    "classify",
    "cli",
    "config",
    "install_packages",
    "load_manifest",
    "log",
    "main",
    "reconcile",
    "run_brew",
    "select_pip_profile",
    "setup_logging",
    "store",
    "utils",
]
