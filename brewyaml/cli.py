"""Command-line interface for brewyaml."""

from __future__ import annotations

import argparse
import os
import sys

from rich.table import Table

from . import __version__
from .config import DEFAULT_BREW, DEFAULT_MANIFEST, BrewConfig, Category
from .reconcile import (
    CASK_PROFILE,
    FORMULA_PROFILE,
    GEM_PROFILE,
    TAP_PROFILE,
    CategoryReport,
    RunSummary,
    reconcile,
    select_pip_profile,
)
from .store import BrewStore, CommandError, PackageStore
from .utils import BrewYamlError, console, log, setup_logging


def _update(store: PackageStore, summary: RunSummary) -> None:
    log("brew: updating", "info")
    try:
        store.update()
    except CommandError as e:
        log(f"brew: state=error {e.output or e.message}", "error")
        summary.update_errors.append(e.message)


def _reconcile_pip(config: BrewConfig, store: PackageStore) -> CategoryReport:
    """Probe brew-pip's version and reconcile pip packages with the matching profile."""
    entries = config.buckets.pip
    if not entries:
        return CategoryReport(Category.PIP)
    try:
        version = store.version("pip")
    except CommandError as e:
        log(f"pip: state=error {e.message}", "error")
        return CategoryReport(Category.PIP, query_error=e.message)
    profile = select_pip_profile(version)
    log(f"pip: bridge version {version.strip()!r}, list={list(profile.list_args)}", "debug")
    return reconcile(entries, profile, store)


def install_packages(config: BrewConfig, store: PackageStore) -> RunSummary:
    """Reconcile every category against ``store``.

    Categories run in a fixed order: taps, casks, formulae, pip, gem. The
    package database is updated before and after taps unless disabled.
    """
    buckets = config.buckets
    summary = RunSummary(rejected=sum(1 for r in buckets.rejected if r.is_error))

    if config.update:
        _update(store, summary)
    summary.reports.append(reconcile(buckets.taps, TAP_PROFILE, store))
    if config.update:
        _update(store, summary)

    summary.reports.append(reconcile(buckets.casks, CASK_PROFILE, store))
    summary.reports.append(reconcile(buckets.formulae, FORMULA_PROFILE, store))
    summary.reports.append(_reconcile_pip(config, store))
    summary.reports.append(reconcile(buckets.gem, GEM_PROFILE, store))
    return summary


def _print_summary(summary: RunSummary) -> None:
    """Print a per-category table of what happened."""
    table = Table(title="brewyaml summary")
    table.add_column("Category")
    table.add_column("Present", justify="right")
    table.add_column("Installed", justify="right")
    table.add_column("Errors", justify="right")

    for report in summary.reports:
        errors = str(len(report.errors))
        if report.query_error is not None:
            errors = "query failed"
        style = "red" if report.has_errors else None
        table.add_row(
            report.category.value,
            str(len(report.present)),
            str(len(report.installed)),
            errors,
            style=style,
        )
    console.print(table)

    if summary.update_errors:
        log(f"brew update failed {len(summary.update_errors)} time(s)", "warning")
    if summary.rejected:
        log(f"{summary.rejected} manifest entries had ambiguous categories", "warning")
    if summary.has_errors:
        log("Completed with errors", "error")
    else:
        log("Completed without errors", "success")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="brewyaml - Install taps, formulae, casks, pip and gem packages from a YAML manifest",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-config",
        "--config",
        dest="config",
        default=DEFAULT_MANIFEST,
        help="path to the brew.yaml config file",
    )
    parser.add_argument(
        "--brew",
        default=os.environ.get("BREWYAML_BREW", DEFAULT_BREW),
        help="brew executable to run ($BREWYAML_BREW overrides the default)",
    )
    parser.add_argument(
        "--no-update",
        dest="update",
        action="store_false",
        help="Do not run 'brew update' around tap installation",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any entry failed",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"brewyaml {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main function to parse arguments and install the manifest."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = BrewConfig.load_from_file(
            args.config,
            brew_executable=args.brew,
            update=args.update,
            strict=args.strict,
        )
    except BrewYamlError as e:
        log(e.message, "error")
        return 1

    try:
        summary = install_packages(config, BrewStore(config.brew_executable))
    except Exception as e:
        console.print(f"❌ [bold red]Error: {e!s}[/bold red]")
        console.print_exception()
        return 1

    _print_summary(summary)
    if config.strict and summary.has_errors:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
