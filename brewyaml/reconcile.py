"""Diffing manifest entries against what brew reports as installed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from .config import Category
from .store import CommandError
from .utils import log

if TYPE_CHECKING:
    from .config import ManifestEntry
    from .store import PackageStore

InstalledFilter = Callable[[list[str]], list[str]]

LEGACY_PIP_VERSION_PREFIX = "brew pip v0.4."

NAME_ERROR = "name-error"
INSTALL_ERROR = "install-error"


def identity(lines: list[str]) -> list[str]:
    """Use brew's listing unchanged."""
    return lines


def strip_prefix(prefix: str) -> InstalledFilter:
    """Keep only identifiers starting with ``prefix`` and remove it.

    brew-pip and brew-gem install packages as formulae named ``pip-<name>``
    and ``gem-<name>``, so the generic formula listing needs this filter.
    """

    def _filter(lines: list[str]) -> list[str]:
        return [line[len(prefix) :] for line in lines if line.startswith(prefix)]

    return _filter


@dataclass(frozen=True)
class CategoryProfile:
    """How to list and install one category of package."""

    category: Category
    list_args: tuple[str, ...]
    install_args: tuple[str, ...]
    installed_filter: InstalledFilter = identity

    @property
    def label(self) -> str:
        return self.category.value


TAP_PROFILE = CategoryProfile(Category.TAP, ("tap",), ("tap", "--quieter"))
CASK_PROFILE = CategoryProfile(Category.CASK, ("list", "--cask"), ("install", "--cask"))
FORMULA_PROFILE = CategoryProfile(Category.FORMULA, ("list",), ("install",))
PIP_PROFILE = CategoryProfile(Category.PIP, ("pip", "list"), ("pip", "install"))
LEGACY_PIP_PROFILE = CategoryProfile(
    Category.PIP,
    ("list",),
    ("pip",),
    strip_prefix("pip-"),
)
GEM_PROFILE = CategoryProfile(
    Category.GEM,
    ("list",),
    ("gem", "install"),
    strip_prefix("gem-"),
)


def select_pip_profile(version_output: str) -> CategoryProfile:
    """Pick the pip profile matching the installed brew-pip release.

    brew-pip 0.4.x has no ``list``/``install`` subcommands; its packages show
    up as ``pip-<name>`` formulae instead.
    """
    if version_output.startswith(LEGACY_PIP_VERSION_PREFIX):
        return LEGACY_PIP_PROFILE
    return PIP_PROFILE


@dataclass
class EntryError:
    """A problem with a single manifest entry."""

    category: Category
    name: str | None
    kind: str  # NAME_ERROR or INSTALL_ERROR
    detail: str = ""


@dataclass
class CategoryReport:
    """Outcome of reconciling one category."""

    category: Category
    present: list[str] = field(default_factory=list)
    installed: list[str] = field(default_factory=list)
    errors: list[EntryError] = field(default_factory=list)
    query_error: str | None = None

    @property
    def has_errors(self) -> bool:
        return self.query_error is not None or bool(self.errors)


def reconcile(
    entries: list[ManifestEntry],
    profile: CategoryProfile,
    store: PackageStore,
) -> CategoryReport:
    """Install every entry that brew does not already report as installed.

    A failed query ends this category only. A failed install is recorded
    and the remaining entries are still attempted.
    """
    label = profile.label
    report = CategoryReport(profile.category)
    if not entries:
        return report

    log(f"{label}: fetching", "info")
    try:
        installed = set(profile.installed_filter(_clean(store.list_installed(profile))))
    except CommandError as e:
        log(f"{label}: state=error {e.message}", "error")
        report.query_error = e.message
        return report

    for entry in entries:
        if entry.name is None:
            log(f"{label}: state={NAME_ERROR} {entry.raw}", "error")
            report.errors.append(EntryError(profile.category, None, NAME_ERROR, str(entry.raw)))
            continue

        if entry.name in installed:
            log(f"{label}: name={entry.name} state=present", "success")
            report.present.append(entry.name)
            continue

        try:
            store.install(profile, entry.name)
        except CommandError as e:
            log(f"{label}: name={entry.name} state={INSTALL_ERROR} {e.output or e.message}", "error")
            report.errors.append(
                EntryError(profile.category, entry.name, INSTALL_ERROR, e.output or e.message),
            )
            continue
        log(f"{label}: name={entry.name} state=installed", "success")
        report.installed.append(entry.name)

    return report


def _clean(lines: list[str]) -> list[str]:
    return [line.strip() for line in lines if line.strip()]


@dataclass
class RunSummary:
    """Reports for every category plus run-level failures."""

    reports: list[CategoryReport] = field(default_factory=list)
    update_errors: list[str] = field(default_factory=list)
    rejected: int = 0

    @property
    def has_errors(self) -> bool:
        return (
            bool(self.update_errors)
            or self.rejected > 0
            or any(report.has_errors for report in self.reports)
        )
