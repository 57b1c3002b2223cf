"""Manifest loading, classification and synthetic entries for brewyaml."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .utils import BrewYamlError, log

DEFAULT_MANIFEST = "brew.yaml"
DEFAULT_BREW = "brew"

CASK_TAPS = [
    "homebrew/cask",
    "homebrew/cask-drivers",
    "homebrew/cask-fonts",
    "homebrew/cask-versions",
]
PIP_FORMULAE = ["python", "brew-pip"]
GEM_FORMULAE = ["brew-gem"]


class ConfigReadError(BrewYamlError):
    """The manifest file could not be read."""


class ConfigParseError(BrewYamlError):
    """The manifest file is not a well-formed list of records."""


class Category(enum.Enum):
    """Kind of package a manifest record describes."""

    TAP = "tap"
    FORMULA = "formula"
    CASK = "cask"
    PIP = "pip"
    GEM = "gem"

    @property
    def marker_keys(self) -> tuple[str, str]:
        """Keys that tag a record as this category."""
        return self.value, f"homebrew_{self.value}"


# Order in which marker keys are probed
CLASSIFY_ORDER = [
    Category.CASK,
    Category.FORMULA,
    Category.PIP,
    Category.TAP,
    Category.GEM,
]


@dataclass
class ManifestEntry:
    """A manifest record whose category has been decided."""

    category: Category
    name: str | None
    raw: dict[str, Any] = field(default_factory=dict)
    synthetic: bool = False

    @classmethod
    def from_record(cls, category: Category, record: dict[str, Any]) -> ManifestEntry:
        """Build an entry from a raw record; a missing or non-string name becomes None."""
        name = record.get("name")
        if not isinstance(name, str) or not name:
            name = None
        return cls(category=category, name=name, raw=record)


@dataclass
class RejectedRecord:
    """A manifest record that was not placed in any bucket."""

    record: Any
    reason: str
    is_error: bool = False


@dataclass
class Buckets:
    """Manifest entries grouped by category, in manifest order."""

    taps: list[ManifestEntry] = field(default_factory=list)
    formulae: list[ManifestEntry] = field(default_factory=list)
    casks: list[ManifestEntry] = field(default_factory=list)
    pip: list[ManifestEntry] = field(default_factory=list)
    gem: list[ManifestEntry] = field(default_factory=list)
    rejected: list[RejectedRecord] = field(default_factory=list)

    def for_category(self, category: Category) -> list[ManifestEntry]:
        """Return the bucket holding entries of the given category."""
        return {
            Category.TAP: self.taps,
            Category.FORMULA: self.formulae,
            Category.CASK: self.casks,
            Category.PIP: self.pip,
            Category.GEM: self.gem,
        }[category]


def load_manifest(path: str | Path) -> list[dict[str, Any]]:
    """Read a YAML manifest and return its records.

    Raises ConfigReadError when the file cannot be read and ConfigParseError
    when it is not a YAML sequence of mappings. An empty file has no records.
    """
    log(f"reading {path}", "info")
    try:
        with open(path, encoding="utf-8") as file:
            data = file.read()
    except UnicodeDecodeError as e:
        msg = f"Manifest is not valid UTF-8: {path}: {e}"
        raise ConfigParseError(msg) from e
    except OSError as e:
        msg = f"Could not open YAML file {path}: {e}"
        raise ConfigReadError(msg) from e

    log(f"parsing {path}", "info")
    try:
        records = yaml.safe_load(data)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in manifest {path}: {e}"
        raise ConfigParseError(msg) from e

    if records is None:
        return []
    if not isinstance(records, list):
        msg = f"Manifest {path} must be a list of entries, got {type(records).__name__}"
        raise ConfigParseError(msg)
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            msg = f"Manifest {path} entry {i} is not a mapping: {record!r}"
            raise ConfigParseError(msg)
    return records


def _categories_of(record: dict[str, Any]) -> list[Category]:
    return [
        category
        for category in CLASSIFY_ORDER
        if any(key in record for key in category.marker_keys)
    ]


def classify(records: list[dict[str, Any]]) -> Buckets:
    """Sort records into category buckets.

    Records tagged with more than one category are ambiguous and rejected,
    as are records with no category marker at all.
    """
    buckets = Buckets()
    for record in records:
        categories = _categories_of(record)
        if not categories:
            log(f"skipping entry without a category marker: {record}", "warning")
            buckets.rejected.append(RejectedRecord(record, "no category marker"))
            continue
        if len(categories) > 1:
            markers = ", ".join(c.value for c in categories)
            log(f"skipping entry with several category markers ({markers}): {record}", "error")
            buckets.rejected.append(
                RejectedRecord(record, f"ambiguous category markers: {markers}", is_error=True),
            )
            continue
        category = categories[0]
        buckets.for_category(category).append(ManifestEntry.from_record(category, record))
    return buckets


def _append_missing(
    entries: list[ManifestEntry],
    category: Category,
    names: list[str],
) -> list[ManifestEntry]:
    present = {entry.name for entry in entries if entry.name is not None}
    for name in names:
        if name not in present:
            entries.append(
                ManifestEntry(
                    category=category,
                    name=name,
                    raw={category.value: None, "name": name},
                    synthetic=True,
                ),
            )
            present.add(name)
    return entries


def inject_cask_taps(taps: list[ManifestEntry]) -> list[ManifestEntry]:
    """Make sure the default cask taps are in the tap bucket."""
    return _append_missing(taps, Category.TAP, CASK_TAPS)


def inject_formulae(
    formulae: list[ManifestEntry],
    names: list[str],
) -> list[ManifestEntry]:
    """Make sure each of ``names`` is in the formula bucket."""
    return _append_missing(formulae, Category.FORMULA, names)


def inject_synthetic_entries(buckets: Buckets) -> Buckets:
    """Add the taps and formulae that non-empty buckets depend on."""
    if buckets.casks:
        inject_cask_taps(buckets.taps)
    if buckets.pip:
        inject_formulae(buckets.formulae, PIP_FORMULAE)
    if buckets.gem:
        inject_formulae(buckets.formulae, GEM_FORMULAE)
    return buckets


@dataclass
class BrewConfig:
    """Configuration for a brewyaml run."""

    manifest_path: Path = field(default_factory=lambda: Path(DEFAULT_MANIFEST))
    brew_executable: str = field(
        default_factory=lambda: os.environ.get("BREWYAML_BREW", DEFAULT_BREW),
    )
    update: bool = True
    strict: bool = False
    buckets: Buckets = field(default_factory=Buckets)

    @classmethod
    def load_from_file(
        cls,
        manifest_path: str | Path | None = None,
        **kwargs: Any,
    ) -> BrewConfig:
        """Load, classify and complete the manifest at ``manifest_path``."""
        path = Path(manifest_path or DEFAULT_MANIFEST)
        records = load_manifest(path)
        buckets = inject_synthetic_entries(classify(records))
        return cls(manifest_path=path, buckets=buckets, **kwargs)
