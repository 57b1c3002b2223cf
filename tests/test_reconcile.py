"""Tests for brewyaml.reconcile."""

from typing import Any, Callable

import pytest

from brewyaml.config import Category, ManifestEntry
from brewyaml.reconcile import (
    FORMULA_PROFILE,
    GEM_PROFILE,
    INSTALL_ERROR,
    LEGACY_PIP_PROFILE,
    NAME_ERROR,
    PIP_PROFILE,
    TAP_PROFILE,
    CategoryReport,
    RunSummary,
    reconcile,
    select_pip_profile,
    strip_prefix,
)


def _formulae(*names: Any) -> list[ManifestEntry]:
    return [ManifestEntry(Category.FORMULA, name) for name in names]


def test_empty_category_makes_no_calls(fake_store: Callable[..., Any]) -> None:
    store = fake_store()
    report = reconcile([], FORMULA_PROFILE, store)
    assert not report.has_errors
    assert store.calls == []


def test_present_entries_are_not_installed(fake_store: Callable[..., Any]) -> None:
    store = fake_store(installed={("list",): ["wget", "jq", ""]})
    report = reconcile(_formulae("wget", "jq"), FORMULA_PROFILE, store)
    assert report.present == ["wget", "jq"]
    assert store.installs == []
    assert store.calls == [("list",)]
    assert not report.has_errors


def test_missing_entries_are_installed_once_each(fake_store: Callable[..., Any]) -> None:
    """Install arguments do not accumulate names from earlier entries."""
    store = fake_store(installed={("list",): ["wget"]})
    report = reconcile(_formulae("wget", "jq", "ripgrep"), FORMULA_PROFILE, store)
    assert store.installs == [("install", "jq"), ("install", "ripgrep")]
    assert report.installed == ["jq", "ripgrep"]
    assert report.present == ["wget"]


def test_match_is_exact(fake_store: Callable[..., Any]) -> None:
    store = fake_store(installed={("list",): ["python@3.12"]})
    reconcile(_formulae("python"), FORMULA_PROFILE, store)
    assert store.installs == [("install", "python")]


def test_name_error_does_not_stop_category(fake_store: Callable[..., Any]) -> None:
    store = fake_store()
    entries = [
        ManifestEntry(Category.FORMULA, None, raw={"formula": None}),
        ManifestEntry(Category.FORMULA, "jq"),
    ]
    report = reconcile(entries, FORMULA_PROFILE, store)
    assert report.has_errors
    assert [error.kind for error in report.errors] == [NAME_ERROR]
    assert store.installs == [("install", "jq")]


def test_install_failure_continues_with_remaining_entries(fake_store: Callable[..., Any]) -> None:
    store = fake_store(failing={"broken"})
    report = reconcile(_formulae("wget", "broken", "jq"), FORMULA_PROFILE, store)
    assert store.installs == [("install", "wget"), ("install", "broken"), ("install", "jq")]
    assert report.has_errors
    assert report.installed == ["wget", "jq"]
    [error] = report.errors
    assert error.kind == INSTALL_ERROR
    assert error.name == "broken"
    assert "No available formula" in error.detail


def test_query_failure_aborts_category(fake_store: Callable[..., Any]) -> None:
    store = fake_store(failing_lists={("tap",)})
    report = reconcile([ManifestEntry(Category.TAP, "homebrew/cask")], TAP_PROFILE, store)
    assert report.has_errors
    assert report.query_error is not None
    assert store.installs == []


def test_gem_filter_strips_prefix(fake_store: Callable[..., Any]) -> None:
    store = fake_store(installed={("list",): ["wget", "gem-rubocop", "pip-requests"]})
    entries = [ManifestEntry(Category.GEM, "rubocop"), ManifestEntry(Category.GEM, "wget")]
    report = reconcile(entries, GEM_PROFILE, store)
    assert report.present == ["rubocop"]
    assert store.installs == [("gem", "install", "wget")]


def test_strip_prefix() -> None:
    assert strip_prefix("pip-")(["pip-requests", "wget", "pip-"]) == ["requests", ""]


@pytest.mark.parametrize(
    ("version", "expected"),
    [
        ("brew pip v0.4.1\n", LEGACY_PIP_PROFILE),
        ("brew pip v0.4.3", LEGACY_PIP_PROFILE),
        ("brew pip v0.5.0\n", PIP_PROFILE),
        ("", PIP_PROFILE),
    ],
)
def test_select_pip_profile(version: str, expected: object) -> None:
    assert select_pip_profile(version) is expected


def test_legacy_pip_profile(fake_store: Callable[..., Any]) -> None:
    store = fake_store(installed={("list",): ["python", "pip-requests"]})
    entries = [ManifestEntry(Category.PIP, "requests"), ManifestEntry(Category.PIP, "flask")]
    report = reconcile(entries, LEGACY_PIP_PROFILE, store)
    assert report.present == ["requests"]
    assert store.installs == [("pip", "flask")]


def test_run_summary_has_errors() -> None:
    ok = CategoryReport(Category.TAP)
    failed = CategoryReport(Category.CASK, query_error="boom")
    assert not RunSummary(reports=[ok]).has_errors
    assert RunSummary(reports=[ok, failed]).has_errors
    assert RunSummary(reports=[ok], update_errors=["boom"]).has_errors
    assert RunSummary(reports=[ok], rejected=1).has_errors
