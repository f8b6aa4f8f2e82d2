"""Tests for job lookup by name fragment and invoice number."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from engrave.store.errors import JobNotFound
from engrave.store.identity import JobKey
from engrave.store.locator import (
    find_by_invoice_no,
    find_by_name_fragment,
    list_job_directories,
)


def _mkjobs(root: Path, *names: str) -> None:
    for name in names:
        (root / name).mkdir(parents=True)


def test_list_job_directories_missing_root(tmp_path: Path):
    assert list_job_directories(tmp_path / "missing") == []


def test_list_job_directories_ignores_files(tmp_path: Path):
    _mkjobs(tmp_path, "B_INV-2", "A_INV-1")
    (tmp_path / "stray.txt").write_text("x")
    assert list_job_directories(tmp_path) == ["A_INV-1", "B_INV-2"]


# ------------------------------------------------------------------
# Name fragment
# ------------------------------------------------------------------

def test_fragment_is_case_insensitive(tmp_path: Path):
    _mkjobs(tmp_path, "John_Doe_INV-1042", "Jane_Smith_INV-0007")
    assert find_by_name_fragment(tmp_path, "JOHN") == [JobKey("John Doe", "INV-1042")]


def test_fragment_matches_across_underscores(tmp_path: Path):
    _mkjobs(tmp_path, "John_Doe_INV-1042")
    assert find_by_name_fragment(tmp_path, "john doe") == [JobKey("John Doe", "INV-1042")]


def test_fragment_returns_all_matches(tmp_path: Path):
    _mkjobs(tmp_path, "John_Doe_INV-1", "John_Smith_INV-2", "Mary_INV-3")
    keys = find_by_name_fragment(tmp_path, "john")
    assert [k.invoice_no for k in keys] == ["INV-1", "INV-2"]


def test_fragment_requires_inv_token(tmp_path: Path):
    _mkjobs(tmp_path, "John_Doe_1042", "Work Orders")
    assert find_by_name_fragment(tmp_path, "john") == []


def test_fragment_skips_malformed(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    _mkjobs(tmp_path, "John_INVALID", "John_Doe_INV-5")
    with caplog.at_level(logging.WARNING, logger="engrave.store.locator"):
        keys = find_by_name_fragment(tmp_path, "john")
    assert keys == [JobKey("John Doe", "INV-5")]
    assert "John_INVALID" in caplog.text


def test_fragment_no_match(tmp_path: Path):
    _mkjobs(tmp_path, "John_Doe_INV-1")
    assert find_by_name_fragment(tmp_path, "zzz") == []


# ------------------------------------------------------------------
# Invoice number
# ------------------------------------------------------------------

def test_invoice_exact_token(tmp_path: Path):
    _mkjobs(tmp_path, "John_Doe_INV-10420", "John_Doe_INV-1042")
    assert find_by_invoice_no(tmp_path, "INV-1042") == "John_Doe_INV-1042"


def test_invoice_does_not_match_longer_number(tmp_path: Path):
    _mkjobs(tmp_path, "John_Doe_INV-10420")
    with pytest.raises(JobNotFound):
        find_by_invoice_no(tmp_path, "INV-1042")


def test_invoice_not_found(tmp_path: Path):
    with pytest.raises(JobNotFound) as exc_info:
        find_by_invoice_no(tmp_path, "INV-1")
    assert exc_info.value.query == "INV-1"
