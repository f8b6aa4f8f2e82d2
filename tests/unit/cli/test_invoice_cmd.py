"""Tests for engrave invoice save / show."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from engrave.cli.main import app

runner = CliRunner()


def _save(workshop: Path, uploads_args: list[str], *extra: str):
    return runner.invoke(
        app,
        [
            "invoice", "save",
            "--name", "Jane Smith",
            "--invoice", "INV-0007",
            "--pdf", str(workshop / "files" / "invoice.pdf"),
            *extra,
            *uploads_args,
        ],
    )


def test_save_writes_versioned_pdf(workshop: Path, uploads_args: list[str]) -> None:
    first = _save(workshop, uploads_args)
    second = _save(workshop, uploads_args)

    assert first.exit_code == 0, first.output
    assert "invoice_v1.pdf" in first.output
    assert "invoice_v2.pdf" in second.output
    job = workshop / "uploads" / "Jane_Smith_INV-0007"
    assert (job / "invoice_v2.pdf").read_bytes().startswith(b"%PDF")
    assert (job / "data.json").exists()


def test_save_with_deposit_and_fields(workshop: Path, uploads_args: list[str]) -> None:
    result = _save(workshop, uploads_args, "--deposit", "100", "--field", "cemeteryName=Oakwood")
    assert result.exit_code == 0, result.output
    assert "Deposit recorded: 100" in result.output

    shown = runner.invoke(app, ["invoice", "show", "INV-0007", "--json", *uploads_args])
    assert shown.exit_code == 0, shown.output
    doc = json.loads(shown.stdout)
    assert doc["data"]["cemeteryName"] == "Oakwood"
    assert doc["data"]["deposit"] == ""
    assert [d["depositAmount"] for d in doc["deposits"]] == ["100"]


def test_show_table(workshop: Path, uploads_args: list[str]) -> None:
    _save(workshop, uploads_args, "--field", "customerName=Jane")
    result = runner.invoke(app, ["invoice", "show", "INV-0007", *uploads_args])
    assert result.exit_code == 0, result.output
    assert "customerName" in result.output
    assert "No deposits recorded." in result.output


def test_show_unknown_invoice_exits_zero(workshop: Path, uploads_args: list[str]) -> None:
    result = runner.invoke(app, ["invoice", "show", "INV-404", *uploads_args])
    assert result.exit_code == 0
    assert "Job not found" in result.output


def test_save_missing_pdf(workshop: Path, uploads_args: list[str]) -> None:
    result = runner.invoke(
        app,
        ["invoice", "save", "-n", "Jane", "-i", "INV-1", "--pdf", "nope.pdf", *uploads_args],
    )
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_save_bad_field(workshop: Path, uploads_args: list[str]) -> None:
    result = _save(workshop, uploads_args, "--field", "novalue")
    assert result.exit_code == 1
    assert "Invalid --field" in result.output


def test_save_blank_name_is_validation_error(workshop: Path, uploads_args: list[str]) -> None:
    result = runner.invoke(
        app,
        [
            "invoice", "save", "-n", " ", "-i", "INV-1",
            "--pdf", str(workshop / "files" / "invoice.pdf"),
            *uploads_args,
        ],
    )
    assert result.exit_code == 1
    assert not (workshop / "uploads" / "_INV-1").exists()
