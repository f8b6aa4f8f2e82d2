"""Tests for engrave jobs list."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from engrave.cli.main import app

runner = CliRunner()


def _make_job(workshop: Path, uploads_args: list[str], name: str, invoice: str) -> None:
    runner.invoke(
        app,
        ["invoice", "save", "-n", name, "-i", invoice,
         "--pdf", str(workshop / "files" / "invoice.pdf"), *uploads_args],
    )


def test_empty_store(workshop: Path, uploads_args: list[str]) -> None:
    result = runner.invoke(app, ["jobs", "list", *uploads_args])
    assert result.exit_code == 0
    assert "No matching jobs found." in result.output


def test_list_all_and_filter(workshop: Path, uploads_args: list[str]) -> None:
    _make_job(workshop, uploads_args, "Jane Smith", "INV-0007")
    _make_job(workshop, uploads_args, "John Doe", "INV-1042")

    everything = runner.invoke(app, ["jobs", "list", *uploads_args])
    assert everything.exit_code == 0, everything.output
    assert "2 job(s)" in everything.output

    smiths = runner.invoke(app, ["jobs", "list", "--name", "SMITH", *uploads_args])
    assert "1 job(s)" in smiths.output
    assert "INV-0007" in smiths.output
    assert "INV-1042" not in smiths.output
