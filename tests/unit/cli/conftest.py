"""Fixtures for CLI tests: an isolated workshop directory with sample files."""

from __future__ import annotations

from pathlib import Path

import pytest

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 16
PDF = b"%PDF-1.4\n%test\n"


@pytest.fixture
def workshop(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """CWD = tmp_path, no ENGRAVE_* env vars, sample files in tmp_path/files."""
    monkeypatch.chdir(tmp_path)
    for var in ("ENGRAVE_UPLOADS_ROOT", "ENGRAVE_SCAN_TIMEOUT", "ENGRAVE_PASSWORDS"):
        monkeypatch.delenv(var, raising=False)

    files = tmp_path / "files"
    files.mkdir()
    (files / "invoice.pdf").write_bytes(PDF)
    for i in range(4):
        (files / f"photo{i}.png").write_bytes(PNG + bytes([i]))
    (files / "proof.jpg").write_bytes(JPEG)
    return tmp_path


@pytest.fixture
def uploads_args(workshop: Path) -> list[str]:
    return ["--uploads-root", str(workshop / "uploads")]
