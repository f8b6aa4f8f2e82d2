"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from engrave.store.connection import JobStore
from engrave.store.models import UploadedFile
from engrave.store.repository import JobRepository

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16
PDF_BYTES = b"%PDF-1.4\n%test\n"


@pytest.fixture
def store(tmp_path):
    """Opened JobStore rooted at tmp_path/uploads, closed after test."""
    handle = JobStore(tmp_path / "uploads").open()
    yield handle
    handle.close()


@pytest.fixture
def events():
    return []


@pytest.fixture
def repo(store, events):
    return JobRepository(store, sinks=[events.append])


@pytest.fixture
def make_image():
    """Factory for in-memory image uploads: make_image("png", b"tag")."""

    def _make(kind: str = "png", tag: bytes = b"") -> UploadedFile:
        if kind == "png":
            return UploadedFile(PNG_BYTES + tag, "image/png", "img.png")
        if kind == "jpeg":
            return UploadedFile(JPEG_BYTES + tag, "image/jpeg", "img.jpg")
        return UploadedFile(b"raw" + tag, kind, "img.bin")

    return _make


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES
