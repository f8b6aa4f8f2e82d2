"""Artifact Writer: persist uploaded binaries under a stage directory.

Two naming policies:
  versioned  <base>_v<N>.<ext>, N = first unused integer scanning from 1.
             Never overwrites. Used for invoice PDFs and work-order images.
  batch      <timestamp-ms>_<index>.<ext>, extension from the MIME table.
             Callers reset the target directory first (replace semantics).

A failed write inside a batch is not rolled back: files already written stay.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from pathlib import Path

from engrave.store.errors import ValidationError, WriteFailure
from engrave.store.models import UploadedFile

logger = logging.getLogger(__name__)

UNKNOWN_EXTENSION = "unknown"

MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/pjpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
    "image/heic": "heic",
    "image/heif": "heif",
    "image/svg+xml": "svg",
    "application/pdf": "pdf",
}


def extension_for(mime_type: str) -> str:
    """Map a declared MIME type to a file extension (``"unknown"`` if unlisted)."""
    return MIME_EXTENSIONS.get(mime_type.strip().lower(), UNKNOWN_EXTENSION)


def next_version_path(directory: Path, base_name: str, ext: str) -> Path:
    """Return the first ``<base_name>_v<N>.<ext>`` in *directory* that does not exist."""
    version = 1
    while True:
        candidate = directory / f"{base_name}_v{version}.{ext}"
        if not candidate.exists():
            return candidate
        version += 1


def save_versioned(directory: Path, base_name: str, ext: str, content: bytes) -> str:
    """Write *content* under the next free version number.

    Args:
        directory: Existing target directory.
        base_name: File stem without version suffix, e.g. ``"invoice"``.
        ext: Extension without dot, e.g. ``"pdf"``.
        content: Raw bytes to write.

    Returns:
        The file name written, e.g. ``"invoice_v3.pdf"``.

    Raises:
        WriteFailure: If the file cannot be written.
    """
    target = next_version_path(directory, base_name, ext)
    _write_bytes(target, content)
    logger.info("Saved versioned artifact %s", target)
    return target.name


def batch_file_name(timestamp_ms: int, index: int, mime_type: str) -> str:
    return f"{timestamp_ms}_{index}.{extension_for(mime_type)}"


def save_batch(
    directory: Path,
    files: Sequence[UploadedFile],
    split_index: int | None = None,
    second_directory: Path | None = None,
    *,
    timestamp_ms: int | None = None,
) -> list[Path]:
    """Write a batch of uploads under timestamp+index names.

    When *split_index* is given, ``files[:split_index]`` go to *directory*
    and the remainder to *second_directory*. The index in each file name is
    the file's position in the whole batch, so names never collide even
    when both halves share a timestamp.

    Args:
        directory: Target for the first (or only) part of the batch.
        files: Uploads in submission order.
        split_index: Number of files that belong to *directory*.
        second_directory: Target for the rest; required with *split_index*.
        timestamp_ms: Submission timestamp; defaults to now.

    Returns:
        Paths written, in batch order.

    Raises:
        ValidationError: If *split_index* is out of range or has no second
            directory to go with it.
        WriteFailure: On the first file that cannot be written.
    """
    if split_index is not None:
        if second_directory is None:
            raise ValidationError("splitIndex", "splitIndex requires a second directory")
        if not 0 <= split_index <= len(files):
            raise ValidationError(
                "splitIndex",
                f"splitIndex {split_index} is outside 0..{len(files)}",
            )

    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    written: list[Path] = []
    for index, upload in enumerate(files):
        if split_index is not None and index >= split_index:
            target_dir = second_directory
        else:
            target_dir = directory
        target = target_dir / batch_file_name(stamp, index, upload.mime_type)
        _write_bytes(target, upload.content)
        written.append(target)

    logger.info("Saved %d artifact(s) at %d", len(written), stamp)
    return written


def _write_bytes(path: Path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as exc:
        logger.error("Cannot write %s: %s", path, exc)
        raise WriteFailure(path) from exc
