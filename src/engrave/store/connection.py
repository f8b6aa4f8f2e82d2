"""Uploads-root handle for the filesystem job store."""

from __future__ import annotations

import logging
from pathlib import Path

from engrave.store.errors import WriteFailure

logger = logging.getLogger(__name__)


class JobStore:
    """The uploads root, opened once at startup and passed to every operation."""

    def __init__(self, uploads_root: Path | str) -> None:
        """Store the root path. Call open() before use.

        Args:
            uploads_root: Base directory holding one subtree per job
                (created if missing).
        """
        self.uploads_root = Path(uploads_root)
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> JobStore:
        """Create the uploads root if needed and mark the handle usable."""
        try:
            self.uploads_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Cannot create uploads root %s: %s", self.uploads_root, exc)
            raise WriteFailure(self.uploads_root) from exc
        self.uploads_root = self.uploads_root.resolve()
        self._open = True
        logger.debug("Opened job store at %s", self.uploads_root)
        return self

    def close(self) -> None:
        self._open = False

    @property
    def root(self) -> Path:
        """The resolved uploads root. Raises RuntimeError if not opened."""
        if not self._open:
            raise RuntimeError("JobStore is not open; call open() first")
        return self.uploads_root

    def job_dir(self, dir_name: str) -> Path:
        return self.root / dir_name

    def __enter__(self) -> JobStore:
        return self.open()

    def __exit__(self, *args: object) -> None:
        self.close()
