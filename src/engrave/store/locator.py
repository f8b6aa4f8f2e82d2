"""Job Locator: the only query mechanism, a scan of the uploads root."""

from __future__ import annotations

import logging
from pathlib import Path

from engrave.store.errors import IOFailure, JobNotFound, MalformedDirectoryName
from engrave.store.identity import INVOICE_MARKER, JobKey, parse_directory_name

logger = logging.getLogger(__name__)

_MARKER_TOKEN = INVOICE_MARKER.lower()


def list_job_directories(uploads_root: Path) -> list[str]:
    """Return the names of all directories directly under *uploads_root*, sorted."""
    if not uploads_root.exists():
        return []
    try:
        return sorted(p.name for p in uploads_root.iterdir() if p.is_dir())
    except OSError as exc:
        logger.error("Cannot list %s: %s", uploads_root, exc)
        raise IOFailure(uploads_root, "list") from exc


def _normalize(dir_name: str) -> str:
    return dir_name.lower().replace("_", " ")


def find_by_name_fragment(uploads_root: Path, fragment: str) -> list[JobKey]:
    """Fuzzy lookup by partial headstone name.

    Keeps directories whose normalized name (lower-cased, underscores to
    spaces) contains both ``"inv"`` and the lower-cased *fragment*. Every
    match is returned; names that fail to parse are logged and skipped.
    """
    needle = fragment.lower().strip()
    matches: list[JobKey] = []
    for dir_name in list_job_directories(uploads_root):
        normalized = _normalize(dir_name)
        if _MARKER_TOKEN not in normalized or needle not in normalized:
            continue
        try:
            matches.append(parse_directory_name(dir_name))
        except MalformedDirectoryName as exc:
            logger.warning("Skipping %s", exc)
    return matches


def find_by_invoice_no(uploads_root: Path, invoice_no: str) -> str:
    """Return the directory name of the job with exactly *invoice_no*.

    A directory matches when its name ends in ``_<invoice_no>``, so
    ``INV-1042`` never resolves to ``..._INV-10420``. First match (in sorted
    order) wins.

    Raises:
        JobNotFound: If no directory carries the invoice token.
    """
    suffix = f"_{invoice_no}"
    for dir_name in list_job_directories(uploads_root):
        if dir_name.endswith(suffix):
            return dir_name
    raise JobNotFound(invoice_no)
