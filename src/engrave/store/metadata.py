"""Metadata Store: per-job JSON documents.

Two documents per job:
  <job-dir>/data.json             order level: {"deposits": [...], "data": {...}}
  <job-dir>/Work_Order/data.json  work-order level: flat form fields

Order documents merge incrementally (``deposits`` is append-only; ``data`` is
replaced wholesale). Work-order documents are overwritten on every save.
Documents are written atomically (temp file -> rename) as indented JSON.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

from engrave.store.errors import DocumentNotFound, IOFailure, WriteFailure
from engrave.store.layout import order_document_path, work_order_document_path
from engrave.store.models import FALLBACK_FIELDS, DepositRecord, WorkOrderView

logger = logging.getLogger(__name__)

DEPOSITS_KEY = "deposits"
DATA_KEY = "data"
DEPOSIT_FIELD = "deposit"


# ------------------------------------------------------------------
# Raw documents
# ------------------------------------------------------------------


def read_document(path: Path) -> dict[str, Any]:
    """Load a JSON document.

    Raises:
        DocumentNotFound: If *path* does not exist.
        IOFailure: If the file cannot be read or is not a JSON object.
    """
    if not path.exists():
        raise DocumentNotFound(path)
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        logger.error("Cannot read %s: %s", path, exc)
        raise IOFailure(path, "read") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error("Invalid JSON in %s: %s", path, exc)
        raise IOFailure(path, "parse") from exc
    if not isinstance(doc, dict):
        raise IOFailure(path, "parse a JSON object from")
    return doc


def write_document(path: Path, doc: Mapping[str, Any]) -> None:
    """Write *doc* to *path* atomically as pretty-printed JSON.

    Raises:
        WriteFailure: If *doc* is not JSON-serialisable or the file cannot be
            written. No temp file is left behind.
    """
    try:
        content = json.dumps(doc, indent=2, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        logger.error("Cannot serialise %s: %s", path, exc)
        raise WriteFailure(path) from exc

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except Exception as exc:
        # Clean up temp file on error
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        if not isinstance(exc, OSError):
            raise
        logger.error("Cannot write %s: %s", path, exc)
        raise WriteFailure(path) from exc


# ------------------------------------------------------------------
# Order level
# ------------------------------------------------------------------


def read_order_metadata(job_dir: Path) -> dict[str, Any]:
    return read_document(order_document_path(job_dir))


def read_deposits(job_dir: Path) -> list[dict[str, Any]]:
    """Deposits recorded on the order document; empty if it does not exist."""
    try:
        doc = read_order_metadata(job_dir)
    except DocumentNotFound:
        return []
    return [dict(d) for d in doc.get(DEPOSITS_KEY) or [] if isinstance(d, Mapping)]


def write_order_metadata(
    job_dir: Path,
    form_fields: Mapping[str, Any],
    deposit_amount: str | None = None,
    *,
    today: date | None = None,
) -> dict[str, Any]:
    """Merge an invoice save into the order document and persist it.

    Appends ``{depositAmount, date}`` to ``deposits`` when *deposit_amount*
    is non-empty. ``data`` becomes the incoming form fields with the
    ``deposit`` field blanked. Every other top-level key is kept.

    Returns:
        The merged document as written.
    """
    path = order_document_path(job_dir)
    try:
        doc = read_document(path)
    except DocumentNotFound:
        doc = {}

    deposits = list(doc.get(DEPOSITS_KEY) or [])
    amount = (deposit_amount or "").strip()
    if amount:
        record = DepositRecord(
            deposit_amount=amount,
            date=(today or date.today()).isoformat(),
        )
        deposits.append(record.to_dict())
    doc[DEPOSITS_KEY] = deposits

    data = dict(form_fields)
    data[DEPOSIT_FIELD] = ""
    doc[DATA_KEY] = data

    write_document(path, doc)
    return doc


# ------------------------------------------------------------------
# Work-order level
# ------------------------------------------------------------------


def write_work_order_metadata(job_dir: Path, form_fields: Mapping[str, Any]) -> None:
    """Overwrite Work_Order/data.json with *form_fields*. No merge."""
    write_document(work_order_document_path(job_dir), dict(form_fields))


def read_work_order_or_fallback(job_dir: Path) -> WorkOrderView:
    """Return work-order metadata, or the order-level fallback subset.

    When Work_Order/data.json is absent, the fixed FALLBACK_FIELDS are drawn
    from the order document's ``data`` (missing values become ``""``) and the
    view is flagged ``found=False``.
    """
    try:
        return WorkOrderView(fields=read_document(work_order_document_path(job_dir)))
    except DocumentNotFound:
        pass

    try:
        order_data = read_order_metadata(job_dir).get(DATA_KEY) or {}
    except DocumentNotFound:
        order_data = {}
    if not isinstance(order_data, Mapping):
        order_data = {}
    fallback = {name: order_data.get(name, "") for name in FALLBACK_FIELDS}
    # The invoice form spells it headstoneName, the work-order form headStoneName.
    if not fallback["headStoneName"]:
        fallback["headStoneName"] = order_data.get("headstoneName", "")
    return WorkOrderView(fields=fallback, found=False)
