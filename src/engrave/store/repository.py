"""Repository for every job-record operation.

Single interface for: invoices, stage submissions, work orders and lookups.
Input is validated into a JobKey before anything touches the disk. After a
successful write a JobEvent is handed to every registered sink.

Per-stage write policy:
  invoice PDF / work-order image   versioned, never overwritten
  stage image directories          replaced on every submission
  order data.json                  merged (deposits append-only)
  Work_Order/data.json             overwritten
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from engrave.store import artifacts, layout, locator, metadata, views
from engrave.store.connection import JobStore
from engrave.store.errors import ValidationError
from engrave.store.identity import JobKey
from engrave.store.layout import Stage
from engrave.store.models import JobEvent, JobView, UploadedFile

logger = logging.getLogger(__name__)

EventSink = Callable[[JobEvent], None]

INVOICE_BASE = "invoice"
INVOICE_EXT = "pdf"
WORK_ORDER_BASE = "work_order"
WORK_ORDER_EXT = "png"

# Event kind -> subject template.
EVENT_SUBJECTS: dict[str, str] = {
    "invoice_saved": "{name}: Invoice saved",
    "cemetery_submission": "{name}: Prepare cemetery application",
    "art_submission": "{name}: Ready for engraving",
    "engraving_submission": "{name}: Monument Install",
    "foundation_submission": "{name}: Monument Install",
    "work_order_saved": "{name}: Work order saved",
}


class JobRepository:
    """Data access layer for all job-record operations.

    Wraps an open JobStore. The store is owned by the caller.
    """

    def __init__(
        self,
        store: JobStore,
        *,
        sinks: Sequence[EventSink] = (),
        scan_timeout: float | None = None,
        max_workers: int = len(layout.IMAGE_STAGES),
    ) -> None:
        """Initialise with an open store.

        Args:
            store: Opened JobStore (see JobStore.open).
            sinks: Callables receiving a JobEvent after each successful write.
            scan_timeout: Deadline in seconds for the stage scans of a job view.
            max_workers: Worker threads for the stage scans.
        """
        self._store = store
        self._sinks = list(sinks)
        self._scan_timeout = scan_timeout
        self._max_workers = max_workers

    def add_sink(self, sink: EventSink) -> None:
        self._sinks.append(sink)

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def save_invoice(
        self,
        headstone_name: str | None,
        invoice_no: str | None,
        pdf: bytes | UploadedFile | None,
        deposit: str | None = None,
        form_fields: Mapping[str, Any] | None = None,
    ) -> str:
        """Store a new invoice PDF version and merge the order metadata.

        Args:
            headstone_name: Name on the headstone.
            invoice_no: Invoice token, e.g. ``"INV-1042"``.
            pdf: PDF bytes (or an UploadedFile carrying them).
            deposit: Deposit amount; falls back to ``form_fields["deposit"]``.
            form_fields: Full invoice form. Stored as the order ``data``.

        Returns:
            File name of the stored PDF, e.g. ``"invoice_v2.pdf"``.
        """
        key = JobKey.from_input(headstone_name, invoice_no)
        content = _require_bytes(pdf, "pdf")
        fields = {**key.to_dict(), **dict(form_fields or {})}
        if deposit is None:
            deposit = fields.get(metadata.DEPOSIT_FIELD)

        job_dir = layout.ensure_job_root(self._store.root, key.dir_name)
        file_name = artifacts.save_versioned(job_dir, INVOICE_BASE, INVOICE_EXT, content)
        metadata.write_order_metadata(job_dir, fields, deposit)

        self._emit("invoice_saved", key)
        return file_name

    def get_invoice(self, invoice_no: str | None) -> dict[str, Any]:
        """Return the order document of the job carrying *invoice_no*.

        Raises:
            JobNotFound: No job directory for the invoice.
            DocumentNotFound: The job has no order data.json.
        """
        dir_name = locator.find_by_invoice_no(self._store.root, _require_text(invoice_no, "invoiceNo"))
        return metadata.read_order_metadata(self._store.job_dir(dir_name))

    # ------------------------------------------------------------------
    # Stage submissions (replace semantics)
    # ------------------------------------------------------------------

    def submit_to_cemetery(
        self,
        headstone_name: str | None,
        invoice_no: str | None,
        images: Sequence[UploadedFile],
    ) -> list[str]:
        """Replace the Cemetery_Submission images."""
        key = JobKey.from_input(headstone_name, invoice_no)
        written = self._replace_stage(key, Stage.CEMETERY_SUBMISSION, images)
        self._emit("cemetery_submission", key)
        return written

    def submit_engraving(
        self,
        headstone_name: str | None,
        invoice_no: str | None,
        images: Sequence[UploadedFile],
    ) -> list[str]:
        """Replace the Engraving_Submission images."""
        key = JobKey.from_input(headstone_name, invoice_no)
        written = self._replace_stage(key, Stage.ENGRAVING_SUBMISSION, images)
        self._emit("engraving_submission", key)
        return written

    def submit_art(
        self,
        headstone_name: str | None,
        invoice_no: str | None,
        final_art_length: int | str | None,
        images: Sequence[UploadedFile],
    ) -> list[str]:
        """Replace Final_Art with ``images[:final_art_length]`` and
        Cemetery_Approval with the rest."""
        key = JobKey.from_input(headstone_name, invoice_no)
        written = self._replace_split(
            key,
            Stage.FINAL_ART,
            Stage.CEMETERY_APPROVAL,
            images,
            _parse_split(final_art_length, "finalArtLength", len(images)),
        )
        self._emit("art_submission", key)
        return written

    def submit_foundation(
        self,
        headstone_name: str | None,
        invoice_no: str | None,
        foundation_images_length: int | str | None,
        images: Sequence[UploadedFile],
    ) -> list[str]:
        """Replace Foundation_Install with ``images[:foundation_images_length]``
        and Monument_Setting with the rest."""
        key = JobKey.from_input(headstone_name, invoice_no)
        written = self._replace_split(
            key,
            Stage.FOUNDATION_INSTALL,
            Stage.MONUMENT_SETTING,
            images,
            _parse_split(foundation_images_length, "foundationImagesLength", len(images)),
        )
        self._emit("foundation_submission", key)
        return written

    # ------------------------------------------------------------------
    # Work orders
    # ------------------------------------------------------------------

    def save_work_order(
        self,
        headstone_name: str | None,
        invoice_no: str | None,
        work_order_image: bytes | UploadedFile | None,
        form_fields: Mapping[str, Any] | None = None,
    ) -> str:
        """Store a new work-order image version and overwrite its metadata.

        Also creates every stage directory of the job.

        Returns:
            File name of the stored image, e.g. ``"work_order_v1.png"``.
        """
        key = JobKey.from_input(headstone_name, invoice_no)
        content = _require_bytes(work_order_image, "workOrder")

        tree = layout.ensure_full_tree(self._store.root, key.dir_name)
        file_name = artifacts.save_versioned(
            tree[Stage.WORK_ORDER], WORK_ORDER_BASE, WORK_ORDER_EXT, content
        )
        metadata.write_work_order_metadata(
            self._store.job_dir(key.dir_name), dict(form_fields or {})
        )

        self._emit("work_order_saved", key)
        return file_name

    def get_work_order(self, invoice_no: str | None) -> JobView:
        """Consolidated view of the job carrying *invoice_no*.

        ``view.found`` is False when the work order has not been created yet;
        the view then carries the order-level fallback fields.

        Raises:
            JobNotFound: No job directory for the invoice.
        """
        dir_name = locator.find_by_invoice_no(self._store.root, _require_text(invoice_no, "invoiceNo"))
        return views.build_job_view(
            self._store.job_dir(dir_name),
            max_workers=self._max_workers,
            timeout=self._scan_timeout,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def list_jobs_by_name(self, fragment: str | None) -> list[JobKey]:
        """All jobs whose directory name contains *fragment* (case-insensitive)."""
        return locator.find_by_name_fragment(self._store.root, _require_text(fragment, "headstoneName"))

    def list_jobs(self) -> list[JobKey]:
        """Every parseable job in the store."""
        return locator.find_by_name_fragment(self._store.root, "")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replace_stage(
        self, key: JobKey, stage: Stage, images: Sequence[UploadedFile]
    ) -> list[str]:
        _require_images(images)
        layout.ensure_job_root(self._store.root, key.dir_name)
        stage_dir = layout.ensure_stage_directories(self._store.root, key.dir_name, stage)
        layout.reset_stage_contents(stage_dir)
        return [p.name for p in artifacts.save_batch(stage_dir, images)]

    def _replace_split(
        self,
        key: JobKey,
        first: Stage,
        second: Stage,
        images: Sequence[UploadedFile],
        split_index: int,
    ) -> list[str]:
        _require_images(images)
        layout.ensure_job_root(self._store.root, key.dir_name)
        first_dir = layout.ensure_stage_directories(self._store.root, key.dir_name, first)
        second_dir = layout.ensure_stage_directories(self._store.root, key.dir_name, second)
        layout.reset_stage_contents(first_dir)
        layout.reset_stage_contents(second_dir)
        written = artifacts.save_batch(first_dir, images, split_index, second_dir)
        return [p.name for p in written]

    def _emit(self, kind: str, key: JobKey) -> None:
        event = JobEvent(
            kind=kind,
            key=key,
            subject=EVENT_SUBJECTS[kind].format(name=key.headstone_name),
        )
        logger.debug("Emitting %s for %s", kind, key.dir_name)
        for sink in self._sinks:
            try:
                sink(event)
            except Exception:  # noqa: BLE001
                # Sink failures never propagate to the writer.
                logger.exception("Event sink %r failed for %s", sink, kind)


# ------------------------------------------------------------------
# Input helpers
# ------------------------------------------------------------------


def _require_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(field, f"{field} is required")
    return text


def _require_bytes(value: bytes | UploadedFile | None, field: str) -> bytes:
    if isinstance(value, UploadedFile):
        value = value.content
    if not value:
        raise ValidationError(field, f"{field} file is required")
    return value


def _require_images(images: Sequence[UploadedFile]) -> None:
    if not images:
        raise ValidationError("images", "at least one image is required")


def _parse_split(value: int | str | None, field: str, total: int) -> int:
    """Parse a split length form field and check it against the batch size."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field, f"{field} is required")
    try:
        split = int(value)
    except (TypeError, ValueError):
        raise ValidationError(field, f"{field} must be an integer, got '{value}'") from None
    if not 0 <= split <= total:
        raise ValidationError(field, f"{field} {split} is outside 0..{total}")
    return split
