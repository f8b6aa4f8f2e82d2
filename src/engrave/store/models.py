"""Domain models for the job-record store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from engrave.store.identity import JobKey


@dataclass(frozen=True)
class UploadedFile:
    """An already-decoded upload: raw bytes plus the declared MIME type."""

    content: bytes
    mime_type: str
    original_name: str = ""


@dataclass(frozen=True)
class DepositRecord:
    deposit_amount: str
    date: str

    def to_dict(self) -> dict[str, str]:
        return {"depositAmount": self.deposit_amount, "date": self.date}


@dataclass(frozen=True)
class StageImage:
    """One stored image, inlined as a base64 data URI."""

    file_name: str
    inline_data: str

    def to_dict(self) -> dict[str, str]:
        return {"fileName": self.file_name, "inlineData": self.inline_data}


# Order-level fields copied into the work-order view when Work_Order/data.json
# has not been written yet.
FALLBACK_FIELDS: tuple[str, ...] = (
    "headStoneName",
    "invoiceNo",
    "date",
    "customerEmail",
    "customerName",
    "customerPhone",
    "cemeteryName",
    "cemeteryAddress",
    "cemeteryContact",
    "lotNumber",
)


@dataclass
class WorkOrderView:
    """Work-order metadata, or the order-level fallback subset.

    Attributes:
        fields: Work-order form fields (or the fallback subset).
        found: False when Work_Order/data.json does not exist yet.
    """

    fields: dict[str, Any]
    found: bool = True


@dataclass
class JobView:
    """Consolidated read-side view of one job.

    Attributes:
        dir_name: Job directory name.
        work_order: Work-order fields, or the order-level fallback.
        images: Stage directory name -> inlined images.
        deposits: Deposits recorded on the order document, oldest first.
    """

    dir_name: str
    work_order: WorkOrderView
    images: dict[str, list[StageImage]] = field(default_factory=dict)
    deposits: list[dict[str, Any]] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.work_order.found

    def to_dict(self) -> dict[str, Any]:
        return {
            "directoryName": self.dir_name,
            "found": self.work_order.found,
            "workOrder": dict(self.work_order.fields),
            "deposits": [dict(d) for d in self.deposits],
            "images": {
                stage: [img.to_dict() for img in imgs]
                for stage, imgs in self.images.items()
            },
        }


@dataclass(frozen=True)
class JobEvent:
    """Emitted by the repository after a successful write.

    Attributes:
        kind: Event kind, e.g. ``"cemetery_submission"``.
        key: Identity of the job that was written.
        subject: Human-readable subject line for notifications.
    """

    kind: str
    key: JobKey
    subject: str
