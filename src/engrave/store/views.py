"""View Assembler: the consolidated read-side view of a job.

Work-order metadata (or its fallback) is merged with a scatter-gather scan of
the six stage-image directories. Each sub-scan runs in its own worker; all are
joined before the view is returned. One failing scan fails the whole view,
and an optional deadline turns a stalled disk into ScanTimeout.
"""

from __future__ import annotations

import base64
import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path

from engrave.store.errors import IOFailure, ScanTimeout
from engrave.store.layout import IMAGE_STAGES, Stage, stage_path
from engrave.store.metadata import read_deposits, read_work_order_or_fallback
from engrave.store.models import JobView, StageImage

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_TYPE = "jpeg"

_IMAGE_TYPES: dict[str, str] = {
    "jpg": "jpeg",
    "jpeg": "jpeg",
    "png": "png",
    "gif": "gif",
}


def guess_image_type(file_name: str) -> str:
    """Image subtype for a data URI, from the file extension (default jpeg)."""
    ext = Path(file_name).suffix.lstrip(".").lower()
    return _IMAGE_TYPES.get(ext, DEFAULT_IMAGE_TYPE)


def encode_image(path: Path) -> StageImage:
    """Read *path* and inline it as ``data:image/<type>;base64,<payload>``."""
    try:
        payload = base64.b64encode(path.read_bytes()).decode("ascii")
    except OSError as exc:
        logger.error("Cannot read image %s: %s", path, exc)
        raise IOFailure(path, "read") from exc
    return StageImage(
        file_name=path.name,
        inline_data=f"data:image/{guess_image_type(path.name)};base64,{payload}",
    )


def scan_stage_images(directory: Path) -> list[StageImage]:
    """Inline every file in *directory*, in directory-listing order.

    A missing directory yields an empty list.
    """
    if not directory.is_dir():
        return []
    try:
        entries = [p for p in directory.iterdir() if p.is_file()]
    except OSError as exc:
        logger.error("Cannot list %s: %s", directory, exc)
        raise IOFailure(directory, "list") from exc
    return [encode_image(p) for p in entries]


def build_job_view(
    job_dir: Path,
    *,
    max_workers: int = len(IMAGE_STAGES),
    timeout: float | None = None,
) -> JobView:
    """Assemble the consolidated view of the job stored at *job_dir*.

    Args:
        job_dir: Absolute job directory.
        max_workers: Worker threads for the stage scans.
        timeout: Seconds to wait for all scans; None waits indefinitely.

    Returns:
        JobView keyed by stage directory name. When the work order has not
        been created yet, ``view.found`` is False and the fallback fields
        are returned. The order-level deposits are carried along.

    Raises:
        IOFailure: If any stage scan fails.
        ScanTimeout: If the scans do not finish within *timeout*.
    """
    work_order = read_work_order_or_fallback(job_dir)
    deposits = read_deposits(job_dir)

    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="stage-scan")
    try:
        futures: dict[Stage, Future[list[StageImage]]] = {
            stage: executor.submit(scan_stage_images, stage_path(job_dir, stage))
            for stage in IMAGE_STAGES
        }
        done, pending = wait(futures.values(), timeout=timeout, return_when=FIRST_EXCEPTION)

        for future in done:
            exc = future.exception()
            if exc is not None:
                for other in pending:
                    other.cancel()
                raise exc

        if pending:
            for other in pending:
                other.cancel()
            logger.error("Stage scans for %s exceeded %ss", job_dir, timeout)
            raise ScanTimeout(job_dir, timeout or 0.0)

        images = {stage.value: futures[stage].result() for stage in IMAGE_STAGES}
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return JobView(
        dir_name=job_dir.name,
        work_order=work_order,
        images=images,
        deposits=deposits,
    )
