"""Layout Manager: the fixed directory schema of a job.

    <job-dir>/
      invoice_vN.pdf
      data.json
      Work_Order/
        work_order_vN.png
        data.json
        Cemetery_Submission/
        Engraving_Submission/
        Foundation_Install/
        Monument_Setting/
        Art_Submission/
          Final_Art/
          Cemetery_Approval/

Directories are created lazily, stage by stage. Creation is check-then-create
and assumes a single writer.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path

from engrave.store.errors import WriteFailure

logger = logging.getLogger(__name__)

ORDER_DOCUMENT = "data.json"
WORK_ORDER_DIR = "Work_Order"
ART_SUBMISSION_DIR = "Art_Submission"


class Stage(str, enum.Enum):
    """Production stages that own a subtree under the job directory.

    The value is the stage's own directory name (the last path component).
    """

    WORK_ORDER = WORK_ORDER_DIR
    CEMETERY_SUBMISSION = "Cemetery_Submission"
    FINAL_ART = "Final_Art"
    CEMETERY_APPROVAL = "Cemetery_Approval"
    ENGRAVING_SUBMISSION = "Engraving_Submission"
    FOUNDATION_INSTALL = "Foundation_Install"
    MONUMENT_SETTING = "Monument_Setting"


# Path of each stage relative to the job directory.
_STAGE_PATHS: dict[Stage, tuple[str, ...]] = {
    Stage.WORK_ORDER: (WORK_ORDER_DIR,),
    Stage.CEMETERY_SUBMISSION: (WORK_ORDER_DIR, "Cemetery_Submission"),
    Stage.FINAL_ART: (WORK_ORDER_DIR, ART_SUBMISSION_DIR, "Final_Art"),
    Stage.CEMETERY_APPROVAL: (WORK_ORDER_DIR, ART_SUBMISSION_DIR, "Cemetery_Approval"),
    Stage.ENGRAVING_SUBMISSION: (WORK_ORDER_DIR, "Engraving_Submission"),
    Stage.FOUNDATION_INSTALL: (WORK_ORDER_DIR, "Foundation_Install"),
    Stage.MONUMENT_SETTING: (WORK_ORDER_DIR, "Monument_Setting"),
}

# Stages whose directories hold replace-on-submit images, in view order.
IMAGE_STAGES: tuple[Stage, ...] = (
    Stage.CEMETERY_SUBMISSION,
    Stage.FINAL_ART,
    Stage.CEMETERY_APPROVAL,
    Stage.ENGRAVING_SUBMISSION,
    Stage.FOUNDATION_INSTALL,
    Stage.MONUMENT_SETTING,
)


def stage_path(job_dir: Path, stage: Stage) -> Path:
    """Return the absolute directory of *stage* inside *job_dir*."""
    return job_dir.joinpath(*_STAGE_PATHS[stage])


def order_document_path(job_dir: Path) -> Path:
    return job_dir / ORDER_DOCUMENT


def work_order_document_path(job_dir: Path) -> Path:
    return stage_path(job_dir, Stage.WORK_ORDER) / ORDER_DOCUMENT


def ensure_job_root(uploads_root: Path, dir_name: str) -> Path:
    """Create the job directory if absent (non-recursive) and return it.

    Raises:
        WriteFailure: If the directory cannot be created.
    """
    job_dir = uploads_root / dir_name
    if not job_dir.exists():
        try:
            job_dir.mkdir()
        except OSError as exc:
            logger.error("Cannot create job directory %s: %s", job_dir, exc)
            raise WriteFailure(job_dir) from exc
        logger.debug("Created job directory %s", job_dir)
    return job_dir


def ensure_stage_directories(uploads_root: Path, dir_name: str, stage: Stage) -> Path:
    """Create the full path of *stage* for a job (recursive) and return it."""
    path = stage_path(uploads_root / dir_name, stage)
    _mkdirs(path)
    return path


def ensure_full_tree(uploads_root: Path, dir_name: str) -> dict[Stage, Path]:
    """Create every stage directory of a job. Returns {stage: path}."""
    ensure_job_root(uploads_root, dir_name)
    return {
        stage: ensure_stage_directories(uploads_root, dir_name, stage)
        for stage in Stage
    }


def reset_stage_contents(stage_dir: Path) -> int:
    """Empty *stage_dir* before a new submission repopulates it.

    Deletes every regular file directly inside the directory (subdirectories
    are left alone). Creates the directory if it does not exist yet.

    Returns:
        Number of files removed.

    Raises:
        WriteFailure: If a file cannot be removed or the directory created.
    """
    if not stage_dir.exists():
        _mkdirs(stage_dir)
        return 0

    removed = 0
    for entry in stage_dir.iterdir():
        if not entry.is_file():
            continue
        try:
            entry.unlink()
        except OSError as exc:
            logger.error("Cannot remove %s during stage reset: %s", entry, exc)
            raise WriteFailure(entry) from exc
        removed += 1

    if removed:
        logger.info("Reset %s: removed %d file(s)", stage_dir, removed)
    return removed


def _mkdirs(path: Path) -> None:
    if path.exists():
        return
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Cannot create directory %s: %s", path, exc)
        raise WriteFailure(path) from exc
    logger.debug("Created directory %s", path)
