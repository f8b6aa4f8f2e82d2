"""Error taxonomy for the job-record store.

  ValidationError          missing or invalid input, raised before any side effect
  NotFound                 lookup found nothing (JobNotFound / DocumentNotFound)
  MalformedDirectoryName   directory name lacks the INV marker or its suffix
  IOFailure                disk read/write error, fatal for the current request
"""

from __future__ import annotations

from pathlib import Path


class JobStoreError(Exception):
    """Base class for every error raised by engrave.store."""


class ValidationError(JobStoreError, ValueError):
    """A required field is missing or has an unusable value.

    Attributes:
        field: Name of the offending input field.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class NotFound(JobStoreError):
    """Lookup matched nothing. Distinct from a hard failure."""


class JobNotFound(NotFound):
    """No job directory matches the query."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"No job directory matches '{query}'")


class DocumentNotFound(NotFound):
    """A metadata document does not exist on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Metadata document not found: {path}")


class MalformedDirectoryName(JobStoreError, ValueError):
    """A job directory name cannot be parsed into (headstone name, invoice no)."""

    def __init__(self, dir_name: str, reason: str) -> None:
        self.dir_name = dir_name
        self.reason = reason
        super().__init__(f"Malformed job directory name '{dir_name}': {reason}")


class IOFailure(JobStoreError):
    """Filesystem read or write failed. The original OSError is the __cause__."""

    def __init__(self, path: Path, operation: str) -> None:
        self.path = path
        self.operation = operation
        super().__init__(f"Failed to {operation} '{path}'")


class WriteFailure(IOFailure):
    """A write to the uploads tree failed (disk full, permissions, ...)."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, "write")


class ScanTimeout(IOFailure):
    """The stage-image scans of a job view did not finish before the deadline."""

    def __init__(self, path: Path, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(path, f"scan stage images within {timeout:g}s")
