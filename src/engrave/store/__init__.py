"""Engrave job-record store."""

from engrave.store.connection import JobStore
from engrave.store.errors import (
    DocumentNotFound,
    IOFailure,
    JobNotFound,
    JobStoreError,
    MalformedDirectoryName,
    NotFound,
    ScanTimeout,
    ValidationError,
    WriteFailure,
)
from engrave.store.identity import JobKey, compose_directory_name, parse_directory_name
from engrave.store.layout import Stage
from engrave.store.models import JobEvent, JobView, UploadedFile, WorkOrderView
from engrave.store.repository import JobRepository

__all__ = [
    "JobStore",
    "JobRepository",
    "JobKey",
    "Stage",
    "compose_directory_name",
    "parse_directory_name",
    "JobEvent",
    "JobView",
    "UploadedFile",
    "WorkOrderView",
    "JobStoreError",
    "ValidationError",
    "NotFound",
    "JobNotFound",
    "DocumentNotFound",
    "MalformedDirectoryName",
    "IOFailure",
    "WriteFailure",
    "ScanTimeout",
]
