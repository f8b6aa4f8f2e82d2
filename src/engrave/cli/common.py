"""Shared plumbing for engrave commands: config, store handle, inputs, errors."""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from engrave.cli.errors import (
    err_bad_field,
    err_config,
    err_document_not_found,
    err_file_not_found,
    err_io_failure,
    err_job_not_found,
    err_scan_timeout,
    err_validation,
)
from engrave.config import ConfigError, EngraveConfig, load_config
from engrave.notify import LogMailer, Notifier
from engrave.store import (
    DocumentNotFound,
    IOFailure,
    JobNotFound,
    JobRepository,
    JobStore,
    ScanTimeout,
    UploadedFile,
    ValidationError,
)

console = Console()


def setup_logging(verbose: bool) -> None:
    """Route engrave's loggers through rich (DEBUG with --verbose, else WARNING)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_cfg(uploads_root: Path | None) -> EngraveConfig:
    """Load config and apply the --uploads-root flag on top."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)
    if uploads_root is not None:
        cfg.store.uploads_root = str(uploads_root)
    return cfg


@contextmanager
def open_repository(uploads_root: Path | None) -> Iterator[JobRepository]:
    """Open the store, wire notifications, and map store errors to exit codes.

    Lookups that find nothing print a notice and exit 0; validation and IO
    errors exit 1.
    """
    cfg = load_cfg(uploads_root)
    notifier = Notifier(cfg.notifications, LogMailer())
    try:
        with JobStore(cfg.store.uploads_root) as store:
            yield JobRepository(
                store,
                sinks=[notifier],
                scan_timeout=cfg.view.scan_timeout,
                max_workers=cfg.view.max_workers,
            )
    except ValidationError as exc:
        console.print(err_validation(exc.field, str(exc)))
        raise typer.Exit(1)
    except JobNotFound as exc:
        console.print(err_job_not_found(exc.query))
        raise typer.Exit(0)
    except DocumentNotFound as exc:
        console.print(err_document_not_found(str(exc.path)))
        raise typer.Exit(0)
    except ScanTimeout as exc:
        console.print(err_scan_timeout(exc.timeout))
        raise typer.Exit(1)
    except IOFailure as exc:
        console.print(err_io_failure(str(exc)))
        raise typer.Exit(1)
    finally:
        notifier.close()


def read_upload(path: Path) -> UploadedFile:
    """Read a file from disk as an UploadedFile, MIME type guessed from its name."""
    if not path.is_file():
        console.print(err_file_not_found(str(path)))
        raise typer.Exit(1)
    mime_type, _ = mimetypes.guess_type(path.name)
    return UploadedFile(
        content=path.read_bytes(),
        mime_type=mime_type or "application/octet-stream",
        original_name=path.name,
    )


def parse_fields(raw_fields: list[str] | None) -> dict[str, str]:
    """Turn repeated ``--field KEY=VALUE`` options into a dict."""
    fields: dict[str, str] = {}
    for raw in raw_fields or []:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            console.print(err_bad_field(raw))
            raise typer.Exit(1)
        fields[key.strip()] = value
    return fields
