"""Engrave rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from engrave.cli.errors import err_job_not_found
    console.print(err_job_not_found("INV-1042"))
    raise typer.Exit(0)
"""

from __future__ import annotations

from engrave.config import ENV_PASSWORDS


def err_validation(field: str, message: str) -> str:
    """A required input is missing or invalid."""
    return (
        f"[red]Error:[/] {message}\n"
        f"  Check the value passed for '{field}' and try again."
    )


def err_job_not_found(invoice_no: str) -> str:
    """No job directory carries *invoice_no*."""
    return (
        f"[yellow]Job not found:[/] no job carries invoice '{invoice_no}'.\n"
        "  Run:  engrave jobs list --name <part of the headstone name>"
    )


def err_document_not_found(path: str) -> str:
    """The job exists but its order data.json does not."""
    return (
        f"[yellow]No order data:[/] '{path}' does not exist.\n"
        "  Save the invoice first:  engrave invoice save --name ... --invoice ... --pdf ..."
    )


def err_io_failure(message: str) -> str:
    """Filesystem error while reading or writing the uploads tree."""
    return (
        f"[red]Error:[/] {message}\n"
        "  Check free disk space and permissions on the uploads directory."
    )


def err_scan_timeout(timeout: float) -> str:
    """Stage-image scans did not finish in time."""
    return (
        f"[red]Error:[/] Reading the job's images took longer than {timeout:g}s.\n"
        "  Raise view.scan_timeout in engrave.yaml or check the disk."
    )


def err_file_not_found(path: str) -> str:
    """An input file given on the command line does not exist."""
    return (
        f"[red]Error:[/] File not found: '{path}'\n"
        "  Pass an existing file path."
    )


def err_bad_field(raw: str) -> str:
    """A --field value is not in KEY=VALUE form."""
    return (
        f"[red]Error:[/] Invalid --field '{raw}'.\n"
        "  Use the form:  --field customerName='Jane Smith'"
    )


def err_config(message: str) -> str:
    """Config file could not be loaded."""
    return f"[red]Error:[/] {message}"


def err_no_passwords() -> str:
    """No operator passwords configured."""
    return (
        "[red]Error:[/] No operator passwords configured.\n"
        f"  Set:  export {ENV_PASSWORDS}=<password>[,<password>...]"
    )


def err_incorrect_password() -> str:
    return (
        "[red]Error:[/] Incorrect password.\n"
        f"  Ask the workshop admin for a password listed in {ENV_PASSWORDS}."
    )


def warn_work_order_missing(invoice_no: str) -> str:
    """Work order not created yet — the fallback view is shown."""
    return (
        f"[yellow]⚠[/] No work order saved for '{invoice_no}' yet; showing order details.\n"
        f"  Run:  engrave work-order save --invoice {invoice_no} ..."
    )
