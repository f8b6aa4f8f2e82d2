"""engrave invoice CLI commands.

Commands:
  engrave invoice save   — store a new invoice PDF version (+ deposit)
  engrave invoice show   — print the order document of a job
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from engrave.cli.common import open_repository, parse_fields, read_upload

console = Console()

invoice_app = typer.Typer(
    name="invoice",
    help="Save and inspect invoices.",
    add_completion=False,
)


@invoice_app.command("save")
def invoice_save_cmd(
    name: Annotated[str, typer.Option("--name", "-n", help="Headstone name.")],
    invoice: Annotated[str, typer.Option("--invoice", "-i", help="Invoice number, e.g. INV-1042.")],
    pdf: Annotated[Path, typer.Option("--pdf", help="Invoice PDF to store.")],
    deposit: Annotated[
        str | None,
        typer.Option("--deposit", "-d", help="Deposit amount to record."),
    ] = None,
    field: Annotated[
        list[str] | None,
        typer.Option("--field", "-f", help="Invoice form field KEY=VALUE (repeatable)."),
    ] = None,
    uploads_root: Annotated[
        Path | None,
        typer.Option("--uploads-root", help="Override store.uploads_root."),
    ] = None,
) -> None:
    """Store a new invoice PDF version and merge the order data."""
    upload = read_upload(pdf)
    fields = parse_fields(field)

    with open_repository(uploads_root) as repo:
        file_name = repo.save_invoice(name, invoice, upload, deposit=deposit, form_fields=fields)

    console.print(f"[green]✓[/] Saved {file_name} for {name} ({invoice})")
    if deposit:
        console.print(f"  Deposit recorded: {deposit}")


@invoice_app.command("show")
def invoice_show_cmd(
    invoice: Annotated[str, typer.Argument(help="Invoice number, e.g. INV-1042.")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the raw order document."),
    ] = False,
    uploads_root: Annotated[
        Path | None,
        typer.Option("--uploads-root", help="Override store.uploads_root."),
    ] = None,
) -> None:
    """Show the order data and deposits of a job."""
    with open_repository(uploads_root) as repo:
        doc = repo.get_invoice(invoice)

    if as_json:
        typer.echo(json.dumps(doc, indent=2, ensure_ascii=False))
        return

    data = doc.get("data") or {}
    table = Table(title=f"Invoice {invoice}", show_header=True, header_style="bold")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(str(key), str(value))
    console.print(table)

    deposits = doc.get("deposits") or []
    if not deposits:
        console.print("[dim]No deposits recorded.[/]")
        return
    console.print(f"\n  Deposits ({len(deposits)}):")
    for record in deposits:
        console.print(f"    {record.get('date', '?')}  {record.get('depositAmount', '')}")
