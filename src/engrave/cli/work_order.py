"""engrave work-order CLI commands.

Commands:
  engrave work-order save   — store a work-order image version + overwrite its fields
  engrave work-order show   — consolidated job view (fields + every stage's images)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from engrave.cli.common import open_repository, parse_fields, read_upload
from engrave.cli.errors import warn_work_order_missing
from engrave.store import JobView

console = Console()

work_order_app = typer.Typer(
    name="work-order",
    help="Save and inspect work orders.",
    add_completion=False,
)


@work_order_app.command("save")
def work_order_save_cmd(
    name: Annotated[str, typer.Option("--name", "-n", help="Headstone name.")],
    invoice: Annotated[str, typer.Option("--invoice", "-i", help="Invoice number, e.g. INV-1042.")],
    image: Annotated[Path, typer.Option("--image", help="Rendered work-order image.")],
    field: Annotated[
        list[str] | None,
        typer.Option("--field", "-f", help="Work-order form field KEY=VALUE (repeatable)."),
    ] = None,
    uploads_root: Annotated[
        Path | None,
        typer.Option("--uploads-root", help="Override store.uploads_root."),
    ] = None,
) -> None:
    """Store a new work-order image and replace the work-order fields."""
    upload = read_upload(image)
    fields = parse_fields(field)

    with open_repository(uploads_root) as repo:
        file_name = repo.save_work_order(name, invoice, upload, fields)

    console.print(f"[green]✓[/] Saved {file_name} for {name} ({invoice})")
    console.print(f"  {len(fields)} field(s) written")


@work_order_app.command("show")
def work_order_show_cmd(
    invoice: Annotated[str, typer.Argument(help="Invoice number, e.g. INV-1042.")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the consolidated view with inline images."),
    ] = False,
    uploads_root: Annotated[
        Path | None,
        typer.Option("--uploads-root", help="Override store.uploads_root."),
    ] = None,
) -> None:
    """Show a job's work order and the images of every stage."""
    with open_repository(uploads_root) as repo:
        view = repo.get_work_order(invoice)

    if as_json:
        typer.echo(json.dumps(view.to_dict(), indent=2, ensure_ascii=False))
        return

    if not view.found:
        console.print(warn_work_order_missing(invoice))

    _show_fields(view)
    _show_deposits(view)
    _show_images(view)


def _show_fields(view: JobView) -> None:
    table = Table(title=view.dir_name, show_header=True, header_style="bold")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in view.work_order.fields.items():
        table.add_row(str(key), str(value))
    console.print(table)


def _show_deposits(view: JobView) -> None:
    if not view.deposits:
        console.print("[dim]No deposits recorded.[/]")
        return
    console.print(f"\n  Deposits ({len(view.deposits)}):")
    for record in view.deposits:
        console.print(f"    {record.get('date', '?')}  {record.get('depositAmount', '')}")


def _show_images(view: JobView) -> None:
    lines: list[str] = []
    for stage, images in view.images.items():
        if images:
            names = ", ".join(img.file_name for img in images)
            lines.append(f"{stage}: [bold]{len(images)}[/]  [dim]{names}[/]")
        else:
            lines.append(f"{stage}: [dim]none[/]")
    console.print(Panel("\n".join(lines), title="[bold]Stage images[/]", expand=False))
