"""engrave jobs CLI commands.

Commands:
  engrave jobs list [--name FRAGMENT]   — fuzzy search by headstone name
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from engrave.cli.common import open_repository

console = Console()

jobs_app = typer.Typer(
    name="jobs",
    help="Find jobs in the uploads tree.",
    add_completion=False,
)


@jobs_app.command("list")
def jobs_list_cmd(
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Part of the headstone name (case-insensitive)."),
    ] = None,
    uploads_root: Annotated[
        Path | None,
        typer.Option("--uploads-root", help="Override store.uploads_root."),
    ] = None,
) -> None:
    """List jobs, optionally filtered by a headstone name fragment."""
    with open_repository(uploads_root) as repo:
        keys = repo.list_jobs_by_name(name) if name is not None else repo.list_jobs()

    if not keys:
        console.print("[yellow]No matching jobs found.[/]")
        raise typer.Exit(0)

    table = Table(title="Jobs", show_header=True, header_style="bold")
    table.add_column("Headstone name", style="bold")
    table.add_column("Invoice")
    for key in keys:
        table.add_row(key.headstone_name, key.invoice_no)
    console.print(table)
    console.print(f"\n  {len(keys)} job(s)")
