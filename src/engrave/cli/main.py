"""Engrave CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer
from rich.console import Console

from engrave.auth import AuthenticationError, check_password
from engrave.cli.common import load_cfg, setup_logging
from engrave.cli.errors import err_incorrect_password, err_no_passwords, err_validation
from engrave.cli.init import init_cmd
from engrave.cli.invoice import invoice_app
from engrave.cli.jobs import jobs_app
from engrave.cli.submit import submit_app
from engrave.cli.work_order import work_order_app
from engrave.store import ValidationError

console = Console()


def _installed_version() -> str:
    try:
        return importlib.metadata.version("engrave")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"engrave {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="engrave",
    help=(
        "Engrave — monument job records.\n\n"
        "  engrave invoice save     Store an invoice PDF and deposit.\n"
        "  engrave submit <stage>   Replace a production stage's images.\n"
        "  engrave work-order show  Consolidated job view."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """Engrave — monument job records."""
    setup_logging(verbose)


app.command("init")(init_cmd)
app.add_typer(invoice_app, name="invoice")
app.add_typer(submit_app, name="submit")
app.add_typer(work_order_app, name="work-order")
app.add_typer(jobs_app, name="jobs")


@app.command("login")
def login_cmd(
    password: Annotated[
        str,
        typer.Option("--password", "-p", prompt=True, hide_input=True, help="Operator password."),
    ],
) -> None:
    """Check an operator password against ENGRAVE_PASSWORDS."""
    cfg = load_cfg(None)
    if not cfg.passwords:
        console.print(err_no_passwords())
        raise typer.Exit(1)
    try:
        check_password(password, cfg.passwords)
    except ValidationError as exc:
        console.print(err_validation(exc.field, str(exc)))
        raise typer.Exit(1)
    except AuthenticationError:
        console.print(err_incorrect_password())
        raise typer.Exit(1)
    console.print("[green]✓[/] Authentication successful")


@app.command("version")
def version_cmd() -> None:
    """Show the installed Engrave version."""
    typer.echo(f"engrave {_installed_version()}")


if __name__ == "__main__":
    app()
