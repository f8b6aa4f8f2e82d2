"""engrave init — scaffold a workshop directory.

Creates:
  engrave.yaml   — project config (store / view / notifications)
  uploads/       — empty uploads root (or store.uploads_root from engrave.yaml)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from engrave.cli.errors import err_config
from engrave.config import ConfigError, ensure_project_config, load_config
from engrave.store import JobStore, WriteFailure

console = Console()

_DEFAULT_PROJECT_DIR = Path(".")


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = _DEFAULT_PROJECT_DIR,
) -> None:
    """Create engrave.yaml and the uploads root."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    config_path = project_dir / "engrave.yaml"
    existed = config_path.exists()
    ensure_project_config(project_dir)

    try:
        cfg = load_config(project_dir)
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    try:
        with JobStore(cfg.store.uploads_root) as store:
            root = store.root
    except WriteFailure as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)

    if existed:
        console.print(f"[dim]Kept existing {config_path}[/]")
    else:
        console.print(f"[green]✓[/] Created {config_path}")
    console.print(f"[green]✓[/] Uploads root: {root}")
