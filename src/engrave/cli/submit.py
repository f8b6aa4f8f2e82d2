"""engrave submit — stage image submissions.

Each submission replaces the previous images of its stage(s):
  cemetery    → Work_Order/Cemetery_Submission
  art         → Art_Submission/Final_Art  +  Art_Submission/Cemetery_Approval
  engraving   → Work_Order/Engraving_Submission
  foundation  → Work_Order/Foundation_Install  +  Work_Order/Monument_Setting

Usage:
  engrave submit art -n "Jane Smith" -i INV-0007 --final-art-count 2 \\
      --image a.png --image b.png --image approval.jpg
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from engrave.cli.common import open_repository, read_upload

console = Console()

submit_app = typer.Typer(
    name="submit",
    help="Submit stage images (replaces the stage's previous images).",
    add_completion=False,
)

NameOpt = Annotated[str, typer.Option("--name", "-n", help="Headstone name.")]
InvoiceOpt = Annotated[str, typer.Option("--invoice", "-i", help="Invoice number, e.g. INV-1042.")]
ImagesOpt = Annotated[list[Path], typer.Option("--image", help="Image file (repeatable, order kept).")]
UploadsRootOpt = Annotated[
    Path | None,
    typer.Option("--uploads-root", help="Override store.uploads_root."),
]


@submit_app.command("cemetery")
def submit_cemetery_cmd(
    name: NameOpt,
    invoice: InvoiceOpt,
    image: ImagesOpt,
    uploads_root: UploadsRootOpt = None,
) -> None:
    """Replace the cemetery submission images."""
    uploads = [read_upload(p) for p in image]
    with open_repository(uploads_root) as repo:
        written = repo.submit_to_cemetery(name, invoice, uploads)
    _report("Cemetery_Submission", written)


@submit_app.command("art")
def submit_art_cmd(
    name: NameOpt,
    invoice: InvoiceOpt,
    image: ImagesOpt,
    final_art_count: Annotated[
        int,
        typer.Option("--final-art-count", help="How many leading images are final art; the rest are cemetery approval."),
    ],
    uploads_root: UploadsRootOpt = None,
) -> None:
    """Replace the final-art and cemetery-approval images."""
    uploads = [read_upload(p) for p in image]
    with open_repository(uploads_root) as repo:
        written = repo.submit_art(name, invoice, final_art_count, uploads)
    _report("Final_Art", written[:final_art_count])
    _report("Cemetery_Approval", written[final_art_count:])


@submit_app.command("engraving")
def submit_engraving_cmd(
    name: NameOpt,
    invoice: InvoiceOpt,
    image: ImagesOpt,
    uploads_root: UploadsRootOpt = None,
) -> None:
    """Replace the engraving images."""
    uploads = [read_upload(p) for p in image]
    with open_repository(uploads_root) as repo:
        written = repo.submit_engraving(name, invoice, uploads)
    _report("Engraving_Submission", written)


@submit_app.command("foundation")
def submit_foundation_cmd(
    name: NameOpt,
    invoice: InvoiceOpt,
    image: ImagesOpt,
    foundation_count: Annotated[
        int,
        typer.Option("--foundation-count", help="How many leading images are foundation install; the rest are monument setting."),
    ],
    uploads_root: UploadsRootOpt = None,
) -> None:
    """Replace the foundation-install and monument-setting images."""
    uploads = [read_upload(p) for p in image]
    with open_repository(uploads_root) as repo:
        written = repo.submit_foundation(name, invoice, foundation_count, uploads)
    _report("Foundation_Install", written[:foundation_count])
    _report("Monument_Setting", written[foundation_count:])


def _report(stage: str, written: list[str]) -> None:
    console.print(f"[green]✓[/] {stage}: {len(written)} image(s)")
    for file_name in written:
        console.print(f"  [dim]{file_name}[/]")
