import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from image_codemod.core.batch import run_batch
from image_codemod.core.config import CODEMODS, DEFAULT_EXTENSIONS, get_log_level, get_max_workers
from image_codemod.models import BatchSummary, FileStatus

app = typer.Typer(
    name="image-codemod",
    help="Image codemod CLI: migrate gatsby-image usage and queries to gatsby-plugin-image.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level="INFO" if verbose else get_log_level(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]]) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(str(v) for v in row))
    console.print(table)


def _report(summary: BatchSummary) -> None:
    if summary.notices:
        console.print("[yellow]Review manually:[/yellow]")
        _render_table(
            ["file", "line", "kind", "message"],
            [(n.path, n.line, n.kind.value, n.message) for n in summary.notices],
        )
    if summary.failed:
        console.print("[red]Failed:[/red]")
        _render_table(["file", "error"], [(r.path, r.error) for r in summary.failed])

    verb = "Would rewrite" if summary.dry_run else "Rewrote"
    console.print(
        f"[green]{verb}[/green] {summary.count(FileStatus.CHANGED)} file(s), "
        f"{summary.count(FileStatus.UNCHANGED)} unchanged, "
        f"{summary.count(FileStatus.FAILED)} failed"
    )


@app.command()
def run(
    codemod: Annotated[str | None, typer.Argument(help=f"Codemod to run ({', '.join(CODEMODS)}).")] = None,
    target: Annotated[str | None, typer.Argument(help="Directory or file to transform.")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Report changes without writing files.")] = False,
    workers: Annotated[int | None, typer.Option(help="Worker threads (default: IMAGE_CODEMOD_WORKERS).")] = None,
    extensions: Annotated[str, typer.Option(help="Comma separated file extensions.")] = ",".join(DEFAULT_EXTENSIONS),
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every rewritten file.")] = False,
) -> None:
    """Run a codemod against every source file under TARGET."""
    _configure_logging(verbose)

    if not codemod:
        console.print("Be sure to pass in the name of the codemod you're attempting to run.")
        return
    if codemod not in CODEMODS:
        console.print(f"Invalid codemod name: {codemod}. Valid codemods: {', '.join(CODEMODS)}.")
        return
    if not target:
        console.print("No target directory provided, defaulting to the current directory.")
        target = "."

    try:
        summary = run_batch(
            Path(target),
            dry_run=dry_run,
            max_workers=workers or get_max_workers(),
            extensions=extensions.split(","),
        )
    except (OSError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from None

    _report(summary)
    if summary.failed:
        raise typer.Exit(code=1)


def main() -> None:
    app()
