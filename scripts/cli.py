from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

# If not installed in editable mode, add repo root to PYTHONPATH
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from pcfi.config import get_settings
from pcfi.ingest.pipeline import load_graph_with_stats
from pcfi.report.text_report import build_report, render_report

app = typer.Typer(add_completion=False, help="Finnish postal codes from PCF/BAF files")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _resolve_dir(directory: Path | None) -> Path:
    """Precedence: CLI arg > env (PCFI_DATA) > repo default."""
    effective = directory or get_settings().data_dir
    if not effective.is_dir():
        typer.secho(f"No data directory at {effective}", fg="red")
        raise typer.Exit(1)
    return effective


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    _setup_logging(verbose)


@app.command()
def report(
    directory: Path = typer.Argument(
        None, help="Directory with PCF_*.dat / BAF_*.dat; defaults to PCFI_DATA"
    ),
    include_special: bool = typer.Option(
        False,
        "--include-special",
        help="Include PO box, corporate and other special postal codes",
    ),
    out: Path = typer.Option(None, "--out", help="Write the report to a file"),
):
    """
    Print regions, their municipalities and the postal codes of each
    municipality.
    """
    graph, _ = load_graph_with_stats(_resolve_dir(directory))
    if graph.is_empty():
        typer.secho("No postal code data found", fg="yellow")
        raise typer.Exit(1)
    text = render_report(build_report(graph, include_special=include_special))
    if out is None:
        sys.stdout.write(text)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    print(f"[green]✓[/green] report → {out}")


@app.command()
def stats(
    directory: Path = typer.Argument(
        None, help="Directory with PCF_*.dat / BAF_*.dat; defaults to PCFI_DATA"
    ),
):
    """Entity counts and per-file ingestion statistics."""
    graph, file_stats = load_graph_with_stats(_resolve_dir(directory))

    table = Table(title="Files")
    table.add_column("file")
    table.add_column("lines", justify="right")
    table.add_column("records", justify="right")
    table.add_column("skipped", justify="right")
    for s in file_stats:
        name = s.path.name if s.path is not None else "-"
        table.add_row(name, str(s.lines_read), str(s.records), str(s.skipped))
    print(table)

    ranges = sum(
        len(v)
        for pc in graph.postal_codes.values()
        for v in pc.street_addresses_by_municipality.values()
    )
    no_region = sum(1 for m in graph.municipalities.values() if m.region is None)
    print(f"regions:            {len(graph.regions)}")
    print(f"municipalities:     {len(graph.municipalities)} ({no_region} without region)")
    print(f"postal codes:       {len(graph.postal_codes)}")
    print(f"address ranges:     {ranges}")


if __name__ == "__main__":
    app()
