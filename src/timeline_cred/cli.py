"""
Typer-powered CLI for computing timeline cred and inspecting stored results.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import address as addr
from .config import settings
from .errors import TimelineCredError
from .storage import load_timeline_cred, load_weighted_graph, save_timeline_cred
from .timeline import TimelineCred, compute_timeline_cred

DAY_MS = 24 * 60 * 60 * 1000

app = typer.Typer(add_completion=False, help="Timeline cred CLI")
err_console = Console(stderr=True)


def _die(message: str) -> None:
    err_console.print(f"fatal: {message}", markup=False)
    raise typer.Exit(code=1)


def _load(path: Path) -> TimelineCred:
    try:
        return load_timeline_cred(path)
    except FileNotFoundError:
        _die(f"no result at {path}; run `timeline-cred compute` first")
    except (TimelineCredError, OSError, ValueError) as exc:
        _die(str(exc))


def _ranking_table(cred: TimelineCred, prefix: str, limit: int) -> Table:
    table = Table("Rank", "Node", "Total", "Last")
    for idx, (address, total) in enumerate(cred.ranking(addr.parse(prefix), limit), start=1):
        series = cred.cred_series(address)
        last = series[-1] if series else 0.0
        table.add_row(str(idx), addr.to_string(address), f"{total:.4f}", f"{last:.4f}")
    return table


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.command()
def compute(
    graph_file: Path = typer.Argument(..., help="Weighted graph JSON document"),
    out: Optional[Path] = typer.Option(None, help="Where to write the result"),
    alpha: Optional[float] = typer.Option(None, help="Teleport probability [default: from settings]"),
    decay: Optional[float] = typer.Option(None, help="Decay constant per elapsed interval [default: from settings]"),
    interval_days: Optional[float] = typer.Option(None, help="Interval length in days [default: from settings]"),
    max_iterations: Optional[int] = typer.Option(None, help="Iteration cap per interval [default: from settings]"),
    unscoped: bool = typer.Option(False, help="Ignore time and compute terminal cred"),
    workers: int = typer.Option(1, help="Intervals solved concurrently"),
    top_k: int = typer.Option(settings.top_k, help="Rows to print"),
):
    """
    Compute timeline cred for a weighted graph and store the result.
    """
    if not graph_file.exists():
        _die(f"graph file not found: {graph_file}")
    overrides = {
        "alpha": alpha,
        "decay_constant": decay,
        "interval_length_ms": None if interval_days is None else int(interval_days * DAY_MS),
        "max_iterations": max_iterations,
        "mode": "unscoped" if unscoped else None,
    }
    params = {k: v for k, v in overrides.items() if v is not None}
    try:
        graph = load_weighted_graph(graph_file)
        cred = compute_timeline_cred(graph, params, max_workers=workers)
    except (TimelineCredError, ValueError) as exc:
        _die(str(exc))
    try:
        path = save_timeline_cred(cred, out)
    except OSError as exc:
        _die(f"could not write result: {exc}")
    print(f"[green]Saved cred for {len(cred.addresses())} nodes over {len(cred.intervals)} intervals to {path}[/green]")
    if not cred.converged:
        print("[yellow]Some intervals did not converge; consider raising --max-iterations[/yellow]")
    print(_ranking_table(cred, "", top_k))


@app.command()
def output(path: Path = typer.Argument(settings.output_path, help="Stored result")):
    """
    Print the stored result as stable, indented JSON.
    """
    if not path.exists():
        _die(f"no result at {path}; run `timeline-cred compute` first")
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _die(f"could not read {path}: {exc}")
    typer.echo(json.dumps(document, indent=2, sort_keys=True))


@app.command()
def top(
    path: Path = typer.Argument(settings.output_path, help="Stored result"),
    prefix: str = typer.Option("", help="Only nodes under this address prefix, e.g. github/user"),
    limit: int = typer.Option(settings.top_k),
):
    """
    Rank nodes by total cred.
    """
    print(_ranking_table(_load(path), prefix, limit))


@app.command()
def series(
    address: str = typer.Argument(..., help="Node address, e.g. github/user/alice"),
    path: Path = typer.Argument(settings.output_path, help="Stored result"),
):
    """
    Show one node's cred per interval.
    """
    cred = _load(path)
    try:
        scores = cred.cred_series(addr.parse(address))
    except TimelineCredError as exc:
        _die(str(exc))
    table = Table("Interval start", "Cred")
    for interval, score in zip(cred.intervals, scores):
        start = datetime.fromtimestamp(interval.start_time_ms / 1000, tz=timezone.utc)
        table.add_row(start.strftime("%Y-%m-%d"), f"{score:.4f}")
    print(table)


if __name__ == "__main__":
    app()
