"""CLI entry point for the pdflow batch driver.

Usage:
    pdflow run --idir rgb/ --zdir depth/ --no-show     # Process a frame sequence
    pdflow run --i1 a.png --i2 b.png --z1 za.png --z2 zb.png
    pdflow info --idir rgb/ --zdir depth/              # Show the discovered batch
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pdflow.core.logging import setup_logging

app = typer.Typer(name="pdflow", help="Batch scene flow for RGB-D frame sequences")
console = Console()

# Frame tokens (--rows, --i1, ..., --help) are resolved by pdflow itself, not by click
TOKEN_CONTEXT = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "help_option_names": [],
}


def _resolve(tokens: list[str], config: Path | None):
    """Resolve tokens or exit 1 after printing usage."""
    from pdflow.core.config_resolver import USAGE, load_configuration, resolve_configuration
    from pdflow.core.errors import HelpRequested, InvalidArgument

    try:
        base = load_configuration(config) if config is not None else None
        return resolve_configuration(tokens, base=base)
    except HelpRequested:
        pass
    except InvalidArgument as e:
        console.print(f"[red]Invalid argument:[/red] {escape(str(e))}")
    console.print(USAGE, markup=False, highlight=False)
    raise typer.Exit(1)


@app.command(context_settings=TOKEN_CONTEXT)
def run(
    ctx: typer.Context,
    config: Path = typer.Option(None, "--config", help="YAML file with base run configuration"),
    engine_config: Path = typer.Option(None, "--engine-config", help="YAML engine config"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Run scene flow over an explicit pair or a pair of frame directories."""
    setup_logging(log_level)
    from pdflow.core.errors import (
        EngineInitFailure,
        InsufficientFrames,
        InvalidFramePair,
        ProcessingFailure,
    )
    from pdflow.core.pipeline_runner import run_pipeline

    cfg = _resolve(list(ctx.args), config)

    try:
        report = run_pipeline(cfg, engine_config_path=engine_config)
    except (InsufficientFrames, InvalidFramePair, EngineInitFailure) as e:
        console.print(f"[red]{type(e).__name__}:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except ProcessingFailure as e:
        # Session already released; an aborted batch is still a completed run
        console.print(f"[yellow]{type(e).__name__}:[/yellow] {escape(str(e))}")
        if e.report is not None:
            _print_report(e.report)
        return
    except OSError as e:
        # results could not be written; the session is released by now
        console.print(f"[red]Output error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _print_report(report)


@app.command(context_settings=TOKEN_CONTEXT)
def info(
    ctx: typer.Context,
    config: Path = typer.Option(None, "--config", help="YAML file with base run configuration"),
) -> None:
    """Show the batch sequence that `run` would process, without acquiring the engine."""
    from pdflow.core.enumerator import enumerate_frames
    from pdflow.core.errors import InsufficientFrames, InvalidFramePair

    cfg = _resolve(list(ctx.args), config)
    try:
        batch = enumerate_frames(cfg)
    except (InsufficientFrames, InvalidFramePair) as e:
        console.print(f"[red]{type(e).__name__}:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(
        title=f"Batch ({batch.source}): {batch.num_transitions} transitions at {cfg.rows} rows",
        caption=f"{batch.intensity[0].parent} | {batch.depth[0].parent}",
    )
    table.add_column("#", style="dim")
    table.add_column("Intensity", style="cyan")
    table.add_column("Depth", style="green")
    for pair in batch.pairs():
        table.add_row(str(pair.index), pair.intensity.name, pair.depth.name)
    console.print(table)


def _print_report(report) -> None:
    table = Table(title=f"Run: {report.transitions}/{report.total_transitions} transitions")
    table.add_column("#", style="dim")
    table.add_column("Intensity", style="cyan")
    table.add_column("Status", style="yellow")
    table.add_column("Time (s)", justify="right")
    table.add_column("Outputs", style="green")

    for outcome in report.outcomes:
        table.add_row(
            str(outcome.index),
            outcome.intensity.name,
            outcome.status.value,
            f"{outcome.elapsed_seconds:.2f}",
            ", ".join(p.name for p in outcome.outputs) or "-",
        )
    console.print(table)


if __name__ == "__main__":
    app()
