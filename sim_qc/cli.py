"""Typer CLI for sim_qc.

Usage:
    # Normalized magnitude and xydiff in one run
    sim-qc qc -i data.sim --magnitude data_magnitude.txt --xydiff data_xydiff.txt

    # Magnitude only, with progress logging
    sim-qc qc -i data.sim.gz --magnitude mag.txt --verbose

    # Inspect header
    sim-qc info -i data.sim
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from sim_qc import __version__
from sim_qc.exceptions import SimQCError
from sim_qc.models import MetricResults

app = typer.Typer(
    name="sim-qc",
    help="Compute per-sample QC metrics from .sim intensity files",
    add_completion=False,
)

console = Console()


def print_summary(results: dict[str, MetricResults], outputs: dict[str, Path]) -> None:
    """Print per-metric sample counts and output paths."""
    table = Table(title="QC metrics")
    table.add_column("Metric")
    table.add_column("Samples", justify="right")
    table.add_column("Non-finite", justify="right")
    table.add_column("Output")
    for metric, metric_results in results.items():
        table.add_row(
            metric,
            f"{len(metric_results):,}",
            f"{metric_results.non_finite_count:,}",
            str(outputs[metric]),
        )
    console.print(table)


@app.command()
def qc(
    infile: Annotated[
        Path,
        typer.Option(
            "--infile", "-i",
            help="Input .sim file (may be gzipped)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    magnitude: Annotated[
        Path | None,
        typer.Option(
            "--magnitude", "-m",
            help="Output path for probe-normalized sample magnitude",
            dir_okay=False,
        ),
    ] = None,
    xydiff: Annotated[
        Path | None,
        typer.Option(
            "--xydiff", "-x",
            help="Output path for XY intensity difference (two-channel data only)",
            dir_okay=False,
        ),
    ] = None,
    progress_interval: Annotated[
        int,
        typer.Option(
            "--progress-interval",
            help="Log progress every N samples when verbose",
            min=1,
        ),
    ] = 1000,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log-dir",
            help="Directory for a detailed rotating log file",
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose", "-v",
            help="Enable verbose logging",
        ),
    ] = False,
) -> None:
    """Compute normalized magnitude and/or xydiff for every sample.

    Each output file has one line per sample, in input order:
    sample name, a tab, and the metric value to six decimal places.
    """
    from sim_qc.config import Config
    from sim_qc.logging_config import setup_logging
    from sim_qc.main import run_qc

    console.print(f"[bold]sim-qc[/bold] v{__version__}\n", style="blue")

    config = Config(
        sim_file=infile,
        magnitude_file=magnitude,
        xydiff_file=xydiff,
        verbose=verbose,
        progress_interval=progress_interval,
        log_dir=log_dir,
    )

    errors = config.validate()
    if errors:
        for error in errors:
            console.print(f"[red]ERROR:[/red] {error}")
        raise typer.Exit(code=1)

    log_file = setup_logging(
        verbose=config.verbose,
        log_dir=config.log_dir,
        job_name=f"sim_qc_{config.file_stem}",
    )
    if log_file:
        console.print(f"Log file: {log_file}")

    try:
        results = run_qc(config)
    except (SimQCError, OSError) as e:
        console.print(f"[red]ERROR:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(code=1)

    print_summary(results, config.outputs)
    console.print("\n[green]QC metrics complete.[/green]\n")


@app.command()
def info(
    infile: Annotated[
        Path,
        typer.Option(
            "--infile", "-i",
            help="Input .sim file (may be gzipped)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
) -> None:
    """Print the header of a .sim file."""
    from sim_qc.parsers.sim import read_header

    try:
        header = read_header(infile)
    except SimQCError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"File:            {infile}")
    console.print(f"Version:         {header.version}")
    console.print(f"Name size:       {header.name_size}")
    console.print(f"Samples:         {header.num_samples}")
    console.print(f"Probes:          {header.num_probes}")
    console.print(f"Channels:        {header.num_channels}")
    console.print(f"Number format:   {header.number_format.value} ({header.number_format.name.lower()})")
    console.print(f"Record size:     {header.record_size} bytes")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
