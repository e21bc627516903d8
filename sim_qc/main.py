"""Main orchestration for QC metric runs.

Opens the .sim file, runs the requested metrics one after another on the
same reader, and writes each result set once every metric has completed.
"""

import logging
from collections.abc import Callable

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from sim_qc.config import Config
from sim_qc.metrics.adapter import check_dataset
from sim_qc.metrics.magnitude import MagnitudeEngine
from sim_qc.metrics.progress import DEFAULT_PROGRESS_INTERVAL
from sim_qc.metrics.xydiff import XydiffEngine, check_two_channels
from sim_qc.models import MetricResults
from sim_qc.parsers.sim import SimReader
from sim_qc.writers.results import write_all_results

console = Console()
logger = logging.getLogger(__name__)


def compute_magnitude(
    reader: SimReader,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    on_record: Callable[[], None] | None = None,
) -> MetricResults:
    """Normalized magnitude for every sample (two passes over the reader)."""
    reader.reset()
    engine = MagnitudeEngine(reader, progress_interval=progress_interval, on_record=on_record)
    return engine.run()


def compute_xydiff(
    reader: SimReader,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    on_record: Callable[[], None] | None = None,
) -> MetricResults:
    """XY intensity difference for every sample (one pass over the reader)."""
    reader.reset()
    engine = XydiffEngine(reader, progress_interval=progress_interval, on_record=on_record)
    return engine.run()


def run_qc(config: Config) -> dict[str, MetricResults]:
    """Compute the metrics requested in ``config`` and write them.

    Preconditions for every requested metric are checked before any
    record is read, and no output file is opened until all metrics have
    been computed, so a failed run leaves no partial output.

    Args:
        config: Run configuration

    Returns:
        Results keyed by metric name ("magnitude", "xydiff")

    Raises:
        SimQCError: On format, precondition or data errors
        FileNotFoundError: If the input file does not exist
    """
    outputs = config.outputs
    results: dict[str, MetricResults] = {}

    with SimReader.open(config.sim_file) as reader:
        logger.info("Opened .sim file %s", config.sim_file)
        header = reader.header

        check_dataset(header)
        if "xydiff" in outputs:
            check_two_channels(header)

        console.print(
            f"Reading {config.sim_file.name}: {header.num_samples:,} samples, "
            f"{header.num_probes:,} probes, {header.num_channels} channels "
            f"({header.number_format.name.lower()})\n"
        )

        passes = {"magnitude": 2, "xydiff": 1}
        computations = {"magnitude": compute_magnitude, "xydiff": compute_xydiff}

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            for metric in outputs:
                task = progress.add_task(
                    f"Computing {metric}...",
                    total=passes[metric] * header.num_samples,
                )
                results[metric] = computations[metric](
                    reader,
                    progress_interval=config.progress_interval,
                    on_record=lambda task=task: progress.advance(task),
                )

    for path in write_all_results(results, outputs):
        logger.info("Wrote results to %s", path)

    return results
