"""Probe-normalized sample magnitude.

Two passes over the dataset:

1. Mean magnitude of each probe across all samples (the probe baseline).
2. For each sample, the mean over probes of magnitude / baseline.

Dividing by the baseline removes probe-level differences in signal
strength, so the result compares samples rather than probes. The metric
is dimensionless and unchanged by scaling every intensity by a constant.

A probe whose baseline is zero makes every sample's value nan; the
value is reported as is rather than dropping the probe.
"""

import logging
from collections.abc import Callable

import numpy as np

from sim_qc.metrics.adapter import RecordAdapter, check_dataset
from sim_qc.metrics.progress import DEFAULT_PROGRESS_INTERVAL, report_progress
from sim_qc.models import MetricResults
from sim_qc.parsers.sim import SimReader

logger = logging.getLogger(__name__)


class MagnitudeEngine:
    """Computes normalized magnitude for every sample of one reader."""

    def __init__(
        self,
        reader: SimReader,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        on_record: Callable[[], None] | None = None,
    ) -> None:
        """Bind the engine to a reader.

        Args:
            reader: Open .sim reader; the engine rewinds it before each pass
            progress_interval: Log a progress line every this many samples
            on_record: Called once per record read, for progress display

        Raises:
            EmptyDatasetError: If the dataset has no samples or no probes
        """
        check_dataset(reader.header)
        self.reader = reader
        self.adapter = RecordAdapter(reader.header)
        self.progress_interval = progress_interval
        self.on_record = on_record

    def probe_baseline(self) -> np.ndarray:
        """First pass: mean magnitude of each probe across samples.

        Returns:
            Array of length num_probes
        """
        logger.info("Finding mean magnitude by probe")
        totals = np.zeros(self.reader.num_probes, dtype=np.float64)
        for i, record in enumerate(self.reader.iter_records()):
            totals += self.adapter.magnitudes(record)
            report_progress(i, self.reader.num_samples, self.progress_interval, self.on_record)

        baseline = totals / self.reader.num_samples

        zero_probes = int(np.count_nonzero(baseline == 0))
        if zero_probes:
            logger.warning(
                "%d of %d probes have zero mean magnitude; "
                "normalized magnitudes will be nan",
                zero_probes,
                self.reader.num_probes,
            )
        logger.info("Completed mean magnitude by probe")
        return baseline

    def sample_magnitudes(self, baseline: np.ndarray) -> MetricResults:
        """Second pass: mean of magnitude / baseline for each sample.

        Args:
            baseline: Probe baseline from probe_baseline()

        Returns:
            Normalized magnitude per sample, in read order
        """
        logger.info("Finding normalized mean magnitude by sample")
        results = MetricResults(metric="magnitude")
        for i, record in enumerate(self.reader.iter_records()):
            magnitudes = self.adapter.magnitudes(record)
            with np.errstate(divide="ignore", invalid="ignore"):
                value = np.mean(magnitudes / baseline)
            results.add(record.sample_name, value)
            report_progress(i, self.reader.num_samples, self.progress_interval, self.on_record)
        logger.info("Completed mean magnitude by sample")
        return results

    def run(self) -> MetricResults:
        """Run both passes and return per-sample normalized magnitudes."""
        baseline = self.probe_baseline()
        return self.sample_magnitudes(baseline)
