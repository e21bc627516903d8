"""X/Y intensity difference (xydiff).

For each sample, the mean over probes of channel 1 minus channel 0.
Only defined for two-channel datasets.
"""

import logging
from collections.abc import Callable

import numpy as np

from sim_qc.exceptions import ChannelCountError
from sim_qc.metrics.adapter import RecordAdapter, check_dataset
from sim_qc.metrics.progress import DEFAULT_PROGRESS_INTERVAL, report_progress
from sim_qc.models import MetricResults, SimHeader
from sim_qc.parsers.sim import SimReader

logger = logging.getLogger(__name__)


def check_two_channels(header: SimHeader) -> None:
    """Raise ChannelCountError unless the dataset has exactly two channels."""
    if header.num_channels != 2:
        raise ChannelCountError(
            "XY intensity difference is only defined for exactly two intensity "
            f"channels; dataset has {header.num_channels}"
        )


class XydiffEngine:
    """Computes xydiff for every sample of one reader in a single pass."""

    def __init__(
        self,
        reader: SimReader,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        on_record: Callable[[], None] | None = None,
    ) -> None:
        check_two_channels(reader.header)
        check_dataset(reader.header)
        self.reader = reader
        self.adapter = RecordAdapter(reader.header)
        self.progress_interval = progress_interval
        self.on_record = on_record

    def run(self) -> MetricResults:
        """Return mean(channel1 - channel0) per sample, in read order."""
        logger.info("Computing XY intensity difference")
        results = MetricResults(metric="xydiff")
        for i, record in enumerate(self.reader.iter_records()):
            values = self.adapter.intensities(record)
            results.add(record.sample_name, np.mean(values[:, 1] - values[:, 0]))
            report_progress(i, self.reader.num_samples, self.progress_interval, self.on_record)
        logger.info("Finished xydiff")
        return results
