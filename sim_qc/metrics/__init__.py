"""QC metric engines: normalized magnitude and xydiff."""

from sim_qc.metrics.adapter import RecordAdapter, check_dataset
from sim_qc.metrics.magnitude import MagnitudeEngine
from sim_qc.metrics.xydiff import XydiffEngine, check_two_channels

__all__ = [
    "MagnitudeEngine",
    "RecordAdapter",
    "XydiffEngine",
    "check_dataset",
    "check_two_channels",
]
