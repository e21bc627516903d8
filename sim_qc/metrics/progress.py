"""Per-sample progress reporting shared by the metric engines."""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_INTERVAL = 1000


def report_progress(
    index: int,
    total: int,
    interval: int,
    on_record: Callable[[], None] | None = None,
) -> None:
    """Log "Sample i of N" every ``interval`` samples and notify ``on_record``.

    Args:
        index: Zero-based index of the sample just processed
        total: Samples in the pass
        interval: Log on samples 1, interval + 1, 2 * interval + 1, ...
        on_record: Called once per sample, for progress display
    """
    if index % interval == 0:
        logger.info("Sample %d of %d", index + 1, total)
    if on_record is not None:
        on_record()
