"""Record adapter: uniform float view of intensity records.

Records arrive in the file's encoding (float32 or uint16). The encoding is
fixed when the reader opens the file, so decoding is a single dtype
conversion and the metric code never branches on it.
"""

import numpy as np

from sim_qc.exceptions import EmptyDatasetError, SampleNameError, SimFormatError
from sim_qc.models import SimHeader, SimRecord


def check_dataset(header: SimHeader) -> None:
    """Reject datasets with no samples or no probes.

    Raises:
        EmptyDatasetError: If the header declares zero samples or probes
    """
    if header.num_samples == 0:
        raise EmptyDatasetError("Dataset contains no samples")
    if header.num_probes == 0:
        raise EmptyDatasetError("Dataset contains no probes")


class RecordAdapter:
    """Decodes records of one dataset into per-probe, per-channel floats.

    Args:
        header: Header of the dataset the records come from
    """

    def __init__(self, header: SimHeader) -> None:
        self.header = header

    def check_name(self, sample_name: str) -> None:
        """Raise SampleNameError if the name exceeds the header's name size."""
        size = len(sample_name.encode("utf-8"))
        if size > self.header.name_size:
            raise SampleNameError(
                f"Sample name '{sample_name}' is {size} bytes; "
                f"maximum is {self.header.name_size}"
            )

    def intensities(self, record: SimRecord) -> np.ndarray:
        """Decode a record to a (probes, channels) float64 array.

        Raises:
            SampleNameError: If the sample name is too long
            SimFormatError: If the record does not hold probes*channels values
        """
        self.check_name(record.sample_name)
        values = np.asarray(record.intensities)
        if values.size != self.header.values_per_record:
            raise SimFormatError(
                f"Sample '{record.sample_name}': expected "
                f"{self.header.values_per_record} intensities, got {values.size}"
            )
        return values.astype(np.float64).reshape(
            self.header.num_probes, self.header.num_channels
        )

    def magnitudes(self, record: SimRecord) -> np.ndarray:
        """Euclidean norm over channels for each probe.

        Returns:
            Array of length num_probes
        """
        values = self.intensities(record)
        return np.sqrt(np.sum(values * values, axis=1))
