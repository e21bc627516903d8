"""Data models for .sim intensity datasets and QC results.

Header, record and result containers shared by the reader, the metric
engines and the writers.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np

from sim_qc.exceptions import SimFormatError


class NumberFormat(Enum):
    """Numeric encoding of intensity values, as stored in the header."""

    FLOAT32 = 0
    UINT16 = 1

    @classmethod
    def from_code(cls, code: int) -> "NumberFormat":
        """Look up the encoding for a header format code.

        Raises:
            SimFormatError: If the code is not a recognized encoding
        """
        try:
            return cls(code)
        except ValueError:
            raise SimFormatError(
                f"Unknown number format code {code}; expected 0 (float32) or 1 (uint16)"
            ) from None

    @property
    def dtype(self) -> np.dtype:
        """Little-endian numpy dtype for values in this encoding."""
        if self is NumberFormat.FLOAT32:
            return np.dtype("<f4")
        return np.dtype("<u2")

    @property
    def width(self) -> int:
        """Bytes per intensity value."""
        return self.dtype.itemsize


class CursorState(Enum):
    """Read position of a record source relative to its declared samples."""

    START = auto()
    READING = auto()
    EXHAUSTED = auto()


@dataclass(frozen=True, slots=True)
class SimHeader:
    """Header of a .sim file.

    Attributes:
        version: Format version byte
        name_size: Maximum sample name length in bytes (names are null-padded)
        num_samples: Number of sample records in the file
        num_probes: Number of probes per sample
        num_channels: Number of intensity channels per probe
        number_format: Encoding of intensity values
    """

    version: int
    name_size: int
    num_samples: int
    num_probes: int
    num_channels: int
    number_format: NumberFormat

    @property
    def values_per_record(self) -> int:
        """Intensity values held by each record (probes x channels)."""
        return self.num_probes * self.num_channels

    @property
    def record_size(self) -> int:
        """Size of one record in bytes, sample name included."""
        return self.name_size + self.values_per_record * self.number_format.width


@dataclass(slots=True)
class SimRecord:
    """One sample's intensities.

    Attributes:
        sample_name: Sample identifier (null padding removed)
        intensities: Raw values in file encoding, indexed probe * channels + channel
    """

    sample_name: str
    intensities: np.ndarray


@dataclass
class MetricResults:
    """Per-sample values of one metric, in the order samples were read."""

    metric: str
    names: list[str] = field(default_factory=list)
    values: list[float] = field(default_factory=list)

    def add(self, sample_name: str, value: float) -> None:
        """Record the metric value for the next sample."""
        self.names.append(sample_name)
        self.values.append(float(value))

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[tuple[str, float]]:
        return iter(zip(self.names, self.values))

    @property
    def non_finite_count(self) -> int:
        """Number of samples whose value is inf or nan."""
        return int(np.count_nonzero(~np.isfinite(np.asarray(self.values, dtype=float))))
