""".sim intensity file writer.

Writes the same little-endian layout that SimReader reads. The sample
count is not known up front, so the header is written with a zero count
and patched when the writer is closed.
"""

from collections.abc import Sequence
from pathlib import Path
from types import TracebackType

import numpy as np

from sim_qc.exceptions import SampleNameError, SimFormatError
from sim_qc.models import NumberFormat
from sim_qc.parsers.sim import HEADER, SIM_MAGIC, SIM_VERSION

DEFAULT_NAME_SIZE = 40
UINT16_MAX = np.iinfo(np.uint16).max


def encode_sample_name(sample_name: str, name_size: int) -> bytes:
    """Encode a sample name into its fixed-width, null-padded field.

    Raises:
        SampleNameError: If the encoded name is longer than ``name_size``
    """
    raw = sample_name.encode("utf-8")
    if len(raw) > name_size:
        raise SampleNameError(
            f"Sample name '{sample_name}' is {len(raw)} bytes; maximum is {name_size}"
        )
    return raw.ljust(name_size, b"\x00")


class SimWriter:
    """Writes sample records to a .sim file.

    Usage:
        with SimWriter(path, num_probes=2, num_channels=2) as writer:
            writer.write_record("S1", [3, 4, 0, 0])
    """

    def __init__(
        self,
        filepath: Path,
        num_probes: int,
        num_channels: int,
        number_format: NumberFormat = NumberFormat.FLOAT32,
        name_size: int = DEFAULT_NAME_SIZE,
    ) -> None:
        """Create the file and write a provisional header.

        Args:
            filepath: Output .sim path
            num_probes: Probes per sample
            num_channels: Intensity channels per probe (1-255)
            number_format: Encoding for intensity values
            name_size: Sample name field width in bytes (1-65535)

        Raises:
            SimFormatError: If the layout cannot be represented in a header
        """
        if not 1 <= num_channels <= 255:
            raise SimFormatError(f"Channel count must be between 1 and 255: {num_channels}")
        if not 1 <= name_size <= 65535:
            raise SimFormatError(f"Name size must be between 1 and 65535: {name_size}")
        if num_probes < 0:
            raise SimFormatError(f"Probe count cannot be negative: {num_probes}")

        self.filepath = Path(filepath)
        self.num_probes = num_probes
        self.num_channels = num_channels
        self.number_format = number_format
        self.name_size = name_size
        self.sample_count = 0

        self._file = open(self.filepath, "wb")
        self._write_header()

    def _write_header(self) -> None:
        self._file.write(
            HEADER.pack(
                SIM_MAGIC,
                SIM_VERSION,
                self.name_size,
                self.sample_count,
                self.num_probes,
                self.num_channels,
                self.number_format.value,
            )
        )

    def write_record(self, sample_name: str, intensities: Sequence[float] | np.ndarray) -> None:
        """Append one sample.

        Args:
            sample_name: Sample identifier
            intensities: probes*channels values, ordered probe-major

        Raises:
            SampleNameError: If the name does not fit the name field
            SimFormatError: If the value count is wrong or a value cannot be
                stored in the file's encoding
        """
        name_field = encode_sample_name(sample_name, self.name_size)

        values = np.asarray(intensities, dtype=np.float64).ravel()
        expected = self.num_probes * self.num_channels
        if values.size != expected:
            raise SimFormatError(
                f"Sample '{sample_name}': expected {expected} intensities, got {values.size}"
            )

        if self.number_format is NumberFormat.UINT16:
            if np.any((values < 0) | (values > UINT16_MAX)) or np.any(values != np.round(values)):
                raise SimFormatError(
                    f"Sample '{sample_name}': uint16 intensities must be integers "
                    f"in [0, {UINT16_MAX}]"
                )

        self._file.write(name_field)
        self._file.write(values.astype(self.number_format.dtype).tobytes())
        self.sample_count += 1

    def close(self) -> None:
        """Patch the sample count into the header and close the file."""
        if self._file.closed:
            return
        self._file.seek(0)
        self._write_header()
        self._file.close()

    def discard(self) -> None:
        """Close without finalizing and delete the file."""
        self._file.close()
        self.filepath.unlink(missing_ok=True)

    def __enter__(self) -> "SimWriter":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit - finalize header and close.

        If the block raised, the incomplete file is removed instead.
        """
        if exc_type is not None:
            self.discard()
            return
        self.close()
