""".sim intensity file reader.

Streams sample records from a .sim file one at a time, with an explicit
rewind so that multi-pass metrics can re-read the same data. Supports
gzipped files.

.sim layout (little-endian):
    header   magic "sim", version u8, name size u16, samples u32,
             probes u32, channels u8, number format u8   (16 bytes)
    records  name (null-padded to name size) + probes*channels values,
             float32 (format 0) or uint16 (format 1)
"""

import struct
from collections.abc import Iterator
from pathlib import Path
from types import TracebackType
from typing import BinaryIO

import numpy as np

from sim_qc.exceptions import (
    EndOfData,
    PassInProgressError,
    SimFormatError,
    TruncatedDataError,
)
from sim_qc.io_utils import open_binary, read_exact, smart_open
from sim_qc.models import CursorState, NumberFormat, SimHeader, SimRecord

SIM_MAGIC = b"sim"
SIM_VERSION = 1
HEADER = struct.Struct("<3sBHIIBB")


def parse_header(data: bytes) -> SimHeader:
    """Decode the fixed-size .sim header.

    Args:
        data: At least ``HEADER.size`` bytes from the start of the file

    Returns:
        Decoded SimHeader

    Raises:
        SimFormatError: If the header is short, has the wrong magic or
            version, or declares an invalid layout
    """
    if len(data) < HEADER.size:
        raise SimFormatError(
            f"File too short for .sim header: expected {HEADER.size} bytes, got {len(data)}"
        )

    magic, version, name_size, num_samples, num_probes, num_channels, fmt_code = (
        HEADER.unpack_from(data)
    )

    if magic != SIM_MAGIC:
        raise SimFormatError(f"Not a .sim file: bad magic {magic!r}")
    if version != SIM_VERSION:
        raise SimFormatError(f"Unsupported .sim version {version}; expected {SIM_VERSION}")
    if name_size == 0:
        raise SimFormatError("Sample name size must be at least 1 byte")
    if num_channels == 0:
        raise SimFormatError("Channel count must be at least 1")

    return SimHeader(
        version=version,
        name_size=name_size,
        num_samples=num_samples,
        num_probes=num_probes,
        num_channels=num_channels,
        number_format=NumberFormat.from_code(fmt_code),
    )


def read_header(filepath: Path) -> SimHeader:
    """Read only the header of a .sim file (may be gzipped)."""
    with smart_open(Path(filepath)) as f:
        return parse_header(read_exact(f, HEADER.size))


class SimReader:
    """Sequential record reader over one .sim file.

    The reader is a single cursor. ``reset()`` returns it to the first
    record; ``next_record()`` advances it by one sample. Header values are
    fixed for the lifetime of the reader.

    Usage:
        with SimReader.open(Path("data.sim")) as reader:
            for record in reader.iter_records():
                process(record)
    """

    def __init__(self, filepath: Path) -> None:
        """Open the file and decode its header.

        Args:
            filepath: Path to .sim or .sim.gz file

        Raises:
            FileNotFoundError: If the file does not exist
            SimFormatError: If the header is invalid
        """
        self.filepath = Path(filepath)
        self._file: BinaryIO = open_binary(self.filepath)
        try:
            self.header = parse_header(read_exact(self._file, HEADER.size))
        except Exception:
            self._file.close()
            raise
        self._position = 0
        self._pass_active = False

    @classmethod
    def open(cls, filepath: Path) -> "SimReader":
        """Open a .sim file for reading."""
        return cls(filepath)

    @property
    def num_samples(self) -> int:
        return self.header.num_samples

    @property
    def num_probes(self) -> int:
        return self.header.num_probes

    @property
    def num_channels(self) -> int:
        return self.header.num_channels

    @property
    def number_format(self) -> NumberFormat:
        return self.header.number_format

    @property
    def name_size(self) -> int:
        return self.header.name_size

    @property
    def position(self) -> int:
        """Records read since the last reset."""
        return self._position

    @property
    def state(self) -> CursorState:
        """Cursor state: at start, part way through, or past the last record."""
        if self._position == 0:
            return CursorState.START
        if self._position >= self.num_samples:
            return CursorState.EXHAUSTED
        return CursorState.READING

    @property
    def closed(self) -> bool:
        return self._file.closed

    def reset(self) -> None:
        """Move the cursor back to the first record."""
        self._file.seek(HEADER.size)
        self._position = 0

    def next_record(self) -> SimRecord:
        """Read the record under the cursor and advance.

        Returns:
            The next SimRecord in file order

        Raises:
            EndOfData: If all declared samples have been read since reset
            TruncatedDataError: If the file ends before the declared count
            SimFormatError: If the sample name is not valid UTF-8
        """
        if self._position >= self.num_samples:
            raise EndOfData(
                f"All {self.num_samples} samples already read from {self.filepath}"
            )

        record_size = self.header.record_size
        data = read_exact(self._file, record_size)
        if len(data) < record_size:
            raise TruncatedDataError(
                f"{self.filepath}: record {self._position + 1} of {self.num_samples} "
                f"is truncated (expected {record_size} bytes, got {len(data)})"
            )

        raw_name = data[: self.name_size].split(b"\x00", 1)[0]
        try:
            sample_name = raw_name.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SimFormatError(
                f"{self.filepath}: invalid sample name in record {self._position + 1}"
            ) from e

        intensities = np.frombuffer(
            data,
            dtype=self.number_format.dtype,
            count=self.header.values_per_record,
            offset=self.name_size,
        )
        self._position += 1
        return SimRecord(sample_name=sample_name, intensities=intensities)

    def iter_records(self) -> Iterator[SimRecord]:
        """Rewind, then yield every declared record once.

        Only one pass may be in flight on a reader at a time.

        Raises:
            PassInProgressError: If another pass over this reader is active
        """
        if self._pass_active:
            raise PassInProgressError(
                f"A pass over {self.filepath} is already in progress"
            )
        self._pass_active = True
        try:
            self.reset()
            for _ in range(self.num_samples):
                yield self.next_record()
        finally:
            self._pass_active = False

    def close(self) -> None:
        """Close the underlying file."""
        self._file.close()

    def __enter__(self) -> "SimReader":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit - close the file."""
        self.close()
