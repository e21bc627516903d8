"""I/O utilities for transparent gzip handling.

Provides binary file opening that auto-detects gzip compression by
checking magic bytes, so .sim and .sim.gz inputs are read the same way.

Example:
    with smart_open(Path("intensities.sim.gz")) as f:
        header = f.read(16)
"""

import gzip
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

# Gzip magic bytes (first two bytes of gzip file)
GZIP_MAGIC = b"\x1f\x8b"


def is_gzipped(filepath: Path) -> bool:
    """Detect if a file is gzip-compressed.

    Checks magic bytes first (reliable), falls back to extension if file
    is too small or unreadable.

    Args:
        filepath: Path to file to check

    Returns:
        True if file is gzip-compressed

    Example:
        >>> is_gzipped(Path("data.sim.gz"))
        True
        >>> is_gzipped(Path("data.sim"))
        False
    """
    try:
        with open(filepath, "rb") as f:
            magic = f.read(2)
            if len(magic) >= 2:
                return magic == GZIP_MAGIC
    except OSError:
        pass

    # Fall back to extension check
    return filepath.suffix == ".gz"


def open_binary(filepath: Path) -> BinaryIO:
    """Open a file for binary reading with automatic gzip detection.

    The caller owns the returned handle and must close it. Both plain and
    gzip handles support ``seek(0)``, which is all the record reader needs
    to rewind.

    Args:
        filepath: Path to file (may be .gz or uncompressed)

    Returns:
        Binary file handle

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    if is_gzipped(filepath):
        return gzip.open(filepath, "rb")  # type: ignore[return-value]
    return open(filepath, "rb")


@contextmanager
def smart_open(filepath: Path) -> Iterator[BinaryIO]:
    """Open a binary file with automatic gzip detection, closing on exit.

    Args:
        filepath: Path to file (may be .gz or uncompressed)

    Yields:
        Binary file handle
    """
    f = open_binary(filepath)
    try:
        yield f
    finally:
        f.close()


def read_exact(f: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, looping over short reads.

    Gzip streams may return fewer bytes than requested before end of
    file, so a single ``read`` is not enough to detect truncation.

    Args:
        f: Binary file handle
        size: Number of bytes wanted

    Returns:
        The bytes read; shorter than ``size`` only at end of file
    """
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = f.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
