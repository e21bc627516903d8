"""
Custom exceptions for .sim reading and QC metric computation.
Kept minimal - only what's needed for clear error handling.
"""


class SimQCError(Exception):
    """Base exception for sim_qc errors."""
    pass


class SimFormatError(SimQCError):
    """Raised when a .sim file or its configuration is malformed."""
    pass


class SampleNameError(SimFormatError):
    """Raised when a sample name does not fit the configured name size."""
    pass


class ChannelCountError(SimFormatError):
    """Raised when a metric is requested for an unsupported channel count."""
    pass


class EmptyDatasetError(SimQCError):
    """Raised when a dataset has zero samples or zero probes."""
    pass


class EndOfData(SimQCError):
    """Raised when reading past the declared number of samples."""
    pass


class TruncatedDataError(SimQCError):
    """Raised when the file holds fewer records than its header declares."""
    pass


class PassInProgressError(SimQCError):
    """Raised when a second pass is started while one is still in flight."""
    pass
