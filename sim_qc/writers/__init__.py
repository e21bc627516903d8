"""Output writers for metric results and .sim files."""

from sim_qc.writers.results import format_value, write_all_results, write_results
from sim_qc.writers.sim import SimWriter

__all__ = ["SimWriter", "format_value", "write_all_results", "write_results"]
