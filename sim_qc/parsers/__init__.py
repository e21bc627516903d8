"""Readers for .sim intensity files."""

from sim_qc.parsers.sim import HEADER, SIM_MAGIC, SIM_VERSION, SimReader, parse_header, read_header

__all__ = [
    "HEADER",
    "SIM_MAGIC",
    "SIM_VERSION",
    "SimReader",
    "parse_header",
    "read_header",
]
