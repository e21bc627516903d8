"""
Sample QC metrics for .sim intensity files.

Computes probe-normalized sample magnitude and X/Y intensity difference
(xydiff) from genotyping intensity datasets stored in the .sim binary
format, for flagging outlier samples before genotype calling.
"""

__version__ = "1.0.0"
__author__ = "Data Tecnica International"
