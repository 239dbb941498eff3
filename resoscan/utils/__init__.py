"""
Utility module for ResoScan.

Contains helper functions used by the command line and report consumers.
"""

from .formatting import (
    format_frequency,
    format_db,
    format_duration,
    format_sample_rate,
    format_rt60,
)

__all__ = [
    "format_frequency",
    "format_db",
    "format_duration",
    "format_sample_rate",
    "format_rt60",
]
