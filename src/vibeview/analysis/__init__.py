"""Signal analysis utilities (downsampling, spectrum, and feature extraction).

This package gathers pure functions that operate on NumPy arrays of vibration
samples. Modules such as :mod:`lttb`, :mod:`spectrum` and :mod:`features`
stay free of I/O and threading so they can be reused in command-line scripts,
automated tests, or the pipeline's background executor alike.
"""

from .features import DatasetSummary, dominant_frequency, peak_to_peak, rms, summarize
from .lttb import display_points_for, lttb
from .spectrum import DEFAULT_MAX_BINS, MAX_OUTPUT_BINS, spectrum

__all__ = [
    "lttb",
    "display_points_for",
    "spectrum",
    "DEFAULT_MAX_BINS",
    "MAX_OUTPUT_BINS",
    "rms",
    "peak_to_peak",
    "dominant_frequency",
    "DatasetSummary",
    "summarize",
]
