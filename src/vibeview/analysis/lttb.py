"""Largest-Triangle-Three-Buckets downsampling for plot-ready series.

Unlike block decimation, LTTB keeps the sample in each bucket that spans the
largest triangle with its neighbours, so isolated peaks and troughs survive
even when a million samples collapse to a few thousand points.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike

from ..core.models import DisplaySeries

# Captures longer than this get fewer display points.
LARGE_CAPTURE_SAMPLES = 1_000_000
LARGE_CAPTURE_POINTS = 10_000
DEFAULT_DISPLAY_POINTS = 15_000


def display_points_for(n_samples: int) -> int:
    """Default LTTB threshold for a capture of ``n_samples`` samples."""
    return LARGE_CAPTURE_POINTS if n_samples > LARGE_CAPTURE_SAMPLES else DEFAULT_DISPLAY_POINTS


def _identity(values: np.ndarray) -> DisplaySeries:
    return DisplaySeries(indices=np.arange(values.size, dtype=np.int64), amplitudes=values)


def lttb(values: ArrayLike, threshold: int) -> DisplaySeries:
    """
    Reduce ``values`` to ``threshold`` representative points.

    Parameters
    ----------
    values:
        1-D array-like of amplitude samples, indexed 0..N-1.
    threshold:
        Number of output points. ``0`` or anything ``>= N`` returns every
        sample unchanged. ``1`` is treated as ``2``: the first and last
        samples are always kept, so a reduced series has at least two points.

    Returns
    -------
    DisplaySeries
        Selected original indices (strictly increasing, first ``0`` and last
        ``N-1``) and their amplitudes.
    """
    threshold = int(threshold)
    if threshold < 0:
        raise ValueError(f"threshold must be >= 0, got {threshold}")

    data = np.asarray(values, dtype=np.float64).reshape(-1)
    n_samples = data.size
    if threshold == 0 or threshold >= n_samples:
        return _identity(data)

    selected = [0]
    n_buckets = threshold - 2
    if n_buckets > 0:
        bucket_width = (n_samples - 2) / n_buckets
        a = 0
        for i in range(n_buckets):
            # Centroid of the following bucket is the third triangle vertex.
            next_start = math.floor((i + 1) * bucket_width) + 1
            next_end = min(math.floor((i + 2) * bucket_width) + 1, n_samples)
            next_len = next_end - next_start
            if next_len > 0:
                avg_x = (next_start + next_end - 1) / 2.0
                avg_y = float(data[next_start:next_end].mean())
            else:
                avg_x = 0.0
                avg_y = 0.0

            start = math.floor(i * bucket_width) + 1
            end = min(math.floor((i + 1) * bucket_width) + 1, n_samples)

            xs = np.arange(start, end, dtype=np.float64)
            ys = data[start:end]
            a_y = data[a]
            areas = np.abs((a - avg_x) * (ys - a_y) - (a - xs) * (avg_y - a_y)) * 0.5

            # argmax returns the first maximum, so ties resolve to the earliest point.
            a = start + int(np.argmax(areas))
            selected.append(a)

    selected.append(n_samples - 1)
    indices = np.asarray(selected, dtype=np.int64)
    return DisplaySeries(indices=indices, amplitudes=data[indices])


__all__ = ["lttb", "display_points_for"]
