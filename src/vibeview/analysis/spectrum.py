"""Bounded magnitude spectrum for interactive previews."""

from __future__ import annotations

from typing import List

import numpy as np
from numpy.typing import ArrayLike

from ..core.models import SpectrumBin

DEFAULT_MAX_BINS = 4096
MAX_OUTPUT_BINS = 1024

# Rows of the k*n phase matrix evaluated per step; keeps peak memory bounded.
_ROWS_PER_BLOCK = 128


def spectrum(
    values: ArrayLike,
    sampling_rate_hz: float,
    max_bins: int = DEFAULT_MAX_BINS,
) -> List[SpectrumBin]:
    """
    Compute a direct-summation DFT over the first ``max_bins`` samples.

    Only the leading ``Ntr = min(len(values), max_bins)`` samples are used and
    no window is applied: the result is a cheap preview, not a full-resolution
    analysis of the whole capture. At most ``min(ceil(Ntr / 2), 1024)`` bins are
    returned, ordered by frequency, with the DC term first.

    Parameters
    ----------
    values:
        1-D array-like of samples.
    sampling_rate_hz:
        Sampling rate in Hz. Must be > 0.
    max_bins:
        Upper bound on the number of samples fed into the transform.

    Returns
    -------
    list of SpectrumBin
        Empty when ``values`` is empty.
    """
    if sampling_rate_hz <= 0:
        raise ValueError(f"sampling_rate_hz must be > 0, got {sampling_rate_hz}")
    if max_bins < 1:
        raise ValueError(f"max_bins must be >= 1, got {max_bins}")

    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    n_used = min(arr.size, int(max_bins))
    if n_used == 0:
        return []

    data = arr[:n_used]
    n_out = min((n_used + 1) // 2, MAX_OUTPUT_BINS)

    n = np.arange(n_used, dtype=np.int64)
    real = np.empty(n_out, dtype=np.float64)
    imag = np.empty(n_out, dtype=np.float64)
    for start in range(0, n_out, _ROWS_PER_BLOCK):
        k = np.arange(start, min(start + _ROWS_PER_BLOCK, n_out), dtype=np.int64)
        # Reduce k*n modulo Ntr so large products keep full angular precision.
        phase = np.outer(k, n) % n_used
        angle = (-2.0 * np.pi / n_used) * phase
        real[k] = np.cos(angle) @ data
        imag[k] = np.sin(angle) @ data

    magnitude = np.hypot(real, imag)
    freqs = np.arange(n_out, dtype=np.float64) * float(sampling_rate_hz) / n_used

    return [
        SpectrumBin(frequency_hz=float(f), magnitude=float(m))
        for f, m in zip(freqs, magnitude)
    ]


__all__ = ["spectrum", "DEFAULT_MAX_BINS", "MAX_OUTPUT_BINS"]
