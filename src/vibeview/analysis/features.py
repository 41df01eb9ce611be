"""Feature extraction helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike

from ..core.models import SpectrumBin, VibrationDataset


Number = Union[float, np.floating]

# Captures at or above this many samples are rated "excellent".
EXCELLENT_SAMPLE_COUNT = 1000


def _to_1d_array(signal: ArrayLike) -> np.ndarray:
    """Convert input to a 1D float64 numpy array."""
    arr = np.asarray(signal, dtype=float)
    if arr.size == 0:
        raise ValueError("signal must contain at least one sample")
    if arr.ndim != 1:
        raise ValueError(f"signal must be 1-D, got shape {arr.shape}")
    return arr


def rms(signal: ArrayLike) -> Number:
    """
    Compute root-mean-square (RMS) value of a 1-D signal.

    Parameters
    ----------
    signal:
        1-D array-like of samples.

    Returns
    -------
    float
        RMS value of the signal.
    """
    arr = _to_1d_array(signal)
    return float(np.sqrt(np.mean(np.square(arr))))


def peak_to_peak(signal: ArrayLike) -> Number:
    """
    Compute peak-to-peak value (max - min) of a 1-D signal.

    Parameters
    ----------
    signal:
        1-D array-like of samples.

    Returns
    -------
    float
        Peak-to-peak amplitude.
    """
    arr = _to_1d_array(signal)
    return float(np.max(arr) - np.min(arr))


def dominant_frequency(bins: Sequence[SpectrumBin]) -> Optional[float]:
    """Frequency of the strongest bin (earliest wins on ties), or ``None``."""
    best: Optional[SpectrumBin] = None
    for item in bins:
        if best is None or item.magnitude > best.magnitude:
            best = item
    return None if best is None else best.frequency_hz


@dataclass(frozen=True, slots=True)
class DatasetSummary:
    """Headline numbers shown next to the time-series and spectrum views."""

    sample_count: int
    duration_s: float
    rms: float
    peak_to_peak: float
    dominant_frequency_hz: Optional[float]
    quality: str


def summarize(dataset: VibrationDataset, bins: Sequence[SpectrumBin]) -> DatasetSummary:
    count = len(dataset)
    return DatasetSummary(
        sample_count=count,
        duration_s=dataset.duration_s,
        rms=float(rms(dataset.values)),
        peak_to_peak=float(peak_to_peak(dataset.values)),
        dominant_frequency_hz=dominant_frequency(bins),
        quality="excellent" if count >= EXCELLENT_SAMPLE_COUNT else "good",
    )
