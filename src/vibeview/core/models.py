"""Shared dataclasses for VibeView datasets and their derived views."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, Tuple

import numpy as np
from numpy.typing import ArrayLike


def _frozen_array(data: ArrayLike, dtype: type) -> np.ndarray:
    """Return a 1-D read-only copy of ``data``."""
    arr = np.array(data, dtype=dtype).reshape(-1)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class VibrationDataset:
    """
    One complete single-channel capture.

    Instances never change once built; selecting another source produces a
    new dataset rather than updating this one.
    """

    source_id: str
    values: np.ndarray
    sampling_rate_hz: float
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        values = _frozen_array(self.values, np.float64)
        if values.size == 0:
            raise ValueError("dataset must contain at least one sample")
        rate = float(self.sampling_rate_hz)
        if rate <= 0:
            raise ValueError(f"sampling_rate_hz must be > 0, got {rate}")
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "sampling_rate_hz", rate)

    def __len__(self) -> int:
        return int(self.values.size)

    @property
    def duration_s(self) -> float:
        """Capture length in seconds."""
        return self.values.size / self.sampling_rate_hz


@dataclass(frozen=True)
class DisplaySeries:
    """Render-ready subset of a dataset: original sample indices and their amplitudes."""

    indices: np.ndarray
    amplitudes: np.ndarray

    def __post_init__(self) -> None:
        indices = _frozen_array(self.indices, np.int64)
        amplitudes = _frozen_array(self.amplitudes, np.float64)
        if indices.size != amplitudes.size:
            raise ValueError("indices and amplitudes must have the same length")
        object.__setattr__(self, "indices", indices)
        object.__setattr__(self, "amplitudes", amplitudes)

    def __len__(self) -> int:
        return int(self.indices.size)

    def __iter__(self) -> Iterator[Tuple[int, float]]:
        for idx, amp in zip(self.indices.tolist(), self.amplitudes.tolist()):
            yield idx, amp


@dataclass(frozen=True, slots=True)
class SpectrumBin:
    frequency_hz: float
    magnitude: float


@dataclass(frozen=True, slots=True)
class IngestProgress:
    percent: float
    cancelled: bool = False


@dataclass(frozen=True)
class Cancelled:
    """Terminal ingest outcome when the caller cancelled the session."""

    source_id: str
    progress: IngestProgress


__all__ = [
    "VibrationDataset",
    "DisplaySeries",
    "SpectrumBin",
    "IngestProgress",
    "Cancelled",
]
