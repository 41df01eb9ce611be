"""CSV export of derived views (downsampled series and spectra)."""

import csv
from pathlib import Path
from typing import Any, Iterable, Sequence

from ..core.models import DisplaySeries, SpectrumBin


def write_rows(path: Path, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """
    Write a header row and all data rows to a CSV file.

    Directories are created as needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(headers)
        writer.writerows(rows)


def write_display_series(path: Path, series: DisplaySeries, sampling_rate_hz: float) -> None:
    """Write ``index,t_s,amplitude`` rows for a downsampled series."""
    rate = float(sampling_rate_hz)
    write_rows(
        path,
        ("index", "t_s", "amplitude"),
        ((idx, idx / rate, amp) for idx, amp in series),
    )


def write_spectrum(path: Path, bins: Sequence[SpectrumBin]) -> None:
    write_rows(
        path,
        ("frequency_hz", "magnitude"),
        ((b.frequency_hz, b.magnitude) for b in bins),
    )
