"""Core data model and the pipeline facade.

:mod:`models` holds the immutable dataset and derived-view dataclasses shared
by every other package. The :class:`~vibeview.core.pipeline.VibrationPipeline`
facade lives in :mod:`vibeview.core.pipeline`; import it from there (or from
the top-level :mod:`vibeview` package) since it depends on the analysis and
ingest packages, which in turn depend on these models.
"""

from .models import Cancelled, DisplaySeries, IngestProgress, SpectrumBin, VibrationDataset

__all__ = [
    "VibrationDataset",
    "DisplaySeries",
    "SpectrumBin",
    "IngestProgress",
    "Cancelled",
]
