"""VibeView: streaming ingestion, LTTB downsampling and spectrum previews for vibration captures."""

from .analysis import lttb, spectrum
from .config import VibeViewConfig, load_config
from .core.models import Cancelled, DisplaySeries, IngestProgress, SpectrumBin, VibrationDataset
from .core.pipeline import VibrationPipeline
from .ingest import (
    CancellationToken,
    ChunkedIngestor,
    FormatError,
    IngestError,
    NetworkError,
    ParseError,
)

__version__ = "0.1.0"

__all__ = [
    "lttb",
    "spectrum",
    "VibeViewConfig",
    "load_config",
    "VibrationDataset",
    "DisplaySeries",
    "SpectrumBin",
    "IngestProgress",
    "Cancelled",
    "VibrationPipeline",
    "CancellationToken",
    "ChunkedIngestor",
    "IngestError",
    "NetworkError",
    "ParseError",
    "FormatError",
]
