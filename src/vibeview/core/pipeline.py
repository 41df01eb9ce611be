"""Pipeline facade: one active ingest session, the current dataset, and its views."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, TypeVar

from ..analysis.features import DatasetSummary, summarize
from ..analysis.lttb import display_points_for, lttb
from ..analysis.spectrum import spectrum
from ..config import VibeViewConfig
from ..ingest.ingestor import ChunkCallback, ChunkedIngestor, IngestOutcome, ProgressCallback
from ..ingest.session import IngestSession
from ..ingest.transport import ByteStreamProvider
from ..tools.debug import time_block
from .models import DisplaySeries, SpectrumBin, VibrationDataset

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _completed(value: T) -> Future[T]:
    future: Future[T] = Future()
    future.set_result(value)
    return future


class VibrationPipeline:
    """
    Owns the "current" dataset and derives plot and spectrum views from it.

    Lifecycle: construct, call :meth:`load` any number of times, then
    :meth:`close` (or use the pipeline as a context manager). Starting a new
    load cancels the previous in-flight session; only the most recent session
    may publish its dataset, and publication swaps the reference atomically.

    LTTB and the spectrum run on a private single-worker executor so they
    never share a thread with ingestion, progress delivery or cancellation.
    """

    def __init__(self, ingestor: ChunkedIngestor, *, config: VibeViewConfig | None = None) -> None:
        self._cfg = (config or VibeViewConfig()).sanitized()
        self._ingestor = ingestor
        self._lock = threading.RLock()
        self._current: Optional[VibrationDataset] = None
        self._active: Optional[IngestSession] = None
        self._series_cache: Dict[int, DisplaySeries] = {}
        self._spectrum_cache: Dict[int, List[SpectrumBin]] = {}
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="VibeViewCompute")
        self._closed = False

    @classmethod
    def from_config(
        cls,
        cfg: VibeViewConfig,
        *,
        provider: ByteStreamProvider | None = None,
    ) -> "VibrationPipeline":
        return cls(ChunkedIngestor.from_config(cfg, provider), config=cfg)

    # ------------------------------------------------------------------ state
    @property
    def config(self) -> VibeViewConfig:
        return self._cfg

    @property
    def current(self) -> Optional[VibrationDataset]:
        with self._lock:
            return self._current

    @property
    def active_session(self) -> Optional[IngestSession]:
        with self._lock:
            return self._active

    # ------------------------------------------------------------------ ingest
    def load(
        self,
        source_id: str,
        on_progress: Optional[ProgressCallback] = None,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> IngestSession:
        """
        Start ingesting ``source_id``, cancelling any session still running.

        Callbacks run on the session's delivery thread. The returned
        session's :meth:`~IngestSession.result` resolves after the dataset
        (if any) has been published as :attr:`current`.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("pipeline is closed")
            previous = self._active
            if previous is not None and not previous.done():
                logger.info("Cancelling ingestion of %s for %s", previous.source_id, source_id)
                previous.cancel()
            session = IngestSession(
                self._ingestor,
                source_id,
                on_progress=on_progress,
                on_chunk=on_chunk,
                on_complete=self._publish,
                channel_size=self._cfg.channel_size,
            )
            session.add_done_callback(lambda _f: self._release(session))
            self._active = session
        return session.start()

    def cancel(self) -> None:
        """Cancel the in-flight session, if any."""
        with self._lock:
            session = self._active
        if session is not None:
            session.cancel()

    def _publish(self, session: IngestSession, outcome: IngestOutcome) -> None:
        if not isinstance(outcome, VibrationDataset):
            return
        with self._lock:
            if session is not self._active or session.token.cancelled:
                logger.debug("Discarding superseded dataset for %s", outcome.source_id)
                return
            self._current = outcome
            self._series_cache.clear()
            self._spectrum_cache.clear()
        logger.info("Published %s (%d samples)", outcome.source_id, len(outcome))

    def _release(self, session: IngestSession) -> None:
        with self._lock:
            if self._active is session:
                self._active = None

    # ------------------------------------------------------------ derived views
    def submit_display_series(self, threshold: int | None = None) -> Future[Optional[DisplaySeries]]:
        """
        Schedule LTTB on the current dataset; ``None`` result when nothing is loaded.

        Without an explicit or configured threshold the point count follows
        the dataset size (see :func:`~vibeview.analysis.lttb.display_points_for`).
        """
        configured = self._cfg.display_threshold

        def _target(ds: VibrationDataset) -> int:
            if threshold is not None:
                return int(threshold)
            if configured is not None:
                return configured
            return display_points_for(len(ds))

        return self._submit(
            self._series_cache,
            _target,
            lambda ds, target: lttb(ds.values, target),
            "lttb(threshold={})",
        )

    def submit_spectrum(self, max_bins: int | None = None) -> Future[Optional[List[SpectrumBin]]]:
        """Schedule the bounded spectrum of the current dataset."""
        bins = self._cfg.max_fft_bins if max_bins is None else int(max_bins)
        return self._submit(
            self._spectrum_cache,
            lambda _ds: bins,
            lambda ds, n: spectrum(ds.values, ds.sampling_rate_hz, n),
            "spectrum(max_bins={})",
        )

    def display_series(self, threshold: int | None = None) -> Optional[DisplaySeries]:
        return self.submit_display_series(threshold).result()

    def spectrum(self, max_bins: int | None = None) -> Optional[List[SpectrumBin]]:
        return self.submit_spectrum(max_bins).result()

    def summary(self) -> Optional[DatasetSummary]:
        dataset = self.current
        if dataset is None:
            return None
        bins = self.spectrum() or []
        return summarize(dataset, bins)

    def _submit(
        self,
        cache: Dict[int, T],
        key_for: Callable[[VibrationDataset], int],
        compute: Callable[[VibrationDataset, int], T],
        label: str,
    ) -> Future[Optional[T]]:
        with self._lock:
            if self._closed:
                raise RuntimeError("pipeline is closed")
            dataset = self._current
            if dataset is None:
                return _completed(None)
            key = key_for(dataset)
            cached = cache.get(key)
            if cached is not None:
                return _completed(cached)

        def _run() -> T:
            with time_block(f"{label.format(key)} on {dataset.source_id}"):
                result = compute(dataset, key)
            with self._lock:
                # A newer dataset may have been published meanwhile.
                if self._current is dataset:
                    cache[key] = result
            return result

        return self._executor.submit(_run)

    # --------------------------------------------------------------- lifecycle
    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Cancel any in-flight session and stop the compute executor."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            session = self._active
        if session is not None:
            session.cancel()
            session.join(timeout)
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "VibrationPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["VibrationPipeline"]
