from __future__ import annotations

import threading

import numpy as np
import pytest

from fakes import MemoryStreamProvider, payload_bytes
from vibeview.config import VibeViewConfig
from vibeview.core.models import Cancelled, VibrationDataset
from vibeview.core.pipeline import VibrationPipeline
from vibeview.ingest.errors import NetworkError
from vibeview.ingest.ingestor import ChunkedIngestor


def _sine(n: int, freq_hz: float, fs: float) -> list[float]:
    t = np.arange(n) / fs
    return np.sin(2 * np.pi * freq_hz * t).tolist()


@pytest.fixture
def provider() -> MemoryStreamProvider:
    return MemoryStreamProvider(
        {
            "sine": payload_bytes({"values": _sine(4000, 100.0, 1000.0)}),
            "ramp": payload_bytes([{"vibration": float(i)} for i in range(500)]),
        },
        block_bytes=4096,
    )


@pytest.fixture
def pipeline(provider: MemoryStreamProvider):
    cfg = VibeViewConfig(sampling_rate_hz=1000.0, chunk_size=1000, display_threshold=100)
    pipe = VibrationPipeline.from_config(cfg, provider=provider)
    yield pipe
    pipe.close()


def test_views_are_none_before_any_load(pipeline: VibrationPipeline) -> None:
    assert pipeline.current is None
    assert pipeline.display_series() is None
    assert pipeline.spectrum() is None
    assert pipeline.summary() is None


def test_load_publishes_dataset_and_derives_views(pipeline: VibrationPipeline) -> None:
    progress: list[float] = []

    outcome = pipeline.load("sine", on_progress=progress.append).result(timeout=5.0)

    assert isinstance(outcome, VibrationDataset)
    assert pipeline.current is outcome
    assert progress[-1] == 100.0

    series = pipeline.display_series()
    assert len(series) == 100
    assert series.indices[0] == 0
    assert series.indices[-1] == 3999

    bins = pipeline.spectrum(max_bins=1000)
    assert len(bins) == 500
    assert max(bins, key=lambda b: b.magnitude).frequency_hz == pytest.approx(100.0)

    summary = pipeline.summary()
    assert summary.sample_count == 4000
    assert summary.quality == "excellent"
    assert summary.duration_s == pytest.approx(4.0)


def test_display_threshold_defaults_to_capture_size(provider: MemoryStreamProvider) -> None:
    cfg = VibeViewConfig(sampling_rate_hz=1000.0, chunk_size=1000)
    with VibrationPipeline.from_config(cfg, provider=provider) as pipe:
        pipe.load("sine").result(timeout=5.0)

        # 4000 samples is below the 15000-point default, so nothing is dropped.
        series = pipe.display_series()
        assert len(series) == 4000
        assert pipe.display_series() is series
        assert len(pipe.display_series(25)) == 25


def test_derived_views_are_cached_per_parameter(pipeline: VibrationPipeline) -> None:
    pipeline.load("sine").result(timeout=5.0)

    first = pipeline.display_series(50)
    assert pipeline.display_series(50) is first
    assert pipeline.display_series(60) is not first
    assert pipeline.spectrum(256) is pipeline.spectrum(256)


def test_new_load_replaces_dataset_without_mutating_old(pipeline: VibrationPipeline) -> None:
    sine = pipeline.load("sine").result(timeout=5.0)
    sine_series = pipeline.display_series()

    ramp = pipeline.load("ramp").result(timeout=5.0)

    assert pipeline.current is ramp
    assert len(sine) == 4000
    assert len(pipeline.display_series()) == 100
    assert pipeline.display_series() is not sine_series
    with pytest.raises(ValueError):
        sine.values[0] = 1.0


def test_new_load_cancels_in_flight_session(provider: MemoryStreamProvider) -> None:
    gate = threading.Event()
    started = threading.Event()

    def hold_sine(source_id: str, index: int) -> None:
        if source_id == "sine" and index == 0:
            started.set()
            gate.wait(5.0)

    provider.on_block = hold_sine
    with VibrationPipeline(ChunkedIngestor(provider, chunk_size=1000)) as pipe:
        slow = pipe.load("sine")
        assert started.wait(5.0)
        fast = pipe.load("ramp")
        gate.set()

        assert isinstance(slow.result(timeout=5.0), Cancelled)
        ramp = fast.result(timeout=5.0)
        assert pipe.current is ramp
        assert pipe.current.source_id == "ramp"


def test_failed_load_keeps_previous_dataset(pipeline: VibrationPipeline) -> None:
    ramp = pipeline.load("ramp").result(timeout=5.0)

    with pytest.raises(NetworkError):
        pipeline.load("missing").result(timeout=5.0)

    assert pipeline.current is ramp


def test_compute_runs_off_the_calling_thread(pipeline: VibrationPipeline) -> None:
    pipeline.load("ramp").result(timeout=5.0)

    future = pipeline.submit_display_series(10)

    series = future.result(timeout=5.0)
    assert len(series) == 10


def test_closed_pipeline_rejects_new_work(provider: MemoryStreamProvider) -> None:
    pipe = VibrationPipeline(ChunkedIngestor(provider))
    pipe.close()

    with pytest.raises(RuntimeError):
        pipe.load("sine")
    pipe.close()
