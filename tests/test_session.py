from __future__ import annotations

import threading

import numpy as np
import pytest

from fakes import MemoryStreamProvider, payload_bytes
from vibeview.core.models import Cancelled, VibrationDataset
from vibeview.ingest.errors import FormatError
from vibeview.ingest.ingestor import ChunkedIngestor
from vibeview.ingest.session import start_ingest


def test_session_delivers_callbacks_in_order_then_resolves() -> None:
    values = list(range(250))
    ingestor = ChunkedIngestor(MemoryStreamProvider({"cap": payload_bytes(values)}), chunk_size=50)
    progress: list[float] = []
    totals: list[int] = []
    threads: set[str] = set()

    def on_chunk(chunk: np.ndarray, total: int) -> None:
        threads.add(threading.current_thread().name)
        totals.append(total)

    session = start_ingest(
        ingestor, "cap", on_progress=progress.append, on_chunk=on_chunk, channel_size=2
    )
    outcome = session.result(timeout=5.0)
    session.join(timeout=5.0)

    assert isinstance(outcome, VibrationDataset)
    assert len(outcome) == 250
    assert totals == [50, 100, 150, 200, 250]
    assert progress == sorted(progress)
    assert progress[-1] == 100.0
    assert threads == {"VibeViewDeliver(cap)"}
    assert not session.is_alive()


def test_session_reraises_ingest_errors() -> None:
    ingestor = ChunkedIngestor(MemoryStreamProvider({"cap": payload_bytes({"foo": 1})}))

    session = start_ingest(ingestor, "cap")

    with pytest.raises(FormatError):
        session.result(timeout=5.0)


def test_cancel_blocked_session_yields_cancelled_and_no_late_callbacks() -> None:
    gate = threading.Event()
    first_block = threading.Event()

    def hold_first_block(source_id: str, index: int) -> None:
        if index == 0:
            first_block.set()
            gate.wait(5.0)

    provider = MemoryStreamProvider(
        {"cap": payload_bytes(list(range(1000)))}, block_bytes=64, on_block=hold_first_block
    )
    ingestor = ChunkedIngestor(provider, chunk_size=100)
    chunks: list[int] = []

    session = start_ingest(ingestor, "cap", on_chunk=lambda chunk, total: chunks.append(total))
    assert first_block.wait(5.0)
    session.cancel()
    gate.set()
    outcome = session.result(timeout=5.0)

    assert isinstance(outcome, Cancelled)
    assert chunks == []
    assert provider.opened[0].closed


def test_slow_consumer_does_not_stall_cancellation() -> None:
    release = threading.Event()
    first_chunk = threading.Event()
    totals: list[int] = []

    def slow_chunk(chunk: np.ndarray, total: int) -> None:
        totals.append(total)
        first_chunk.set()
        release.wait(5.0)

    ingestor = ChunkedIngestor(
        MemoryStreamProvider({"cap": payload_bytes(list(range(2000)))}, block_bytes=4096),
        chunk_size=10,
    )
    session = start_ingest(ingestor, "cap", on_chunk=slow_chunk, channel_size=1)

    assert first_chunk.wait(5.0)
    session.cancel()
    release.set()
    outcome = session.result(timeout=5.0)

    assert isinstance(outcome, Cancelled)
    assert totals == [10]
