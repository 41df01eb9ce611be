"""Background ingest sessions with a bounded producer/consumer channel.

Each session runs two daemon threads::

    producer: ChunkedIngestor.ingest --[bounded queue of IngestEvent]--> consumer
    consumer: invokes on_progress/on_chunk, then resolves the session future

The producer never waits on a full channel without re-checking the
cancellation token, so a slow consumer cannot stall cancellation, and the
consumer drops every queued progress/chunk event once the token has fired.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from queue import Full, Queue
from typing import Callable, Optional

import numpy as np

from .cancellation import CancellationToken
from .ingestor import ChunkCallback, ChunkedIngestor, IngestOutcome, ProgressCallback

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_SIZE = 8
_PUT_POLL_S = 0.05

CompletionHook = Callable[["IngestSession", IngestOutcome], None]


@dataclass(frozen=True, slots=True)
class IngestEvent:
    """One message on the session channel."""

    kind: str  # "progress", "chunk", "done" or "error"
    percent: Optional[float] = None
    chunk: Optional[np.ndarray] = None
    cumulative: Optional[int] = None
    outcome: Optional[IngestOutcome] = None
    error: Optional[BaseException] = None

    @property
    def terminal(self) -> bool:
        return self.kind in ("done", "error")


class IngestSession:
    """
    Handle for one in-flight ingestion.

    Use :meth:`result` to wait for the outcome (a dataset or
    :class:`~vibeview.core.models.Cancelled`); ingest errors are re-raised
    from it.
    """

    def __init__(
        self,
        ingestor: ChunkedIngestor,
        source_id: str,
        *,
        token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_chunk: Optional[ChunkCallback] = None,
        on_complete: Optional[CompletionHook] = None,
        channel_size: int = DEFAULT_CHANNEL_SIZE,
    ) -> None:
        self.source_id = source_id
        self.token = token or CancellationToken()
        self._ingestor = ingestor
        self._on_progress = on_progress
        self._on_chunk = on_chunk
        self._on_complete = on_complete
        self._channel: Queue[IngestEvent] = Queue(maxsize=max(1, int(channel_size)))
        self._future: Future[IngestOutcome] = Future()
        self._producer = threading.Thread(
            target=self._produce,
            name=f"VibeViewIngest({source_id})",
            daemon=True,
        )
        self._consumer = threading.Thread(
            target=self._consume,
            name=f"VibeViewDeliver({source_id})",
            daemon=True,
        )

    def start(self) -> "IngestSession":
        self._consumer.start()
        self._producer.start()
        return self

    # ----------------------------------------------------------------- control
    def cancel(self) -> None:
        """Signal the token; the session finishes with a Cancelled outcome."""
        self.token.cancel()

    def is_alive(self) -> bool:
        return self._producer.is_alive() or self._consumer.is_alive()

    def done(self) -> bool:
        return self._future.done()

    def join(self, timeout: Optional[float] = None) -> None:
        self._producer.join(timeout)
        self._consumer.join(timeout)

    def result(self, timeout: Optional[float] = None) -> IngestOutcome:
        """Block until the session finishes and return its outcome."""
        return self._future.result(timeout)

    def add_done_callback(self, fn: Callable[[Future], None]) -> None:
        self._future.add_done_callback(fn)

    # ---------------------------------------------------------------- producer
    def _offer(self, event: IngestEvent) -> None:
        """Blocking put that gives up once the session is cancelled."""
        while not self.token.cancelled:
            try:
                self._channel.put(event, timeout=_PUT_POLL_S)
                return
            except Full:
                continue

    def _produce(self) -> None:
        try:
            outcome = self._ingestor.ingest(
                self.source_id,
                on_progress=lambda percent: self._offer(IngestEvent("progress", percent=percent)),
                on_chunk=lambda chunk, total: self._offer(
                    IngestEvent("chunk", chunk=chunk, cumulative=total)
                ),
                token=self.token,
            )
        except Exception as exc:
            logger.warning("Ingestion of %s failed: %s", self.source_id, exc)
            self._channel.put(IngestEvent("error", error=exc))
        else:
            self._channel.put(IngestEvent("done", outcome=outcome))

    # ---------------------------------------------------------------- consumer
    def _consume(self) -> None:
        while True:
            event = self._channel.get()
            if event.terminal:
                self._finish(event)
                return
            if self.token.cancelled:
                continue
            try:
                if event.kind == "progress" and self._on_progress is not None:
                    self._on_progress(event.percent)
                elif event.kind == "chunk" and self._on_chunk is not None:
                    self._on_chunk(event.chunk, event.cumulative)
            except Exception:
                logger.exception("Error in %s callback for %s", event.kind, self.source_id)

    def _finish(self, event: IngestEvent) -> None:
        if event.error is not None:
            self._future.set_exception(event.error)
            return
        if self._on_complete is not None:
            try:
                self._on_complete(self, event.outcome)
            except Exception as exc:
                logger.exception("Completion hook failed for %s", self.source_id)
                self._future.set_exception(exc)
                return
        self._future.set_result(event.outcome)


def start_ingest(
    ingestor: ChunkedIngestor,
    source_id: str,
    *,
    token: Optional[CancellationToken] = None,
    on_progress: Optional[ProgressCallback] = None,
    on_chunk: Optional[ChunkCallback] = None,
    on_complete: Optional[CompletionHook] = None,
    channel_size: int = DEFAULT_CHANNEL_SIZE,
) -> IngestSession:
    """
    Start ingesting ``source_id`` on background threads and return the handle.
    """
    session = IngestSession(
        ingestor,
        source_id,
        token=token,
        on_progress=on_progress,
        on_chunk=on_chunk,
        on_complete=on_complete,
        channel_size=channel_size,
    )
    return session.start()


__all__ = ["IngestEvent", "IngestSession", "start_ingest", "DEFAULT_CHANNEL_SIZE"]
