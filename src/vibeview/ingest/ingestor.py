"""Chunked ingestion of a monolithic JSON payload into a :class:`VibrationDataset`.

Progress is split in two halves: the download covers 0-50 % (only when the
transport knows the payload size) and chunked accumulation covers 50-100 %.
The cancellation token is polled after every network read and before every
chunk, so a cancelled session stops within one block or one chunk of work.
"""

from __future__ import annotations

import codecs
import json
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Union

import numpy as np

from ..config import VibeViewConfig
from ..core.models import Cancelled, IngestProgress, VibrationDataset
from .cancellation import CancellationToken
from .errors import ParseError
from .normalize import normalize_payload
from .transport import ByteStream, ByteStreamProvider, FileStreamProvider, HttpStreamProvider

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 100_000
DEFAULT_YIELD_EVERY = 3
DEFAULT_SAMPLING_RATE_HZ = 25_600.0
DOWNLOAD_SHARE = 50.0

ProgressCallback = Callable[[float], None]
ChunkCallback = Callable[[np.ndarray, int], None]
IngestOutcome = Union[VibrationDataset, Cancelled]


def _reject_constant(token: str) -> float:
    # NaN, Infinity and -Infinity are not part of JSON.
    raise ParseError(f"invalid JSON constant {token!r}")


class ProgressTracker:
    """Clamp reported percentages to ``[0, 100]`` and never let them go backwards."""

    __slots__ = ("_callback", "_value")

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._callback = callback
        self._value = 0.0

    @property
    def value(self) -> float:
        return self._value

    def report(self, percent: float) -> None:
        self._value = max(self._value, min(100.0, max(0.0, float(percent))))
        if self._callback is not None:
            self._callback(self._value)


def provider_for(cfg: VibeViewConfig) -> ByteStreamProvider:
    """HTTP when ``base_url`` is configured, otherwise the local dataset root."""
    if cfg.base_url:
        return HttpStreamProvider(
            cfg.base_url,
            timeout=cfg.http_timeout_s,
            block_bytes=cfg.read_block_bytes,
        )
    return FileStreamProvider(cfg.dataset_root, block_bytes=cfg.read_block_bytes)


class ChunkedIngestor:
    """
    Turn a source id into a complete dataset, one chunk at a time.

    The ingestor itself is stateless between calls: every :meth:`ingest`
    re-fetches and re-parses the payload and owns a fresh accumulation
    buffer, so several sessions may share one instance.
    """

    def __init__(
        self,
        provider: ByteStreamProvider,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        yield_every: int = DEFAULT_YIELD_EVERY,
        sampling_rate_hz: float = DEFAULT_SAMPLING_RATE_HZ,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size}")
        if sampling_rate_hz <= 0:
            raise ValueError(f"sampling_rate_hz must be > 0, got {sampling_rate_hz}")
        self.provider = provider
        self.chunk_size = int(chunk_size)
        self.yield_every = max(1, int(yield_every))
        self.sampling_rate_hz = float(sampling_rate_hz)

    @classmethod
    def from_config(cls, cfg: VibeViewConfig, provider: ByteStreamProvider | None = None) -> "ChunkedIngestor":
        normalized = cfg.sanitized()
        return cls(
            provider or provider_for(normalized),
            chunk_size=normalized.chunk_size,
            yield_every=normalized.yield_every,
            sampling_rate_hz=normalized.sampling_rate_hz,
        )

    def ingest(
        self,
        source_id: str,
        on_progress: Optional[ProgressCallback] = None,
        on_chunk: Optional[ChunkCallback] = None,
        token: Optional[CancellationToken] = None,
    ) -> IngestOutcome:
        """
        Fetch, decode, normalize and accumulate the payload for ``source_id``.

        Returns the dataset on success or :class:`Cancelled` when ``token``
        fires; no callback runs after the cancellation is observed.

        Raises
        ------
        NetworkError
            Transport failure or non-success status.
        ParseError
            Payload is not valid UTF-8 JSON.
        FormatError
            Payload is JSON of an unsupported shape, or holds no samples.
        """
        token = token or CancellationToken()
        progress = ProgressTracker(on_progress)
        started = time.perf_counter()
        if token.cancelled:
            return self._cancelled(source_id, progress)

        stream = self.provider.open(source_id)
        try:
            logger.info(
                "Ingesting %s (%s bytes expected)",
                source_id,
                stream.expected_bytes if stream.expected_bytes else "unknown",
            )
            text = self._download(stream, progress, token)
        finally:
            stream.close()
        if text is None:
            return self._cancelled(source_id, progress)

        try:
            payload = json.loads(text, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            raise ParseError(f"{source_id}: invalid JSON ({exc})") from exc
        del text

        values = normalize_payload(payload)
        del payload

        dataset = self._accumulate(source_id, values, progress, token, on_chunk)
        if dataset is None:
            return self._cancelled(source_id, progress)

        logger.info(
            "Ingested %s: %d samples in %.2f s",
            source_id,
            len(dataset),
            time.perf_counter() - started,
        )
        return dataset

    def _download(
        self,
        stream: ByteStream,
        progress: ProgressTracker,
        token: CancellationToken,
    ) -> Optional[str]:
        decoder = codecs.getincrementaldecoder("utf-8")()
        parts: list[str] = []
        received = 0
        expected = stream.expected_bytes

        try:
            for block in stream:
                if token.cancelled:
                    return None
                received += len(block)
                parts.append(decoder.decode(block))
                if expected:
                    progress.report(min(1.0, received / expected) * DOWNLOAD_SHARE)
            parts.append(decoder.decode(b"", final=True))
        except UnicodeDecodeError as exc:
            raise ParseError(f"payload is not valid UTF-8: {exc}") from exc

        if token.cancelled:
            return None
        logger.debug("Downloaded %d bytes", received)
        progress.report(DOWNLOAD_SHARE)
        return "".join(parts)

    def _accumulate(
        self,
        source_id: str,
        values: np.ndarray,
        progress: ProgressTracker,
        token: CancellationToken,
        on_chunk: Optional[ChunkCallback],
    ) -> Optional[VibrationDataset]:
        total = values.size
        buffer = np.empty(total, dtype=np.float64)
        cumulative = 0

        for index, start in enumerate(range(0, total, self.chunk_size)):
            if token.cancelled:
                return None
            end = min(total, start + self.chunk_size)
            buffer[start:end] = values[start:end]
            cumulative = end

            chunk = buffer[start:end]
            chunk.flags.writeable = False
            if on_chunk is not None:
                if token.cancelled:
                    return None
                on_chunk(chunk, cumulative)
            if token.cancelled:
                return None
            progress.report(DOWNLOAD_SHARE + (cumulative / total) * (100.0 - DOWNLOAD_SHARE))
            logger.debug("%s: chunk %d, %d/%d samples", source_id, index + 1, cumulative, total)

            if (index + 1) % self.yield_every == 0:
                # Give other threads (consumer, UI) the interpreter.
                time.sleep(0)

        return VibrationDataset(
            source_id=source_id,
            values=buffer,
            sampling_rate_hz=self.sampling_rate_hz,
            captured_at=datetime.now(timezone.utc),
        )

    @staticmethod
    def _cancelled(source_id: str, progress: ProgressTracker) -> Cancelled:
        logger.info("Ingestion of %s cancelled at %.1f%%", source_id, progress.value)
        return Cancelled(
            source_id=source_id,
            progress=IngestProgress(percent=progress.value, cancelled=True),
        )


__all__ = [
    "ChunkedIngestor",
    "ProgressTracker",
    "provider_for",
    "IngestOutcome",
    "ProgressCallback",
    "ChunkCallback",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_YIELD_EVERY",
    "DEFAULT_SAMPLING_RATE_HZ",
]
