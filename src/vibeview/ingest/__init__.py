"""Payload ingestion: transports, decoding, normalization and sessions.

- :mod:`transport` resolves a source id to a byte stream (file or HTTP).
- :mod:`normalize` flattens the accepted JSON shapes into one sample array.
- :mod:`ingestor` drives download, parsing and chunked accumulation.
- :mod:`session` runs an ingestor on background threads behind a bounded channel.
"""

from .cancellation import CancellationToken
from .errors import FormatError, IngestError, NetworkError, ParseError
from .ingestor import ChunkedIngestor, ProgressTracker, provider_for
from .normalize import normalize_payload
from .session import IngestEvent, IngestSession, start_ingest
from .transport import FileStreamProvider, HttpStreamProvider

__all__ = [
    "CancellationToken",
    "IngestError",
    "NetworkError",
    "ParseError",
    "FormatError",
    "ChunkedIngestor",
    "ProgressTracker",
    "provider_for",
    "normalize_payload",
    "IngestEvent",
    "IngestSession",
    "start_ingest",
    "FileStreamProvider",
    "HttpStreamProvider",
]
