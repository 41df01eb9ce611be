"""Byte-stream providers that resolve a source id to ``<root>/<source_id>.json``.

Two backends are available:

- :class:`FileStreamProvider` reads from a local dataset directory.
- :class:`HttpStreamProvider` streams from a web server via ``requests``.

Both report the expected payload size when it is known so the ingestor can
estimate download progress, and both surface every transport problem as
:class:`~vibeview.ingest.errors.NetworkError`.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Protocol

import requests

from .errors import NetworkError

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_BYTES = 64 * 1024

# Source ids become file names; only allow alphanumerics, underscore, dot, and dash.
_SOURCE_ID_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")


def validate_source_id(source_id: str) -> str:
    """Return ``source_id`` stripped, or raise ``ValueError`` if it cannot name a file."""
    cleaned = str(source_id).strip()
    if not cleaned or not _SOURCE_ID_RE.match(cleaned) or ".." in cleaned:
        raise ValueError(f"invalid source id {source_id!r}")
    return cleaned


class ByteStream(Protocol):
    """An open payload transfer: iterate for byte blocks, always close."""

    expected_bytes: Optional[int]

    def __iter__(self) -> Iterator[bytes]:  # pragma: no cover - protocol
        ...

    def close(self) -> None:  # pragma: no cover - protocol
        ...


class ByteStreamProvider(Protocol):
    def open(self, source_id: str) -> ByteStream:  # pragma: no cover - protocol
        ...


class FileByteStream:
    """Block reader over a local payload file."""

    def __init__(self, fh: BinaryIO, expected_bytes: Optional[int], block_bytes: int) -> None:
        self._fh = fh
        self.expected_bytes = expected_bytes
        self._block_bytes = block_bytes

    def __iter__(self) -> Iterator[bytes]:
        while True:
            try:
                block = self._fh.read(self._block_bytes)
            except OSError as exc:
                raise NetworkError(f"read failed: {exc}") from exc
            if not block:
                return
            yield block

    def close(self) -> None:
        self._fh.close()


class FileStreamProvider:
    """Serve ``<root>/<source_id>.json`` from the local filesystem."""

    def __init__(self, root: str | Path, *, block_bytes: int = DEFAULT_BLOCK_BYTES) -> None:
        self.root = Path(root).expanduser()
        self._block_bytes = max(1, int(block_bytes))

    def path_for(self, source_id: str) -> Path:
        return self.root / f"{validate_source_id(source_id)}.json"

    def open(self, source_id: str) -> FileByteStream:
        path = self.path_for(source_id)
        try:
            fh = path.open("rb")
        except FileNotFoundError as exc:
            raise NetworkError(f"no payload for {source_id!r} at {path}", status=404) from exc
        except OSError as exc:
            raise NetworkError(f"cannot open {path}: {exc}") from exc
        try:
            size: Optional[int] = path.stat().st_size
        except OSError:
            size = None
        logger.debug("Opened %s (%s bytes)", path, size)
        return FileByteStream(fh, size, self._block_bytes)


class HttpByteStream:
    """Chunked body of a streaming ``requests`` response."""

    def __init__(self, response: requests.Response, block_bytes: int) -> None:
        self._response = response
        self._block_bytes = block_bytes
        self.expected_bytes = _content_length(response)

    def __iter__(self) -> Iterator[bytes]:
        try:
            for block in self._response.iter_content(chunk_size=self._block_bytes):
                if block:
                    yield block
        except requests.RequestException as exc:
            raise NetworkError(f"transfer interrupted: {exc}") from exc

    def close(self) -> None:
        self._response.close()


def _content_length(response: requests.Response) -> Optional[int]:
    raw = response.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


class HttpStreamProvider:
    """
    Fetch ``<base_url>/<source_id>.json`` with a streaming GET.

    No timeout is applied unless one is configured; a stalled server only
    surfaces as an error when ``requests`` itself reports a failure.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float | None = None,
        block_bytes: int = DEFAULT_BLOCK_BYTES,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout
        self._block_bytes = max(1, int(block_bytes))

    def url_for(self, source_id: str) -> str:
        return f"{self.base_url}/{validate_source_id(source_id)}.json"

    def open(self, source_id: str) -> HttpByteStream:
        url = self.url_for(source_id)
        try:
            response = self._session.get(
                url,
                headers={"Accept": "application/json", "Cache-Control": "no-store"},
                stream=True,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise NetworkError(f"GET {url} failed: {exc}") from exc

        if not response.ok:
            status = response.status_code
            reason = response.reason or "request failed"
            response.close()
            raise NetworkError(reason, status=status)
        return HttpByteStream(response, self._block_bytes)

    def close(self) -> None:
        self._session.close()


__all__ = [
    "ByteStream",
    "ByteStreamProvider",
    "FileByteStream",
    "FileStreamProvider",
    "HttpByteStream",
    "HttpStreamProvider",
    "DEFAULT_BLOCK_BYTES",
    "validate_source_id",
]
