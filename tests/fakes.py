"""In-memory transports shared by the ingestion tests."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterator, List, Optional

from vibeview.ingest.errors import NetworkError

BlockHook = Callable[[str, int], None]


def payload_bytes(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


class MemoryStream:
    def __init__(
        self,
        source_id: str,
        data: bytes,
        *,
        block_bytes: int,
        expected_bytes: Optional[int],
        on_block: Optional[BlockHook],
    ) -> None:
        self.source_id = source_id
        self._data = data
        self._block_bytes = block_bytes
        self.expected_bytes = expected_bytes
        self._on_block = on_block
        self.closed = False
        self.blocks_read = 0

    def __iter__(self) -> Iterator[bytes]:
        for start in range(0, len(self._data), self._block_bytes):
            block = self._data[start : start + self._block_bytes]
            if self._on_block is not None:
                self._on_block(self.source_id, self.blocks_read)
            self.blocks_read += 1
            yield block

    def close(self) -> None:
        self.closed = True


class MemoryStreamProvider:
    """Serve payloads from a dict; remembers every stream it opened."""

    def __init__(
        self,
        payloads: Dict[str, bytes],
        *,
        block_bytes: int = 16,
        report_size: bool = True,
        on_block: Optional[BlockHook] = None,
    ) -> None:
        self.payloads = dict(payloads)
        self.block_bytes = block_bytes
        self.report_size = report_size
        self.on_block = on_block
        self.opened: List[MemoryStream] = []

    def open(self, source_id: str) -> MemoryStream:
        if source_id not in self.payloads:
            raise NetworkError(f"no payload for {source_id!r}", status=404)
        data = self.payloads[source_id]
        stream = MemoryStream(
            source_id,
            data,
            block_bytes=self.block_bytes,
            expected_bytes=len(data) if self.report_size else None,
            on_block=self.on_block,
        )
        self.opened.append(stream)
        return stream
