"""Exceptions raised while turning a source id into a dataset."""

from __future__ import annotations

from typing import Optional


class IngestError(Exception):
    """Base class for terminal ingestion failures."""


class NetworkError(IngestError):
    """The transport failed or answered with a non-success status."""

    def __init__(self, detail: str, *, status: Optional[int] = None) -> None:
        self.status = status
        self.detail = detail
        if status is None:
            super().__init__(detail)
        else:
            super().__init__(f"HTTP {status}: {detail}")


class ParseError(IngestError):
    """The payload is not valid UTF-8 JSON."""


class FormatError(IngestError):
    """The payload is valid JSON but not one of the accepted shapes."""


__all__ = ["IngestError", "NetworkError", "ParseError", "FormatError"]
