"""Flatten the accepted JSON payload shapes into one float64 sample array.

Three shapes are recognised::

    [0.1, 0.2, ...]                          # plain numbers
    [{"vibration": 0.1}, {"vibration": 0.2}] # objects with a vibration field
    {"values": [0.1, 0.2, ...]}              # object wrapping a values array

Anything else, including a shape that yields no samples, is a
:class:`~vibeview.ingest.errors.FormatError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Sequence

import numpy as np

from .errors import FormatError

logger = logging.getLogger(__name__)

VIBRATION_FIELD = "vibration"
VALUES_FIELD = "values"


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a sample.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _numbers_to_array(items: Sequence[Any], where: str) -> np.ndarray:
    for pos, item in enumerate(items):
        if not _is_number(item):
            raise FormatError(f"{where}[{pos}] is not a number: {item!r}")
    return np.asarray(items, dtype=np.float64)


def _vibration_records_to_array(items: Sequence[Any]) -> np.ndarray:
    out = np.empty(len(items), dtype=np.float64)
    for pos, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise FormatError(f"payload[{pos}] is not an object: {item!r}")
        value = item.get(VIBRATION_FIELD)
        if not _is_number(value):
            raise FormatError(f"payload[{pos}] has no numeric {VIBRATION_FIELD!r} field")
        out[pos] = value
    return out


def normalize_payload(payload: Any) -> np.ndarray:
    """
    Convert a parsed JSON document to a flat array of samples.

    Raises
    ------
    FormatError
        If the document has an unrecognised shape or yields zero samples.
    """
    if isinstance(payload, list):
        if not payload:
            raise FormatError("payload array is empty")
        if isinstance(payload[0], Mapping):
            values = _vibration_records_to_array(payload)
        else:
            values = _numbers_to_array(payload, "payload")
    elif isinstance(payload, Mapping):
        raw = payload.get(VALUES_FIELD)
        if not isinstance(raw, list):
            raise FormatError(
                f"payload object has no {VALUES_FIELD!r} array (keys: {sorted(map(str, payload))})"
            )
        values = _numbers_to_array(raw, VALUES_FIELD)
    else:
        raise FormatError(f"unsupported payload type {type(payload).__name__}")

    if values.size == 0:
        raise FormatError("payload contains no samples")
    logger.debug("Normalized payload to %d samples", values.size)
    return values


__all__ = ["normalize_payload", "VIBRATION_FIELD", "VALUES_FIELD"]
