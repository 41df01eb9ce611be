"""Runtime configuration helpers for the ingestion/analysis pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

# repo_root points at the project root (one level above src/)
REPO_ROOT = Path(__file__).resolve().parents[3]
DATA_ROOT_ENV = "VIBEVIEW_DATA_ROOT"


def default_dataset_root() -> Path:
    """
    Directory holding ``<source_id>.json`` payloads and ``manifest.json``.

    ``VIBEVIEW_DATA_ROOT`` overrides the repository-relative default.
    """
    env_root = os.environ.get(DATA_ROOT_ENV)
    if env_root:
        return Path(env_root).expanduser()
    return REPO_ROOT / "data" / "vibrationjson"


@dataclass(slots=True)
class VibeViewConfig:
    """
    Tuning knobs for how payloads are fetched, chunked, and reduced.

    The defaults match the 25.6 kHz accelerometer captures the viewer was
    built around: 100k-sample chunks, a 15000-point plot (10000 above a
    million samples) and a 4096-sample spectrum preview.
    """

    dataset_root: Path = field(default_factory=default_dataset_root)
    base_url: Optional[str] = None
    http_timeout_s: Optional[float] = None

    chunk_size: int = 100_000
    read_block_bytes: int = 64 * 1024
    yield_every: int = 3
    sampling_rate_hz: float = 25_600.0

    # None picks the point count from the dataset size.
    display_threshold: Optional[int] = None
    max_fft_bins: int = 4096

    # Thread bridge sizing
    channel_size: int = 8

    def sanitized(self) -> VibeViewConfig:
        """Return a copy with derived limits applied."""
        timeout = self.http_timeout_s
        if timeout is not None:
            timeout = max(0.1, float(timeout))
        base_url = (self.base_url or "").strip() or None
        return replace(
            self,
            dataset_root=Path(self.dataset_root).expanduser(),
            base_url=base_url,
            http_timeout_s=timeout,
            chunk_size=max(1, int(self.chunk_size)),
            read_block_bytes=max(1, int(self.read_block_bytes)),
            yield_every=max(1, int(self.yield_every)),
            sampling_rate_hz=max(1e-6, float(self.sampling_rate_hz)),
            display_threshold=(
                None if self.display_threshold is None else max(0, int(self.display_threshold))
            ),
            max_fft_bins=max(1, int(self.max_fft_bins)),
            channel_size=max(1, int(self.channel_size)),
        )


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`VibeViewConfig`."""
    return {f.name for f in fields(VibeViewConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten known nesting patterns (e.g. top-level ``ingest`` key)."""
    if "ingest" in data and isinstance(data["ingest"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "ingest":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> VibeViewConfig:
    """Build :class:`VibeViewConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return VibeViewConfig().sanitized()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return VibeViewConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> VibeViewConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`VibeViewConfig`.
    """
    if path is None:
        return VibeViewConfig().sanitized()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return VibeViewConfig().sanitized()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = [
    "VibeViewConfig",
    "config_from_mapping",
    "load_config",
    "default_dataset_root",
    "DATA_ROOT_ENV",
]
