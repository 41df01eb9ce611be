"""Source listing from an explicit ``manifest.json``.

The manifest lives next to the payloads and names them::

    {"files": ["K9252607546.json", "VIB_001.json"]}

Only the manifest is consulted; nothing probes the dataset root for files
that might exist.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


def source_ids_from_manifest(manifest: Mapping[str, Any]) -> List[str]:
    """Return sorted, de-duplicated source ids named by a parsed manifest."""
    files = manifest.get("files") if isinstance(manifest, Mapping) else None
    if not isinstance(files, list):
        return []
    ids = {
        name[: -len(".json")]
        for name in files
        if isinstance(name, str) and name.endswith(".json") and name != MANIFEST_NAME
    }
    ids.discard("")
    return sorted(ids)


class ManifestCatalog:
    """List sources from ``<root>/manifest.json``; a missing manifest lists nothing."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_NAME

    def list_sources(self) -> List[str]:
        path = self.manifest_path
        if not path.exists():
            logger.info("No manifest at %s", path)
            return []
        with path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, Mapping):
            raise ValueError(f"Expected object in {path}, got {type(raw).__name__}")
        return source_ids_from_manifest(raw)


__all__ = [
    "ManifestCatalog",
    "source_ids_from_manifest",
    "MANIFEST_NAME",
]
