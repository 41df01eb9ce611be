from __future__ import annotations

import json
from pathlib import Path

import pytest

from vibeview.dataio.manifest import ManifestCatalog, source_ids_from_manifest


def test_manifest_lists_sorted_unique_json_sources(tmp_path: Path) -> None:
    manifest = {
        "files": ["VIB_002.json", "K9252607546.json", "manifest.json", "notes.txt", "VIB_002.json", 7]
    }
    (tmp_path / "manifest.json").write_text(json.dumps(manifest), encoding="utf-8")

    assert ManifestCatalog(tmp_path).list_sources() == ["K9252607546", "VIB_002"]


def test_missing_manifest_lists_nothing(tmp_path: Path) -> None:
    assert ManifestCatalog(tmp_path).list_sources() == []


def test_manifest_must_be_an_object(tmp_path: Path) -> None:
    (tmp_path / "manifest.json").write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        ManifestCatalog(tmp_path).list_sources()


def test_manifest_without_files_array() -> None:
    assert source_ids_from_manifest({"files": "a.json"}) == []
    assert source_ids_from_manifest({}) == []
