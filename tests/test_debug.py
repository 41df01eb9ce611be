from __future__ import annotations

import logging

from vibeview.tools import debug


def test_time_block_logs_elapsed_when_enabled(monkeypatch, caplog) -> None:
    monkeypatch.setattr(debug, "DEBUG_VIBEVIEW", True)

    with caplog.at_level(logging.DEBUG, logger="vibeview.tools.debug"):
        with debug.time_block("lttb on cap"):
            pass

    assert any("lttb on cap took" in rec.getMessage() for rec in caplog.records)


def test_time_block_is_silent_when_disabled(monkeypatch, caplog) -> None:
    monkeypatch.setattr(debug, "DEBUG_VIBEVIEW", False)

    with caplog.at_level(logging.DEBUG, logger="vibeview.tools.debug"):
        with debug.time_block("spectrum on cap"):
            pass

    assert not caplog.records
