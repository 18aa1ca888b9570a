"""Tests for recommendation snapshot recording."""

import logging

import pytest

from xref_mcp import recorder as recorder_module
from xref_mcp.recorder import CachedToggle, LoggingRecorder, NullRecorder, cap_snapshot, default_recorder, safe_record


def _snapshot(n: int) -> dict:
    return {
        "source": {"mpn": "SRC"},
        "family_id": "52",
        "recommendations": [{"part": {"mpn": f"C{i}"}} for i in range(n)],
    }


class TestCachedToggle:
    """Tests for CachedToggle."""

    def test_caches_within_ttl(self):
        calls = []

        def check():
            calls.append(1)
            return True

        toggle = CachedToggle(check, ttl=60)
        assert toggle() is True
        assert toggle() is True
        assert len(calls) == 1

    def test_refreshes_after_ttl(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr(recorder_module.time, "time", lambda: now[0])
        values = iter([True, False])
        toggle = CachedToggle(lambda: next(values), ttl=60)

        assert toggle() is True
        now[0] += 59
        assert toggle() is True
        now[0] += 2
        assert toggle() is False

    def test_invalidate(self):
        values = iter([False, True])
        toggle = CachedToggle(lambda: next(values), ttl=60)
        assert toggle() is False
        toggle.invalidate()
        assert toggle() is True


class TestCapSnapshot:
    """Tests for cap_snapshot."""

    def test_under_cap_unchanged(self):
        snap = _snapshot(3)
        assert cap_snapshot(snap, 10) is snap

    def test_capped(self):
        snap = _snapshot(25)
        capped = cap_snapshot(snap, 10)
        assert len(capped["recommendations"]) == 10
        assert capped["recommendation_count"] == 25
        assert capped["recommendations"][0]["part"]["mpn"] == "C0"
        # Input left alone
        assert len(snap["recommendations"]) == 25


class TestLoggingRecorder:
    """Tests for LoggingRecorder."""

    def test_logs_when_enabled(self, caplog):
        rec = LoggingRecorder(lambda: True, max_recs=10)
        with caplog.at_level(logging.INFO, logger="xref_mcp.recorder"):
            rec.record(_snapshot(12))
        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert "SRC" in record.getMessage()
        assert len(record.snapshot["recommendations"]) == 10

    def test_silent_when_disabled(self, caplog):
        rec = LoggingRecorder(lambda: False)
        with caplog.at_level(logging.INFO, logger="xref_mcp.recorder"):
            rec.record(_snapshot(2))
        assert caplog.records == []

    @pytest.mark.parametrize("flag,expected", [("true", 1), ("1", 1), ("false", 0), ("", 0)])
    def test_default_recorder_reads_env(self, monkeypatch, caplog, flag: str, expected: int):
        monkeypatch.setenv("XREF_QC_LOGGING", flag)
        rec = default_recorder()
        with caplog.at_level(logging.INFO, logger="xref_mcp.recorder"):
            rec.record(_snapshot(1))
        assert len(caplog.records) == expected


class TestSafeRecord:
    """Recorder failures never propagate."""

    def test_failure_is_logged(self, caplog):
        class Broken:
            def record(self, snapshot):
                raise RuntimeError("disk full")

        with caplog.at_level(logging.WARNING, logger="xref_mcp.recorder"):
            safe_record(Broken(), _snapshot(1))
        assert "disk full" in caplog.text

    def test_null_recorder(self):
        assert NullRecorder().record(_snapshot(1)) is None
