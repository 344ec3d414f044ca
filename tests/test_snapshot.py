"""Tests for best-effort snapshot documents."""

import asyncio
import json
import logging

from digital_tick.services.utils.snapshot import SnapshotDocument


class TestLoad:
    """Missing or damaged documents load as empty."""

    def test_missing_file_loads_empty(self, tmp_path):
        assert SnapshotDocument(tmp_path / "absent.json").load() == {}

    def test_corrupt_file_loads_empty(self, tmp_path, caplog):
        path = tmp_path / "usage.json"
        path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            assert SnapshotDocument(path, "usage").load() == {}
        assert "starting empty" in caplog.text

    def test_non_object_document_loads_empty(self, tmp_path):
        path = tmp_path / "usage.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert SnapshotDocument(path).load() == {}

    def test_reads_written_document(self, tmp_path):
        path = tmp_path / "usage.json"
        path.write_text(json.dumps({"u": {"period": "2025-01", "count": 2}}), encoding="utf-8")
        assert SnapshotDocument(path).load() == {"u": {"period": "2025-01", "count": 2}}


class TestWrite:
    """Writes are whole-document and never raise."""

    def test_write_without_event_loop_is_immediate(self, tmp_path):
        path = tmp_path / "nested" / "history.json"
        document = SnapshotDocument(path)

        document.schedule_write({"a": 1})

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": 1}
        assert not path.with_name("history.json.tmp").exists()

    def test_write_inside_event_loop_runs_in_background(self, tmp_path):
        path = tmp_path / "usage.json"
        document = SnapshotDocument(path)

        async def scenario():
            document.schedule_write({"first": 1})
            document.schedule_write({"second": 2})
            await document.drain()
            return document.pending_writes

        assert asyncio.run(scenario()) == 0
        assert json.loads(path.read_text(encoding="utf-8")) == {"second": 2}

    def test_older_snapshot_never_overwrites_newer(self, tmp_path):
        path = tmp_path / "usage.json"
        document = SnapshotDocument(path)

        document._write_safely(2, {"version": 2})
        document._write_safely(1, {"version": 1})

        assert json.loads(path.read_text(encoding="utf-8")) == {"version": 2}

    def test_failed_write_is_logged_not_raised(self, tmp_path, caplog):
        # The target path is a directory, so the final rename fails
        target = tmp_path / "usage.json"
        target.mkdir()
        document = SnapshotDocument(target, "usage")

        with caplog.at_level(logging.ERROR):
            document.schedule_write({"a": 1})

        assert "Failed to persist usage snapshot" in caplog.text
        assert target.is_dir()

    def test_unserializable_payload_is_logged_not_raised(self, tmp_path, caplog):
        document = SnapshotDocument(tmp_path / "usage.json", "usage")

        with caplog.at_level(logging.ERROR):
            document.schedule_write({"bad": object()})

        assert "Failed to persist usage snapshot" in caplog.text
