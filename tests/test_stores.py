"""Tests for the in-memory and file record stores."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from tasktally.adapters.file_store import FileRecordStore
from tasktally.adapters.memory_store import MemoryRecordStore
from tasktally.errors import StoreError
from tasktally.ports.record_store import NOTIFICATIONS, TASKS, Filter, Order, eq, gte, lte


class FailingCommit(MemoryRecordStore):
    def _commit(self, table, rows):
        raise StoreError("write failed")


@pytest.fixture
def store():
    s = MemoryRecordStore()
    s.insert(TASKS, {"title": "b", "position": 1, "user_id": "u1", "completed_at": "2025-01-15T10:00:00+00:00"})
    s.insert(TASKS, {"title": "a", "position": 0, "user_id": "u1", "completed_at": None})
    s.insert(TASKS, {"title": "c", "position": 2, "user_id": "u2", "completed_at": "2025-01-15T05:00:00-05:00"})
    return s


class TestFilter:
    def test_rejects_unknown_operator(self):
        with pytest.raises(ValueError):
            Filter("title", "like", "%milk%")


class TestMemoryRecordStore:
    def test_insert_generates_id_and_created_at(self):
        s = MemoryRecordStore()
        row = s.insert(TASKS, {"title": "x"})
        assert row["id"]
        assert row["created_at"]

    def test_insert_keeps_given_created_at(self):
        s = MemoryRecordStore()
        row = s.insert(TASKS, {"title": "x", "created_at": "2025-01-15T10:00:00+00:00"})
        assert row["created_at"] == "2025-01-15T10:00:00+00:00"

    def test_select_equality(self, store):
        assert [r["title"] for r in store.select(TASKS, [eq("user_id", "u1")])] == ["b", "a"]

    def test_select_order(self, store):
        rows = store.select(TASKS, order=Order("position"))
        assert [r["title"] for r in rows] == ["a", "b", "c"]
        rows = store.select(TASKS, order=Order("position", descending=True))
        assert [r["title"] for r in rows] == ["c", "b", "a"]

    def test_range_compares_instants_not_text(self, store):
        # "c" completed at 10:00 UTC expressed with a -05:00 offset
        rows = store.select(
            TASKS,
            [gte("completed_at", "2025-01-15T10:00:00+00:00"), lte("completed_at", "2025-01-15T10:00:00+00:00")],
        )
        assert sorted(r["title"] for r in rows) == ["b", "c"]

    def test_range_skips_missing_values(self, store):
        rows = store.select(TASKS, [gte("completed_at", "2000-01-01T00:00:00+00:00")])
        assert "a" not in [r["title"] for r in rows]

    def test_nulls_sort_last(self, store):
        rows = store.select(TASKS, order=Order("completed_at", descending=True))
        assert rows[-1]["title"] == "a"

    def test_returns_copies(self, store):
        rows = store.select(TASKS)
        rows[0]["title"] = "changed"
        assert store.select(TASKS)[0]["title"] == "b"

    def test_update_counts_rows(self, store):
        assert store.update(TASKS, {"position": 9}, [eq("user_id", "u1")]) == 2
        assert store.update(TASKS, {"position": 9}, [eq("user_id", "nobody")]) == 0

    def test_delete_counts_rows(self, store):
        assert store.delete(TASKS, [eq("user_id", "u1")]) == 2
        assert [r["title"] for r in store.select(TASKS)] == ["c"]

    def test_unknown_table(self, store):
        with pytest.raises(StoreError):
            store.select("projects")


class TestFileRecordStore:
    def test_creates_dir(self, tmp_path):
        path = tmp_path / "nested" / "data"
        FileRecordStore(path)
        assert path.is_dir()

    def test_persists_between_instances(self, tmp_path):
        FileRecordStore(tmp_path).insert(TASKS, {"title": "Buy milk", "user_id": "u1"})
        reopened = FileRecordStore(tmp_path)
        assert [r["title"] for r in reopened.select(TASKS)] == ["Buy milk"]
        assert reopened.select(NOTIFICATIONS) == []

    def test_writes_json_per_table(self, tmp_path):
        store = FileRecordStore(tmp_path)
        store.insert(NOTIFICATIONS, {"title": "Task created"})
        data = json.loads((tmp_path / "notifications.json").read_text())
        assert data[0]["title"] == "Task created"
        assert json.loads((tmp_path / "tasks.json").read_text()) == []

    def test_update_and_delete_persist(self, tmp_path):
        store = FileRecordStore(tmp_path)
        row = store.insert(TASKS, {"title": "Buy milk", "completed": False})
        store.update(TASKS, {"completed": True}, [eq("id", row["id"])])
        assert FileRecordStore(tmp_path).select(TASKS)[0]["completed"] is True
        store.delete(TASKS, [eq("id", row["id"])])
        assert FileRecordStore(tmp_path).select(TASKS) == []

    def test_corrupt_file(self, tmp_path):
        (tmp_path / "tasks.json").write_text("{not json")
        with pytest.raises(StoreError, match="Corrupt"):
            FileRecordStore(tmp_path)

    def test_sees_writes_from_another_instance(self, tmp_path):
        first = FileRecordStore(tmp_path)
        second = FileRecordStore(tmp_path)
        row = second.insert(TASKS, {"title": "Buy milk", "completed": False})
        assert first.update(TASKS, {"completed": True}, [eq("id", row["id"])]) == 1
        assert second.select(TASKS)[0]["completed"] is True

    def test_change_rewrites_only_its_table(self, tmp_path):
        first = FileRecordStore(tmp_path)
        second = FileRecordStore(tmp_path)
        second.insert(NOTIFICATIONS, {"title": "Task created"})
        first.insert(TASKS, {"title": "Buy milk"})
        data = json.loads((tmp_path / "notifications.json").read_text())
        assert [n["title"] for n in data] == ["Task created"]

    def test_failed_write_is_not_kept(self, tmp_path):
        store = FileRecordStore(tmp_path)
        store.insert(TASKS, {"title": "Real"})
        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            with pytest.raises(StoreError, match="Failed to write"):
                store.insert(TASKS, {"title": "Ghost"})
        store.insert(TASKS, {"title": "Later"})
        assert [r["title"] for r in FileRecordStore(tmp_path).select(TASKS)] == ["Real", "Later"]


class TestFailedCommit:
    @pytest.fixture
    def store(self):
        return FailingCommit({TASKS: [{"id": "1", "title": "a", "position": 0}]})

    def test_insert_rolled_back(self, store):
        with pytest.raises(StoreError):
            store.insert(TASKS, {"title": "b"})
        assert [r["title"] for r in store.select(TASKS)] == ["a"]

    def test_update_rolled_back(self, store):
        with pytest.raises(StoreError):
            store.update(TASKS, {"position": 5}, [eq("id", "1")])
        assert store.select(TASKS)[0]["position"] == 0

    def test_delete_rolled_back(self, store):
        with pytest.raises(StoreError):
            store.delete(TASKS, [eq("id", "1")])
        assert len(store.select(TASKS)) == 1
