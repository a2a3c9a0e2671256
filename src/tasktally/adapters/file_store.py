"""File-based record store adapter."""

import json
from pathlib import Path

from tasktally.errors import StoreError

from .memory_store import MemoryRecordStore


class FileRecordStore(MemoryRecordStore):
    """
    JSON file record store.

    Implements RecordStore protocol. Each table gets a JSON file in
    data_dir. Every operation re-reads the table's file first, so several
    processes (the CLI and the reset daemon) can share data_dir. A change
    rewrites only its own table's file.
    """

    def __init__(self, data_dir: Path | str):
        super().__init__()
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for table in self.tables:
            self.tables[table] = self._read(table)

    def _path_for_table(self, table: str) -> Path:
        return self.data_dir / f"{table}.json"

    def _read(self, table: str) -> list[dict]:
        path = self._path_for_table(table)
        if not path.exists():
            return []
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt data file {path}: {e}") from e

    def _table(self, table: str) -> list[dict]:
        super()._table(table)
        self.tables[table] = self._read(table)
        return self.tables[table]

    def _commit(self, table: str, rows: list[dict]) -> None:
        path = self._path_for_table(table)
        try:
            path.write_text(json.dumps(rows, indent=2))
        except OSError as e:
            raise StoreError(f"Failed to write {path}: {e}") from e
