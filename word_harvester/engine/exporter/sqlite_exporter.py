"""Export merged records to SQLite tables."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from .base import BaseExporter


class SQLiteExporter(BaseExporter):
    """Persist records as JSON blobs keyed by the submitted keyword."""

    def __init__(self, path: Path, table: str = "words") -> None:
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table}")
        self.path = path
        self.table = table
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.path)
        self.conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                keyword TEXT NOT NULL,
                headword TEXT,
                payload TEXT NOT NULL
            )
            """
        )
        self.conn.commit()

    def export(self, record: dict) -> None:
        self.conn.execute(
            f"INSERT INTO {self.table}(keyword, headword, payload) VALUES (?, ?, ?)",
            (
                record.get("keyword", ""),
                record.get("headword"),
                json.dumps(record, ensure_ascii=False),
            ),
        )

    def flush(self) -> None:
        self.conn.commit()

    def close(self) -> None:
        self.conn.commit()
        self.conn.close()


__all__ = ["SQLiteExporter"]
