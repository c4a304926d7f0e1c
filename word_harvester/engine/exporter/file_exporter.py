"""File based exporter supporting JSON lines and CSV."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from .base import BaseExporter

CSV_FIELDS = ("keyword", "headword", "sources", "pronunciation", "definitions", "assets")


class FileExporter(BaseExporter):
    """Append merged records to ``<name>-<run_tag>.jsonl`` or ``.csv``."""

    def __init__(self, output_dir: Path, name: str, fmt: str, run_tag: str | None = None) -> None:
        if fmt not in ("json", "csv"):
            raise ValueError(f"Unsupported file format: {fmt}")
        self.output_dir = output_dir
        self.name = name
        self.format = fmt
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.run_tag = run_tag or datetime.now().strftime("%Y%m%d-%H%M%S")
        self.path = self.output_dir / f"{name}-{self.run_tag}.{self._extension}"
        self._file = self.path.open("a", encoding="utf-8", newline="")
        self._csv_writer: Optional[csv.DictWriter] = None

    @property
    def _extension(self) -> str:
        return "jsonl" if self.format == "json" else "csv"

    def export(self, record: dict) -> None:
        if self.format == "json":
            json.dump(record, self._file, ensure_ascii=False)
            self._file.write("\n")
            return
        if not self._csv_writer:
            self._csv_writer = csv.DictWriter(self._file, fieldnames=CSV_FIELDS)
            if self._file.tell() == 0:
                self._csv_writer.writeheader()
        self._csv_writer.writerow(self._flatten(record))

    @staticmethod
    def _flatten(record: dict) -> dict[str, str]:
        entries = record.get("entries") or []
        first = entries[0] if entries else {}
        definitions = []
        assets = []
        for entry in entries:
            definitions.extend(f"[{entry['kind']}] {line}" for line in entry.get("definitions", []))
            assets.extend(entry.get("assets", []))
        return {
            "keyword": record.get("keyword", ""),
            "headword": record.get("headword", ""),
            "sources": ",".join(record.get("sources", [])),
            "pronunciation": first.get("pronunciation", ""),
            "definitions": " / ".join(definitions),
            "assets": " ".join(assets),
        }

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        self._file.close()


__all__ = ["FileExporter"]
