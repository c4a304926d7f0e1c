"""Append-only log of lookup outcomes with an in-memory replay index."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Callable, Iterator, Protocol, TextIO

import structlog

from ..errors import CorruptionError, DurabilityError

TOMBSTONE_PREFIX = "__not_found:"
ALIAS_PREFIX = "__alias:"


class LogEntry(Protocol):
    """Capabilities the log needs from a resolved entry."""

    def identity(self) -> str:
        """Canonical headword reported by the dictionary."""

    def serialize(self) -> str:
        """Stable single-line encoding."""

    def asset_urls(self) -> list[str]:
        """Referenced media URLs."""


Deserializer = Callable[[str], LogEntry]


class _Absent:
    """Index sentinel for a keyword confirmed absent."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


@dataclass(frozen=True, slots=True)
class LogLookup:
    entry: LogEntry | None
    found: bool
    tombstone: bool

    @property
    def miss(self) -> bool:
        return not self.found


_MISS = LogLookup(entry=None, found=False, tombstone=False)
_TOMBSTONE = LogLookup(entry=None, found=True, tombstone=True)


class EntryLog:
    """Durable, replayable record of lookup outcomes for one dictionary.

    Every line is either a serialized entry, a tombstone (``__not_found:<keyword>``)
    or an alias (``__alias:<keyword>\\t<identity>``) tying a submitted spelling to
    the entry written just before it. The file is only ever appended to; the
    index is rebuilt from it on open, later lines shadowing earlier ones.
    """

    def __init__(
        self,
        path: Path,
        deserialize: Deserializer,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.path = path
        self.deserialize = deserialize
        self.logger = logger or structlog.get_logger("word_harvester.entry_log")
        self._index: dict[str, LogEntry | _Absent] = {}
        self._lock = Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        self._replay()
        self._stream: TextIO = self.path.open("a", encoding="utf-8", newline="\n")

    # ------------------------------------------------------------------
    def _replay(self) -> None:
        entries = tombstones = 0
        with self.path.open("r", encoding="utf-8", newline="\n") as stream:
            for line_number, raw in enumerate(stream, start=1):
                line = raw.rstrip("\r\n")
                if not line.strip():
                    continue
                if line.startswith(TOMBSTONE_PREFIX):
                    keyword = line[len(TOMBSTONE_PREFIX):].strip()
                    if not keyword:
                        raise CorruptionError(self.path, line_number, line, "empty tombstone")
                    self._index[keyword] = ABSENT
                    tombstones += 1
                    continue
                if line.startswith(ALIAS_PREFIX):
                    keyword, sep, identity = line[len(ALIAS_PREFIX):].partition("\t")
                    target = self._index.get(identity)
                    if not sep or not keyword or target is None or target is ABSENT:
                        raise CorruptionError(self.path, line_number, line, "dangling alias")
                    self._index[keyword] = target
                    continue
                try:
                    entry = self.deserialize(line)
                except Exception as exc:  # noqa: BLE001
                    raise CorruptionError(self.path, line_number, line, str(exc)) from exc
                self._index[entry.identity()] = entry
                entries += 1
        self.logger.debug(
            "entry_log_replayed",
            path=str(self.path),
            entries=entries,
            tombstones=tombstones,
            keys=len(self._index),
        )

    # ------------------------------------------------------------------
    def lookup(self, keyword: str) -> LogLookup:
        value = self._index.get(keyword)
        if value is None:
            return _MISS
        if value is ABSENT:
            return _TOMBSTONE
        return LogLookup(entry=value, found=True, tombstone=False)

    def append(self, keyword: str, entry: LogEntry) -> None:
        identity = entry.identity()
        payload = entry.serialize()
        if "\n" in payload or "\r" in payload:
            raise ValueError("serialized entry must be a single line")
        lines = [payload]
        if keyword != identity:
            lines.append(f"{ALIAS_PREFIX}{keyword}\t{identity}")
        with self._lock:
            self._write(lines)
            self._index[identity] = entry
            self._index[keyword] = entry

    def append_tombstone(self, keyword: str) -> None:
        with self._lock:
            self._write([f"{TOMBSTONE_PREFIX}{keyword}"])
            self._index[keyword] = ABSENT

    def _write(self, lines: list[str]) -> None:
        try:
            self._stream.write("".join(f"{line}\n" for line in lines))
            self._stream.flush()
            os.fsync(self._stream.fileno())
        except (OSError, ValueError) as exc:
            raise DurabilityError(f"cannot append to {self.path}: {exc}") from exc

    # ------------------------------------------------------------------
    def __contains__(self, keyword: object) -> bool:
        return keyword in self._index

    def __len__(self) -> int:
        return len(self._index)

    def keys(self) -> Iterator[str]:
        return iter(list(self._index))

    def stats(self) -> dict[str, int]:
        tombstones = sum(1 for value in self._index.values() if value is ABSENT)
        distinct = {id(value) for value in self._index.values() if value is not ABSENT}
        return {"keys": len(self._index), "entries": len(distinct), "tombstones": tombstones}

    def close(self) -> None:
        if not self._stream.closed:
            self._stream.close()

    def __enter__(self) -> "EntryLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["ABSENT", "ALIAS_PREFIX", "EntryLog", "LogEntry", "LogLookup", "TOMBSTONE_PREFIX"]
