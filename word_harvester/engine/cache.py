"""Cache-first lookup for one dictionary, with asset downloads as side effects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

import structlog

from ..config import DictionaryKind
from ..errors import AssetError, NotFoundError, TransientLookupError
from .assets import AssetStore
from .entry_log import EntryLog, LogEntry


class LookupSource(Protocol):
    """The part of a dictionary adapter the cache relies on."""

    kind: DictionaryKind

    def lookup(self, keyword: str) -> LogEntry:
        """Return an entry or raise ``NotFoundError`` / ``TransientLookupError``."""


class ResolveOutcome(str, Enum):
    """Terminal state of one (dictionary, keyword) resolution."""

    CACHE_HIT = "cache_hit"
    TOMBSTONE_HIT = "tombstone_hit"
    OFFLINE_MISS = "offline_miss"
    FRESH_HIT = "fresh_hit"
    FRESH_MISS = "fresh_miss"
    TRANSIENT_ERROR = "transient_error"

    @property
    def not_found(self) -> bool:
        return self in (
            ResolveOutcome.TOMBSTONE_HIT,
            ResolveOutcome.OFFLINE_MISS,
            ResolveOutcome.FRESH_MISS,
        )


@dataclass(slots=True)
class ResolveResult:
    keyword: str
    outcome: ResolveOutcome
    cached: bool
    entry: LogEntry | None = None
    error: Exception | None = None
    asset_failures: list[AssetError] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.entry is not None

    @property
    def not_found(self) -> bool:
        return self.outcome.not_found

    @property
    def free(self) -> bool:
        """True when this resolution needs no rate-limit pause afterwards."""

        return self.cached or self.not_found


class CacheOrchestrator:
    """Serve lookups from the entry log, falling back to the dictionary.

    Only confirmed absence is cached as a tombstone; transient failures leave
    no record so the keyword is retried on the next run. The log and asset
    store are the only state; ``resolve`` keeps nothing between calls.
    """

    def __init__(
        self,
        adapter: LookupSource,
        entry_log: EntryLog,
        asset_store: AssetStore | None = None,
        query_online: bool = True,
        download_assets: bool = True,
        asset_error_path: Path | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.adapter = adapter
        self.entry_log = entry_log
        self.asset_store = asset_store
        self.query_online = query_online
        self.download_assets = download_assets and asset_store is not None
        self.asset_error_path = asset_error_path
        self.logger = logger or structlog.get_logger("word_harvester.cache").bind(
            source=adapter.kind.value
        )

    @property
    def kind(self) -> DictionaryKind:
        return self.adapter.kind

    def resolve(self, keyword: str) -> ResolveResult:
        keyword = keyword.strip()
        if not keyword:
            raise ValueError("keyword must not be empty")
        if "\n" in keyword or "\r" in keyword or "\t" in keyword:
            raise ValueError(f"keyword must be a single token line: {keyword!r}")

        cached = self.entry_log.lookup(keyword)
        if cached.tombstone:
            self.logger.info("lookup_not_found", keyword=keyword, cached=True)
            return ResolveResult(keyword, ResolveOutcome.TOMBSTONE_HIT, cached=True)
        if cached.found:
            entry = cached.entry
            self.logger.info("lookup_ok", keyword=keyword, headword=entry.identity(), cached=True)
            return self._with_assets(
                ResolveResult(keyword, ResolveOutcome.CACHE_HIT, cached=True, entry=entry)
            )
        if not self.query_online:
            return ResolveResult(keyword, ResolveOutcome.OFFLINE_MISS, cached=True)

        try:
            entry = self.adapter.lookup(keyword)
        except NotFoundError as exc:
            self.entry_log.append_tombstone(keyword)
            self.logger.info("lookup_not_found", keyword=keyword, cached=False)
            return ResolveResult(keyword, ResolveOutcome.FRESH_MISS, cached=False, error=exc)
        except TransientLookupError as exc:
            self.logger.warning("lookup_error", keyword=keyword, error=str(exc))
            return ResolveResult(keyword, ResolveOutcome.TRANSIENT_ERROR, cached=False, error=exc)

        self.entry_log.append(keyword, entry)
        self.logger.info("lookup_ok", keyword=keyword, headword=entry.identity(), cached=False)
        return self._with_assets(
            ResolveResult(keyword, ResolveOutcome.FRESH_HIT, cached=False, entry=entry)
        )

    def _with_assets(self, result: ResolveResult) -> ResolveResult:
        if not self.download_assets or result.entry is None:
            return result
        for url in result.entry.asset_urls():
            try:
                asset_cached = self.asset_store.fetch(url)
            except AssetError as exc:
                self.logger.error("asset_download_failed", url=url, error=str(exc))
                self._record_asset_failure(url, exc)
                result.asset_failures.append(exc)
                asset_cached = False
            result.cached = result.cached and asset_cached
        return result

    def _record_asset_failure(self, url: str, error: AssetError) -> None:
        if self.asset_error_path is None:
            return
        try:
            with self.asset_error_path.open("a", encoding="utf-8") as stream:
                stream.write(f"{url}\t{error}\n")
        except OSError as exc:
            self.logger.warning("asset_error_log_failed", path=str(self.asset_error_path), error=str(exc))

    def close(self) -> None:
        self.entry_log.close()


__all__ = ["CacheOrchestrator", "LookupSource", "ResolveOutcome", "ResolveResult"]
