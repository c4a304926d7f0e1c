"""Drive every configured dictionary for a stream of words and merge the results."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator, Sequence, TextIO

import structlog

from .config import ConfigRepository, DictionaryKind, GlobalConfig, SourceConfig
from .dictionaries import Entry, build_adapter
from .engine import (
    AssetStore,
    CacheOrchestrator,
    EntryLog,
    Fetcher,
    ResolveOutcome,
    ResolveResult,
    asset_name,
)
from .engine.exporter import BaseExporter, FileExporter, SQLiteExporter
from .errors import AssetError, CorruptionError, DurabilityError
from .logging_conf import source_logger
from .ui import ProgressReporter


def _asset_names(entry: Entry) -> list[str]:
    names = []
    for url in entry.asset_urls():
        try:
            names.append(asset_name(url))
        except AssetError:
            continue
    return names


@dataclass(slots=True)
class WordResult:
    """Outcome of one word across all dictionaries, in priority order."""

    keyword: str
    results: list[ResolveResult]

    @property
    def entries(self) -> list[Entry]:
        return [result.entry for result in self.results if result.entry is not None]

    @property
    def free(self) -> bool:
        """No dictionary did fresh network work, so no pause is needed."""

        return all(result.free for result in self.results)

    def to_record(self) -> dict:
        entries = self.entries
        return {
            "keyword": self.keyword,
            "headword": entries[0].identity() if entries else None,
            "sources": [entry.kind for entry in entries],
            "entries": [
                {
                    "kind": entry.kind,
                    "headword": entry.identity(),
                    "pronunciation": entry.pronunciation(),
                    "definitions": entry.summary(),
                    "assets": _asset_names(entry),
                }
                for entry in entries
            ],
        }


@dataclass
class RunSummary:
    words: int = 0
    exported: int = 0
    fresh: int = 0
    cached: int = 0
    missing: int = 0
    errors: int = 0
    pauses: int = 0
    asset_failures: list[str] = field(default_factory=list)
    failed_words: list[str] = field(default_factory=list)

    def record(self, word: WordResult) -> None:
        self.words += 1
        for result in word.results:
            if result.outcome is ResolveOutcome.TRANSIENT_ERROR:
                self.errors += 1
            elif result.not_found:
                self.missing += 1
            elif result.outcome is ResolveOutcome.FRESH_HIT:
                self.fresh += 1
            else:
                self.cached += 1
            self.asset_failures.extend(failure.url for failure in result.asset_failures)
        if any(result.outcome is ResolveOutcome.TRANSIENT_ERROR for result in word.results):
            self.failed_words.append(word.keyword)

    def as_dict(self) -> dict[str, int]:
        return {
            "words": self.words,
            "exported": self.exported,
            "fresh": self.fresh,
            "cached": self.cached,
            "missing": self.missing,
            "errors": self.errors,
            "pauses": self.pauses,
            "asset_failures": len(self.asset_failures),
        }


def read_words(stream: TextIO | Iterable[str]) -> Iterator[str]:
    """Yield stripped, non-empty lines."""

    for line in stream:
        word = line.strip()
        if word:
            yield word


class MultiSourceCoordinator:
    """Resolve each word on every dictionary, one word at a time.

    Dictionaries are ranked once, by their position in ``priority``; that
    order is both the lookup order and the layout of merged records. After a
    word that needed fresh network work the coordinator sleeps
    ``sleep_interval`` seconds before starting the next one.
    """

    def __init__(
        self,
        orchestrators: Sequence[CacheOrchestrator],
        sleep_interval: float = 1.0,
        priority: Sequence[DictionaryKind] | None = None,
        exporter: BaseExporter | None = None,
        sleeper: Callable[[float], None] = time.sleep,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        rank = {kind: index for index, kind in enumerate(priority or ())}
        self.orchestrators = sorted(
            orchestrators, key=lambda orchestrator: rank.get(orchestrator.kind, len(rank))
        )
        self.sleep_interval = sleep_interval
        self.exporter = exporter
        self.sleeper = sleeper
        self.logger = logger or structlog.get_logger("word_harvester.coordinator")

    @property
    def kinds(self) -> list[DictionaryKind]:
        return [orchestrator.kind for orchestrator in self.orchestrators]

    def process_word(self, keyword: str) -> WordResult:
        results: list[ResolveResult] = []
        for orchestrator in self.orchestrators:
            try:
                result = orchestrator.resolve(keyword)
            except (DurabilityError, CorruptionError):
                raise
            except Exception as exc:  # noqa: BLE001
                self.logger.error(
                    "lookup_error",
                    keyword=keyword,
                    source=orchestrator.kind.value,
                    error=str(exc),
                )
                result = ResolveResult(
                    keyword.strip(), ResolveOutcome.TRANSIENT_ERROR, cached=False, error=exc
                )
            results.append(result)
        return WordResult(keyword=keyword.strip(), results=results)

    def run(
        self,
        words: Iterable[str],
        progress: ProgressReporter | None = None,
    ) -> RunSummary:
        summary = RunSummary()
        pause_pending = False
        try:
            for keyword in read_words(words):
                if pause_pending and self.sleep_interval > 0:
                    self.logger.debug("pacing_sleep", seconds=self.sleep_interval)
                    self.sleeper(self.sleep_interval)
                    summary.pauses += 1
                word = self.process_word(keyword)
                summary.record(word)
                if word.entries and self.exporter is not None:
                    self.exporter.export(word.to_record())
                    summary.exported += 1
                pause_pending = not word.free
                self.logger.info(
                    "word_finished",
                    count=summary.words,
                    keyword=word.keyword,
                    sources=[entry.kind for entry in word.entries],
                    free=word.free,
                )
                if progress is not None:
                    progress.advance(word)
        finally:
            if self.exporter is not None:
                self.exporter.flush()
        return summary

    def close(self) -> None:
        for orchestrator in self.orchestrators:
            orchestrator.close()
        if self.exporter is not None:
            self.exporter.close()


class CacheOrchestratorFactory:
    @staticmethod
    def build(
        kind: DictionaryKind,
        global_config: GlobalConfig,
        source: SourceConfig,
        data_dir: Path,
        fetcher: Fetcher,
        verbose: bool = False,
    ) -> CacheOrchestrator:
        logger = source_logger(kind.value, verbose=verbose)
        adapter = build_adapter(kind, fetcher, source=source, logger=logger)
        entry_log = EntryLog(source.log_path(data_dir), adapter.deserialize, logger=logger)
        asset_store = AssetStore(source.asset_dir(data_dir), fetcher.client, logger=logger)
        return CacheOrchestrator(
            adapter,
            entry_log,
            asset_store,
            query_online=global_config.query_online,
            download_assets=global_config.download_assets,
            asset_error_path=source.asset_error_path(data_dir),
            logger=logger,
        )


def create_exporter(
    global_config: GlobalConfig, outputs_dir: Path, run_tag: str | None = None
) -> BaseExporter:
    run_tag = run_tag or datetime.now().strftime("%Y%m%d-%H%M%S")
    if global_config.output_format in {"json", "csv"}:
        return FileExporter(outputs_dir, "words", global_config.output_format, run_tag=run_tag)
    if global_config.output_format == "sqlite":
        return SQLiteExporter(outputs_dir / "words.db")
    raise ValueError(f"Unsupported output format: {global_config.output_format}")


def build_coordinator(
    repository: ConfigRepository,
    fetcher: Fetcher,
    global_config: GlobalConfig | None = None,
    exporter: BaseExporter | None = None,
    sleeper: Callable[[float], None] = time.sleep,
    verbose: bool = False,
) -> MultiSourceCoordinator:
    """Wire one cache per enabled dictionary from stored configuration."""

    global_config = global_config or repository.load_global_config()
    data_dir = repository.data_dir(global_config)
    orchestrators: list[CacheOrchestrator] = []
    try:
        for kind in global_config.ordered_dictionaries():
            source = repository.load_source(kind)
            orchestrators.append(
                CacheOrchestratorFactory.build(
                    kind, global_config, source, data_dir, fetcher, verbose=verbose
                )
            )
    except Exception:
        for orchestrator in orchestrators:
            orchestrator.close()
        raise
    return MultiSourceCoordinator(
        orchestrators,
        sleep_interval=global_config.sleep_interval,
        priority=global_config.priority,
        exporter=exporter,
        sleeper=sleeper,
    )


__all__ = [
    "CacheOrchestratorFactory",
    "MultiSourceCoordinator",
    "RunSummary",
    "WordResult",
    "build_coordinator",
    "create_exporter",
    "read_words",
]
