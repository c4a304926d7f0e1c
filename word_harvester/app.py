"""Typer CLI entrypoint for word-harvester."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, DictionaryKind, GlobalConfig
from .dictionaries import entry_deserializer
from .engine import EntryLog, Fetcher
from .errors import HarvesterError
from .infra import UserAgentPool
from .logging_conf import (
    available_source_logs,
    configure_logging,
    main_log_path,
    source_log_path,
    tail_log,
)
from .orchestrator import RunSummary, build_coordinator, create_exporter
from .ui import ProgressReporter

app = typer.Typer(
    help="word-harvester: cached multi-dictionary word lookups",
    no_args_is_help=True,
    rich_markup_mode=None,
)
cache_app = typer.Typer(
    name="cache",
    help="Inspect the per-dictionary entry logs.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Read harvester log files.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    global_config: GlobalConfig
    verbose: bool = False


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    global_config = repository.load_global_config()
    configure_logging(verbose=verbose)
    return AppState(repository=repository, global_config=global_config, verbose=verbose)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _progress_default_enabled() -> bool:
    return bool(getattr(sys.stdout, "isatty", lambda: False)())


def _parse_kind(value: str) -> DictionaryKind:
    try:
        return DictionaryKind(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(kind.value for kind in DictionaryKind)
        raise typer.BadParameter(f"unknown dictionary {value!r}; choose from {choices}") from exc


def _apply_overrides(
    config: GlobalConfig,
    dicts: Optional[str],
    sleep_interval: Optional[float],
    offline: bool,
    no_assets: bool,
    output_format: Optional[str],
) -> GlobalConfig:
    overrides: dict[str, object] = {}
    if dicts:
        overrides["dictionaries"] = [_parse_kind(name).value for name in dicts.split(",") if name.strip()]
    if sleep_interval is not None:
        overrides["sleep_interval"] = sleep_interval
    if offline:
        overrides["query_online"] = False
    if no_assets:
        overrides["download_assets"] = False
    if output_format:
        overrides["output_format"] = output_format
    if not overrides:
        return config
    try:
        return GlobalConfig.model_validate({**config.model_dump(), **overrides})
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _render_summary(summary: RunSummary) -> Table:
    table = Table(title="Run summary", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Words", str(summary.words))
    table.add_row("Exported", str(summary.exported))
    table.add_row("Fresh lookups", str(summary.fresh))
    table.add_row("Cached lookups", str(summary.cached))
    table.add_row("Not found", str(summary.missing))
    table.add_row("Errors", str(summary.errors))
    table.add_row("Pauses", str(summary.pauses))
    table.add_row("Asset failures", str(len(summary.asset_failures)))
    return table


app.add_typer(cache_app, name="cache")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Look up every word of WORD_LIST (stdin when omitted).")
def run(
    ctx: typer.Context,
    word_list: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, readable=True, help="File with one word per line."
    ),
    dicts: Optional[str] = typer.Option(
        None, "--dicts", help="Comma separated dictionaries, e.g. webster,bingdict."
    ),
    sleep_interval: Optional[float] = typer.Option(
        None, "--sleep-interval", min=0, help="Seconds to pause after a word that hit the network."
    ),
    offline: bool = typer.Option(False, "--offline", help="Serve from the cache only."),
    no_assets: bool = typer.Option(False, "--no-assets", help="Skip audio downloads."),
    output_format: Optional[str] = typer.Option(
        None, "--format", help="Export format: json, csv or sqlite."
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Print a one-line summary only."),
) -> None:
    state = _get_state(ctx)
    config = _apply_overrides(
        state.global_config, dicts, sleep_interval, offline, no_assets, output_format
    )
    if word_list is not None:
        words: list[str] = word_list.read_text(encoding="utf-8").splitlines()
        total: int | None = sum(1 for word in words if word.strip())
    else:
        words = sys.stdin
        total = None

    fetcher = Fetcher(config, ua_pool=UserAgentPool.from_config(config))
    progress = ProgressReporter(
        enabled=config.enable_progress_bar and _progress_default_enabled() and not quiet
    )
    try:
        exporter = create_exporter(config, state.repository.outputs_dir(config))
        try:
            coordinator = build_coordinator(
                state.repository, fetcher, config, exporter=exporter, verbose=state.verbose
            )
        except Exception:
            exporter.close()
            raise
        try:
            progress.start(total)
            summary = coordinator.run(words, progress=progress)
        finally:
            progress.close()
            coordinator.close()
    except HarvesterError as exc:
        console.print(f"Run aborted: {exc}", style="red")
        raise typer.Exit(code=1) from exc
    finally:
        fetcher.close()

    if quiet:
        console.print(
            f"Done: {summary.words} words, {summary.exported} exported, "
            f"{summary.missing} not found, {summary.errors} errors"
        )
        return
    console.print(_render_summary(summary))
    if summary.asset_failures:
        console.print("Failed asset downloads:", style="yellow")
        for url in summary.asset_failures:
            console.print(f"  {url}", style="dim")
    if summary.failed_words:
        console.print(
            "Words with lookup errors (rerun to retry): " + ", ".join(summary.failed_words),
            style="yellow",
        )


def _open_log(state: AppState, kind: DictionaryKind) -> EntryLog | None:
    source = state.repository.load_source(kind)
    path = source.log_path(state.repository.data_dir(state.global_config))
    if not path.exists():
        return None
    return EntryLog(path, entry_deserializer(kind))


@cache_app.command("show", help="Print the cached entry for WORD in one dictionary.")
def cache_show(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="Dictionary name."),
    word: str = typer.Argument(..., help="Keyword or headword."),
) -> None:
    state = _get_state(ctx)
    dictionary = _parse_kind(kind)
    try:
        entry_log = _open_log(state, dictionary)
    except HarvesterError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc
    if entry_log is None:
        console.print(f"No cache for {dictionary.value} yet.", style="dim")
        raise typer.Exit(code=1)
    with entry_log:
        found = entry_log.lookup(word.strip())
    if found.tombstone:
        console.print(f"{word}: recorded as not found in {dictionary.value}.", style="yellow")
        return
    if found.miss:
        console.print(f"{word}: not cached in {dictionary.value}.", style="dim")
        raise typer.Exit(code=1)
    entry = found.entry
    console.print(f"{entry.identity()}", style="bold cyan")
    pronunciation = entry.pronunciation()
    if pronunciation:
        console.print(pronunciation, style="magenta")
    for line in entry.summary():
        console.print(f"  {line}")
    for url in entry.asset_urls():
        console.print(f"  asset: {url}", style="dim")


@cache_app.command("stats", help="Count cached keys, entries and tombstones per dictionary.")
def cache_stats(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    data_dir = state.repository.data_dir(state.global_config)
    table = Table(title="Entry logs", box=box.SIMPLE_HEAD)
    table.add_column("Dictionary", style="cyan", no_wrap=True)
    table.add_column("Keys", justify="right")
    table.add_column("Entries", justify="right", style="green")
    table.add_column("Not found", justify="right", style="yellow")
    table.add_column("Assets", justify="right")
    for kind in DictionaryKind:
        try:
            entry_log = _open_log(state, kind)
        except HarvesterError as exc:
            table.add_row(kind.value, "-", "-", "-", f"[red]{exc}[/red]")
            continue
        if entry_log is None:
            table.add_row(kind.value, "0", "0", "0", "0")
            continue
        with entry_log:
            stats = entry_log.stats()
        asset_dir = state.repository.load_source(kind).asset_dir(data_dir)
        assets = sum(
            1 for path in asset_dir.glob("*") if path.is_file() and not path.name.startswith(".")
        )
        table.add_row(
            kind.value,
            str(stats["keys"]),
            str(stats["entries"]),
            str(stats["tombstones"]),
            str(assets),
        )
    console.print(table)


@log_app.command("list", help="List per-dictionary log files.")
def log_list() -> None:
    logs = list(available_source_logs())
    if not logs:
        console.print("No dictionary logs yet.", style="dim")
        return
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("File", style="green")
    for path in logs:
        table.add_row(path.name)
    console.print(table)


@log_app.command("tail", help="Show the last lines of the main or a dictionary log.")
def log_tail(
    source: Optional[str] = typer.Option(None, "--source", help="Dictionary name; main log when empty."),
    lines: int = typer.Option(100, "--lines", min=1, help="Number of lines to show."),
) -> None:
    if source:
        path = source_log_path(_parse_kind(source).value)
    else:
        path = main_log_path()
    content = tail_log(path, lines)
    if not content:
        console.print("No log output yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(content)} lines", style="cyan")
    console.print("".join(content), end="", markup=False, highlight=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
