"""Terminal progress for a harvest run, rendered with Rich."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    filesize,
)
from rich.text import Text

if TYPE_CHECKING:
    from ..orchestrator import WordResult


@dataclass
class ProgressState:
    total: int | None
    fresh: int = 0
    cached: int = 0
    missing: int = 0
    failed: int = 0
    current_word: str | None = None

    @property
    def done(self) -> int:
        return self.fresh + self.cached + self.missing + self.failed


class RateColumn(ProgressColumn):
    """Words processed per second, e.g. ``1.2 word/s``."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        if speed is None:
            return Text("", style="progress.percentage")
        if speed < 1000:
            return Text(f"{speed:.1f} word/s", style="progress.percentage")
        unit, suffix = filesize.pick_unit_and_suffix(int(speed), ["", "K", "M", "G"], 1000)
        return Text(f"{speed / unit:.1f}{suffix} word/s", style="progress.percentage")


class ProgressReporter:
    """Render progress and keep per-word counters for CLI feedback.

    A word counts as *fresh* when any dictionary hit the network for it,
    *cached* when every found entry came from the local logs, *missing* when no
    dictionary has it and *failed* when some dictionary could not be reached.
    The total may be unknown when words are streamed from stdin.
    """

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self.state: ProgressState | None = None

    def start(self, total: int | None = None) -> None:
        self.state = ProgressState(total=total)
        if not self.enabled:
            return
        console = self._console or Console()
        if not console.is_terminal:
            self.enabled = False
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            BarColumn(bar_width=None, complete_style="green", pulse_style="cyan"),
            TextColumn("{task.completed}/{task.fields[total_label]}"),
            TimeElapsedColumn(),
            RateColumn(),
            TextColumn("[green]+{task.fields[fresh]:>3}", justify="right"),
            TextColumn("[blue]={task.fields[cached]:>3}", justify="right"),
            TextColumn("[yellow]?{task.fields[missing]:>3}", justify="right"),
            TextColumn("[red]x{task.fields[failed]:>3}", justify="right"),
            TextColumn("[dim]{task.fields[current_word]}", justify="left"),
            console=console,
            transient=True,
            expand=True,
            refresh_per_second=8,
        )
        try:
            self._progress.__enter__()
        except LiveError:
            self.enabled = False
            self._progress = None
            return
        self._task_id = self._progress.add_task(
            "harvest",
            total=total,
            total_label=total if total is not None else "?",
            fresh=0,
            cached=0,
            missing=0,
            failed=0,
            current_word="",
        )

    def advance(self, word: WordResult) -> None:
        if not self.state:
            raise RuntimeError("ProgressReporter.start must be called before advance")
        self.state.current_word = word.keyword
        if any(result.error is not None and not result.not_found for result in word.results):
            self.state.failed += 1
        elif not word.entries:
            self.state.missing += 1
        elif any(not result.cached for result in word.results if result.found):
            self.state.fresh += 1
        else:
            self.state.cached += 1
        if self._progress is not None and self._task_id is not None:
            self._progress.update(
                self._task_id,
                advance=1,
                fresh=self.state.fresh,
                cached=self.state.cached,
                missing=self.state.missing,
                failed=self.state.failed,
                current_word=word.keyword[:40],
            )

    def close(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress.__exit__(None, None, None)
            self._progress = None
        self._task_id = None

    def summary(self) -> dict[str, int]:
        if not self.state:
            return {"fresh": 0, "cached": 0, "missing": 0, "failed": 0}
        return {
            "fresh": self.state.fresh,
            "cached": self.state.cached,
            "missing": self.state.missing,
            "failed": self.state.failed,
        }


__all__ = ["ProgressReporter", "ProgressState", "RateColumn"]
