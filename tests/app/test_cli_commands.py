from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from word_harvester.app import app
from word_harvester.engine.entry_log import TOMBSTONE_PREFIX

runner = CliRunner()


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("WORD_HARVESTER_HOME", str(tmp_path))
    return tmp_path


def seed_webster(home: Path, *lines: str) -> Path:
    path = home / "data" / "dictionaries" / "webster" / "words.txt"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


def test_cli_run_offline_from_file(home: Path) -> None:
    words = home / "words.txt"
    words.write_text("apple\n\npear\n", encoding="utf-8")
    result = runner.invoke(app, ["run", str(words), "--offline", "--no-assets"])
    assert result.exit_code == 0, result.stdout
    assert "Run summary" in result.stdout
    assert (home / "data" / "global_config.yaml").exists()
    assert list((home / "data" / "outputs").glob("words-*.jsonl"))


def test_cli_run_quiet_from_stdin_exports_cached_words(home: Path, make_entry) -> None:
    seed_webster(home, make_entry("apple").serialize())
    result = runner.invoke(
        app, ["run", "--offline", "--no-assets", "--quiet"], input="apple\nqwzx\n"
    )
    assert result.exit_code == 0, result.stdout
    assert "Done: 2 words, 1 exported, 1 not found, 0 errors" in result.stdout
    (export,) = (home / "data" / "outputs").glob("words-*.jsonl")
    records = [json.loads(line) for line in export.read_text(encoding="utf-8").splitlines()]
    assert [record["keyword"] for record in records] == ["apple"]
    assert records[0]["sources"] == ["webster"]


def test_cli_run_rejects_unknown_dictionary(home: Path) -> None:
    result = runner.invoke(app, ["run", "--dicts", "wiktionary", "--offline"], input="apple\n")
    assert result.exit_code != 0


def test_cli_run_aborts_on_corrupt_log(home: Path) -> None:
    seed_webster(home, "not an entry")
    result = runner.invoke(app, ["run", "--offline", "--quiet"], input="apple\n")
    assert result.exit_code == 1
    assert "Run aborted" in result.stdout


def test_cli_cache_show(home: Path, make_entry) -> None:
    seed_webster(home, make_entry("apple").serialize(), f"{TOMBSTONE_PREFIX}qwzx")

    found = runner.invoke(app, ["cache", "show", "webster", "apple"])
    assert found.exit_code == 0, found.stdout
    assert "noun: a test sense" in found.stdout

    absent = runner.invoke(app, ["cache", "show", "webster", "qwzx"])
    assert absent.exit_code == 0
    assert "recorded as not found" in absent.stdout

    missing = runner.invoke(app, ["cache", "show", "webster", "pear"])
    assert missing.exit_code == 1
    assert "not cached" in missing.stdout


def test_cli_cache_show_without_log(home: Path) -> None:
    result = runner.invoke(app, ["cache", "show", "collins", "apple"])
    assert result.exit_code == 1
    assert "No cache for collins" in result.stdout


def test_cli_cache_stats(home: Path, make_entry) -> None:
    seed_webster(home, make_entry("apple").serialize(), f"{TOMBSTONE_PREFIX}qwzx")
    result = runner.invoke(app, ["cache", "stats"])
    assert result.exit_code == 0, result.stdout
    webster_row = next(line for line in result.stdout.splitlines() if line.strip().startswith("webster"))
    assert webster_row.split()[1:4] == ["2", "1", "1"]


def test_cli_log_tail(home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    log_path = home / "custom.log"
    log_path.write_text("line1\nline2\nline3\n", encoding="utf-8")
    monkeypatch.setattr("word_harvester.app.main_log_path", lambda: log_path)
    result = runner.invoke(app, ["log", "tail", "--lines", "2"])
    assert result.exit_code == 0, result.stdout
    assert "line2" in result.stdout and "line3" in result.stdout
    assert "line1" not in result.stdout
