"""Shared fixtures: sample configs, scripted dictionaries and mocked HTTP."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import httpx
import pytest

from word_harvester.config import (
    ConfigLocator,
    ConfigRepository,
    DictionaryKind,
    GlobalConfig,
    HttpStrategies,
    SourceConfig,
)
from word_harvester.dictionaries import WebsterEntry
from word_harvester.dictionaries.base import Definition, Sense
from word_harvester.errors import NotFoundError


@pytest.fixture
def sample_global_config(tmp_path: Path) -> GlobalConfig:
    return GlobalConfig(
        dictionaries=[DictionaryKind.WEBSTER],
        data_dir=tmp_path / "dictionaries",
        outputs_dir=tmp_path / "outputs",
        sleep_interval=0.0,
        enable_progress_bar=False,
    )


@pytest.fixture
def sample_source_config() -> Callable[..., SourceConfig]:
    def _builder(**overrides: Any) -> SourceConfig:
        base: dict[str, Any] = {
            "kind": DictionaryKind.WEBSTER,
            "http": HttpStrategies(retry_on_fail=1, timeout=5.0),
        }
        base.update(overrides)
        return SourceConfig(**base)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("WORD_HARVESTER_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository


def _make_entry(headword: str, audio_url: str = "", definition: str = "a test sense") -> WebsterEntry:
    return WebsterEntry(
        headword=headword,
        definitions=(Definition(part_of_speech="noun", senses=(Sense(definition=definition),)),),
        syllables=headword,
        phonetic=headword,
        audio_url=audio_url,
    )


class ScriptedDictionary:
    """Adapter double answering from a keyword -> entry/exception table."""

    def __init__(self, kind: DictionaryKind, answers: dict[str, Any] | None = None) -> None:
        self.kind = kind
        self.answers = dict(answers or {})
        self.calls: list[str] = []

    def lookup(self, keyword: str):
        self.calls.append(keyword)
        answer = self.answers.get(keyword)
        if answer is None:
            raise NotFoundError(keyword)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def deserialize(self, payload: str) -> WebsterEntry:
        return WebsterEntry.model_validate_json(payload)


@pytest.fixture
def make_entry() -> Callable[..., WebsterEntry]:
    return _make_entry


@pytest.fixture
def scripted_dictionary() -> Callable[..., ScriptedDictionary]:
    return ScriptedDictionary


@pytest.fixture
def mock_client() -> Iterable[Callable[..., httpx.Client]]:
    """Build an ``httpx.Client`` whose requests go to ``handler``."""

    clients: list[httpx.Client] = []

    def _builder(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _builder
    for client in clients:
        client.close()
