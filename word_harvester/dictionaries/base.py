"""Contract shared by every dictionary adapter and its entry type."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar
from urllib.parse import quote

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError
from selectolax.parser import HTMLParser

from ..config import DictionaryKind, SourceConfig
from ..engine.fetcher import FetchRequest, Fetcher
from ..errors import NotFoundError, TransientLookupError


class Example(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class Sense(BaseModel):
    """One numbered meaning with optional usage examples."""

    model_config = ConfigDict(frozen=True)

    definition: str
    examples: tuple[Example, ...] = ()


class Definition(BaseModel):
    """Senses grouped under one part of speech."""

    model_config = ConfigDict(frozen=True)

    part_of_speech: str = ""
    senses: tuple[Sense, ...] = ()


class Entry(BaseModel):
    """Immutable lookup result; subclasses pin ``kind`` to a literal."""

    model_config = ConfigDict(frozen=True)

    kind: str
    headword: str
    definitions: tuple[Definition, ...] = ()

    @property
    def dictionary(self) -> DictionaryKind:
        return DictionaryKind(self.kind)

    def identity(self) -> str:
        return self.headword

    def serialize(self) -> str:
        return self.model_dump_json()

    def asset_urls(self) -> list[str]:
        return []

    def pronunciation(self) -> str:
        return ""

    def summary(self) -> list[str]:
        """Flatten definitions into ``"pos: text"`` lines."""

        lines: list[str] = []
        for definition in self.definitions:
            prefix = f"{definition.part_of_speech}: " if definition.part_of_speech else ""
            for sense in definition.senses:
                lines.append(f"{prefix}{sense.definition}".strip())
        return lines


def part_of_speech(pos: str) -> str:
    pos = pos.strip()
    if pos == "transitive verb":
        return "vt."
    if pos == "intransitive verb":
        return "vi."
    return pos


def squash(text: str | None) -> str:
    return " ".join((text or "").split())


def pronunciation_line(syllables: str, phonetic: str) -> str:
    parts = [part for part in (syllables, f"/{phonetic}/" if phonetic else "") if part]
    return " | ".join(parts)


class DictionaryAdapter(ABC):
    """Look up keywords on one dictionary site.

    Adapters are stateless apart from the shared fetcher; caching and retry
    across runs are the caller's job. ``lookup`` raises ``NotFoundError`` only
    when the site positively reports no entry, and ``TransientLookupError`` for
    anything else that went wrong.
    """

    kind: ClassVar[DictionaryKind]
    entry_model: ClassVar[type[Entry]]
    search_url: ClassVar[str]

    def __init__(
        self,
        fetcher: Fetcher,
        source: SourceConfig | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.source = source or SourceConfig(kind=self.kind)
        self.logger = logger or structlog.get_logger(f"word_harvester.source.{self.kind.value}")

    def lookup(self, keyword: str) -> Entry:
        url = self.search_url.format(word=quote(keyword, safe=""))
        response = self.fetcher.fetch(self.source, FetchRequest(url=url))
        if response.not_found:
            raise NotFoundError(keyword)
        if response.status_code >= 400:
            raise TransientLookupError(f"Unexpected status {response.status_code} for {url}")
        try:
            entry = self.parse(HTMLParser(response.text), keyword)
        except NotFoundError:
            raise
        except (ValidationError, ValueError, AttributeError) as exc:
            raise TransientLookupError(f"cannot parse {url}: {exc}") from exc
        if entry is None or not entry.headword:
            raise NotFoundError(keyword)
        return entry

    def deserialize(self, payload: str) -> Entry:
        return self.entry_model.model_validate_json(payload)

    @abstractmethod
    def parse(self, tree: HTMLParser, keyword: str) -> Entry | None:
        """Extract an entry from a result page; ``None`` when there is none."""


__all__ = [
    "Definition",
    "DictionaryAdapter",
    "Entry",
    "Example",
    "Sense",
    "part_of_speech",
    "pronunciation_line",
    "squash",
]
