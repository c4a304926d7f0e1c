"""Dictionary adapters keyed by their static ``DictionaryKind`` tag."""

from __future__ import annotations

from typing import Callable

import structlog

from ..config import DictionaryKind, SourceConfig
from ..engine.fetcher import Fetcher
from .base import Definition, DictionaryAdapter, Entry, Example, Sense
from .bingdict import BingDict, BingEntry
from .collins import CollinsDict, CollinsEntry
from .dictcn import DictcnDict, DictcnEntry
from .webster import WebsterDict, WebsterEntry

ADAPTERS: dict[DictionaryKind, type[DictionaryAdapter]] = {
    DictionaryKind.COLLINS: CollinsDict,
    DictionaryKind.WEBSTER: WebsterDict,
    DictionaryKind.DICTCN: DictcnDict,
    DictionaryKind.BINGDICT: BingDict,
}


def build_adapter(
    kind: DictionaryKind | str,
    fetcher: Fetcher,
    source: SourceConfig | None = None,
    logger: structlog.BoundLogger | None = None,
) -> DictionaryAdapter:
    kind = DictionaryKind(kind)
    return ADAPTERS[kind](fetcher, source=source, logger=logger)


def entry_deserializer(kind: DictionaryKind | str) -> Callable[[str], Entry]:
    """Parse stored log payloads without building an adapter."""

    return ADAPTERS[DictionaryKind(kind)].entry_model.model_validate_json


__all__ = [
    "ADAPTERS",
    "BingDict",
    "BingEntry",
    "CollinsDict",
    "CollinsEntry",
    "Definition",
    "DictcnDict",
    "DictcnEntry",
    "DictionaryAdapter",
    "Entry",
    "Example",
    "Sense",
    "WebsterDict",
    "WebsterEntry",
    "build_adapter",
    "entry_deserializer",
]
