"""Merriam-Webster adapter."""

from __future__ import annotations

from typing import ClassVar, Literal

from selectolax.parser import HTMLParser, Node

from ..config import DictionaryKind
from .base import (
    Definition,
    DictionaryAdapter,
    Entry,
    Example,
    Sense,
    part_of_speech,
    pronunciation_line,
    squash,
)

AUDIO_URL = "https://media.merriam-webster.com/audio/prons/en/us/mp3/{dir}/{file}.mp3"


class WebsterEntry(Entry):
    kind: Literal["webster"] = "webster"
    syllables: str = ""
    phonetic: str = ""
    audio_url: str = ""

    def asset_urls(self) -> list[str]:
        return [self.audio_url] if self.audio_url else []

    def pronunciation(self) -> str:
        return pronunciation_line(self.syllables, self.phonetic)


class WebsterDict(DictionaryAdapter):
    kind: ClassVar[DictionaryKind] = DictionaryKind.WEBSTER
    entry_model = WebsterEntry
    search_url = "https://www.merriam-webster.com/dictionary/{word}"

    def parse(self, tree: HTMLParser, keyword: str) -> WebsterEntry | None:
        for node in tree.css(".widget.more_defs"):
            node.decompose()

        phonetic = audio_url = ""
        pron = tree.css_first("span.prs span.pr")
        if pron is not None:
            phonetic = squash(pron.text())
            play = tree.css_first("span.prs a.play-pron")
            if play is not None:
                data_dir = play.attributes.get("data-dir") or ""
                data_file = play.attributes.get("data-file") or ""
                if data_dir and data_file:
                    audio_url = AUDIO_URL.format(dir=data_dir, file=data_file)
        syllables_node = tree.css_first(".word-syllables")
        syllables = squash(syllables_node.text()) if syllables_node is not None else ""

        headword = ""
        definitions: list[Definition] = []
        for number, header in enumerate(tree.css(".row.entry-header"), start=1):
            hword = header.css_first(".hword")
            if not headword and hword is not None:
                headword = squash(hword.text())
            pos_node = header.css_first(".fl")
            senses = self._senses(tree.css_first(f"#dictionary-entry-{number}"))
            definitions.append(
                Definition(
                    part_of_speech=part_of_speech(pos_node.text() if pos_node else ""),
                    senses=tuple(senses),
                )
            )
        if not headword:
            return None
        return WebsterEntry(
            headword=headword,
            definitions=tuple(definitions),
            syllables=syllables,
            phonetic=phonetic,
            audio_url=audio_url,
        )

    @staticmethod
    def _senses(container: Node | None) -> list[Sense]:
        if container is None:
            return []
        senses: list[Sense] = []
        for block in container.css(".vg .sb"):
            for index in range(100):
                sense_node = block.css_first(f".sb-{index}")
                if sense_node is None or not sense_node.text(strip=True):
                    break
                letter = sense_node.css_first(".letter")
                text = sense_node.css_first(".dtText")
                examples = tuple(
                    Example(text=squash(example.text()))
                    for example in sense_node.css(".mw_t_sp")
                )
                definition = squash(
                    f"{letter.text() if letter else ''} {text.text() if text else ''}"
                )
                senses.append(Sense(definition=definition, examples=examples))
        return senses


__all__ = ["WebsterDict", "WebsterEntry"]
