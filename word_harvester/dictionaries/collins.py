"""Collins English dictionary adapter."""

from __future__ import annotations

from typing import ClassVar, Literal

from selectolax.parser import HTMLParser

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


class CollinsEntry(Entry):
    kind: Literal["collins"] = "collins"
    syllables: str = ""
    phonetic: str = ""
    audio_url: str = ""

    def asset_urls(self) -> list[str]:
        return [self.audio_url] if self.audio_url else []

    def pronunciation(self) -> str:
        return pronunciation_line(self.syllables, self.phonetic)


class CollinsDict(DictionaryAdapter):
    kind: ClassVar[DictionaryKind] = DictionaryKind.COLLINS
    entry_model = CollinsEntry
    search_url = "https://www.collinsdictionary.com/dictionary/english/{word}"

    def parse(self, tree: HTMLParser, keyword: str) -> CollinsEntry | None:
        orth = tree.css_first(".title_container h2.h2_entry span.orth")
        if orth is None:
            return None
        pron = tree.css_first(".mini_h2 span.pron")
        sound = tree.css_first("a.hwd_sound")
        syllables = tree.css_first(".mini_h2 span.hyph")

        definitions: list[Definition] = []
        for hom in tree.css(".content.definitions .hom"):
            pos = hom.css_first(".pos")
            senses = []
            for sense in hom.css(".sense"):
                text = sense.css_first(".def")
                if text is None:
                    continue
                examples = tuple(Example(text=squash(q.text())) for q in sense.css(".quote"))
                senses.append(Sense(definition=squash(text.text()), examples=examples))
            if senses:
                definitions.append(
                    Definition(
                        part_of_speech=part_of_speech(pos.text() if pos else ""),
                        senses=tuple(senses),
                    )
                )
        return CollinsEntry(
            headword=squash(orth.text()),
            definitions=tuple(definitions),
            syllables=squash(syllables.text()) if syllables else "",
            phonetic=squash(pron.text()) if pron else "",
            audio_url=(sound.attributes.get("data-src-mp3") or "") if sound else "",
        )


__all__ = ["CollinsDict", "CollinsEntry"]
