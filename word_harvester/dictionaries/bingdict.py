"""Bing dictionary (cn.bing.com) adapter."""

from __future__ import annotations

import re
from typing import ClassVar, Literal

from selectolax.parser import HTMLParser

from ..config import DictionaryKind
from .base import Definition, DictionaryAdapter, Entry, Example, Sense, squash

_MP3_PATTERN = re.compile(r"https://[^'\"\s]+?\.mp3")


class BingEntry(Entry):
    kind: Literal["bingdict"] = "bingdict"
    phonetic_us: str = ""
    phonetic_uk: str = ""
    us_audio: str = ""
    uk_audio: str = ""
    examples: tuple[Example, ...] = ()

    def asset_urls(self) -> list[str]:
        return [url for url in (self.uk_audio, self.us_audio) if url]

    def pronunciation(self) -> str:
        return " ".join(part for part in (self.phonetic_us, self.phonetic_uk) if part)


class BingDict(DictionaryAdapter):
    kind: ClassVar[DictionaryKind] = DictionaryKind.BINGDICT
    entry_model = BingEntry
    search_url = "https://cn.bing.com/dict/search?q={word}&qs=n&form=Z9LH5&sp=-1"

    def parse(self, tree: HTMLParser, keyword: str) -> BingEntry | None:
        headword = tree.css_first("#headword h1 strong")
        if headword is None or not headword.text(strip=True):
            return None

        # The first speaker button is the US voice, the second the UK one.
        audio = []
        for button in tree.css("div.hd_tf a"):
            match = _MP3_PATTERN.search(button.attributes.get("onclick") or "")
            audio.append(match.group(0) if match else "")
        us_prs = tree.css_first(".hd_prUS")
        uk_prs = tree.css_first(".hd_pr")

        definitions = []
        for item in tree.css(".qdef ul li"):
            pos = item.css_first("span.pos")
            text = item.css_first("span.def")
            if text is None:
                continue
            definitions.append(
                Definition(
                    part_of_speech=squash(pos.text()) if pos else "",
                    senses=(Sense(definition=squash(text.text())),),
                )
            )
        examples = tuple(
            Example(text=squash(node.text()))
            for node in tree.css("#sentenceSeg .sen_en")
            if node.text(strip=True)
        )
        return BingEntry(
            headword=squash(headword.text()),
            definitions=tuple(definitions),
            phonetic_us=squash(us_prs.text()) if us_prs else "",
            phonetic_uk=squash(uk_prs.text()) if uk_prs else "",
            us_audio=audio[0] if audio else "",
            uk_audio=audio[1] if len(audio) > 1 else "",
            examples=examples,
        )


__all__ = ["BingDict", "BingEntry"]
