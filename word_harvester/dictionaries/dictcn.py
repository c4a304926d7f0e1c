"""dict.cn adapter."""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict
from selectolax.parser import HTMLParser, Node

from ..config import DictionaryKind
from .base import Definition, DictionaryAdapter, Entry, Example, Sense, part_of_speech, squash

AUDIO_HOST = "http://audio.dict.cn/"

# Section class -> label shown in exports.
SECTIONS = (
    (".layout.detail", "详尽释义"),
    (".layout.dual", "双解释义"),
    (".layout.en", "英英释义"),
)


class Voice(BaseModel):
    model_config = ConfigDict(frozen=True)

    phonetic: str = ""
    female_mp3: str = ""
    male_mp3: str = ""


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    definitions: tuple[Definition, ...] = ()


class DictcnEntry(Entry):
    kind: Literal["dictcn"] = "dictcn"
    uk: Voice = Voice()
    us: Voice = Voice()
    sections: tuple[Section, ...] = ()

    def asset_urls(self) -> list[str]:
        return [self.us.female_mp3] if self.us.female_mp3 else []

    def pronunciation(self) -> str:
        return f"/{self.us.phonetic}/" if self.us.phonetic else ""


class DictcnDict(DictionaryAdapter):
    kind: ClassVar[DictionaryKind] = DictionaryKind.DICTCN
    entry_model = DictcnEntry
    search_url = "http://dict.cn/{word}"

    def parse(self, tree: HTMLParser, keyword: str) -> DictcnEntry | None:
        keyword_node = tree.css_first(".keyword")
        if keyword_node is None or not keyword_node.text(strip=True):
            return None

        voices: list[Voice] = []
        phonetic = tree.css_first(".phonetic")
        if phonetic is not None:
            for span in phonetic.css("span")[:2]:
                bdo = span.css_first("bdo")
                audio = [node.attributes.get("naudio") or "" for node in span.css("i")]
                voices.append(
                    Voice(
                        phonetic=squash(bdo.text()) if bdo else "",
                        female_mp3=_audio_url(audio[0] if audio else ""),
                        male_mp3=_audio_url(audio[1] if len(audio) > 1 else ""),
                    )
                )

        basic: list[Definition] = []
        for item in tree.css(".dict-basic-ul li"):
            pos = item.css_first("span")
            text = item.css_first("strong")
            if text is None or not text.text(strip=True):
                continue
            basic.append(
                Definition(
                    part_of_speech=squash(pos.text()) if pos else "",
                    senses=(Sense(definition=squash(text.text())),),
                )
            )

        sections = []
        for selector, name in SECTIONS:
            container = tree.css_first(selector)
            if container is not None:
                sections.append(Section(name=name, definitions=tuple(_section_definitions(container))))

        return DictcnEntry(
            headword=squash(keyword_node.text()),
            definitions=tuple(basic),
            uk=voices[0] if voices else Voice(),
            us=voices[1] if len(voices) > 1 else Voice(),
            sections=tuple(sections),
        )


def _audio_url(path: str) -> str:
    return f"{AUDIO_HOST}{path}" if path else ""


def _section_definitions(container: Node) -> list[Definition]:
    labels = []
    for span in container.css("span"):
        for bdo in span.css("bdo"):
            bdo.decompose()
        labels.append(part_of_speech(span.text()))
    definitions = []
    for label, ordered in zip(labels, container.css("ol")):
        senses = []
        for item in ordered.css("li"):
            examples = []
            for para in item.css("p"):
                examples.extend(
                    Example(text=line.strip())
                    for line in para.text().split("\n")
                    if line.strip()
                )
                para.decompose()
            senses.append(Sense(definition=squash(item.text()), examples=tuple(examples)))
        definitions.append(Definition(part_of_speech=label, senses=tuple(senses)))
    return definitions


__all__ = ["DictcnDict", "DictcnEntry", "Section", "Voice"]
