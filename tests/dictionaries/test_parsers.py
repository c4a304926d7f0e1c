from __future__ import annotations

import httpx
import pytest
from selectolax.parser import HTMLParser

from word_harvester.config import DictionaryKind, HttpStrategies, SourceConfig
from word_harvester.dictionaries import (
    ADAPTERS,
    BingDict,
    CollinsDict,
    DictcnDict,
    WebsterDict,
    build_adapter,
    entry_deserializer,
)
from word_harvester.engine import Fetcher
from word_harvester.errors import NotFoundError, TransientLookupError

WEBSTER_HTML = """
<html><body>
<span class="word-syllables">ap*ple</span>
<span class="prs"><span class="pr">ˈa-pəl</span><a class="play-pron" data-dir="a" data-file="apple001"></a></span>
<div class="row entry-header"><h1 class="hword">apple</h1><span class="fl">noun</span></div>
<div id="dictionary-entry-1"><div class="vg"><div class="sb">
  <span class="sb-0"><span class="letter">1</span><span class="dtText">: the fleshy fruit of a tree</span><span class="mw_t_sp">an apple a day</span></span>
  <span class="sb-1"><span class="dtText">: a tree that bears apples</span></span>
</div></div></div>
<div class="widget more_defs"><div class="row entry-header"><h1 class="hword">bogus</h1></div></div>
</body></html>
"""

COLLINS_HTML = """
<html><body>
<div class="title_container"><h2 class="h2_entry"><span class="orth">apple</span></h2></div>
<div class="mini_h2"><span class="pron">ˈæpəl</span><span class="hyph">ap·ple</span></div>
<a class="hwd_sound" data-src-mp3="https://www.collinsdictionary.com/sounds/hwd_sounds/en_gb_apple.mp3"></a>
<div class="content definitions"><div class="hom"><span class="pos">countable noun</span>
  <div class="sense"><div class="def">An apple is a round fruit.</div><span class="quote">He ate an apple.</span></div>
</div></div>
</body></html>
"""

DICTCN_HTML = """
<html><body>
<h1 class="keyword">apple</h1>
<div class="phonetic">
  <span>英 <bdo>[ˈæpl]</bdo><i naudio="uk/f.mp3"></i><i naudio="uk/m.mp3"></i></span>
  <span>美 <bdo>[ˈæpəl]</bdo><i naudio="us/f.mp3"></i><i naudio="us/m.mp3"></i></span>
</div>
<ul class="dict-basic-ul"><li><span>n.</span><strong>苹果</strong></li><li><strong></strong></li></ul>
<div class="layout detail"><span>n.<bdo>noun</bdo></span><ol><li>苹果<p>an apple a day</p></li></ol></div>
</body></html>
"""

BING_HTML = """
<html><body>
<div id="headword"><h1><strong>apple</strong></h1></div>
<div class="hd_prUS">美 [ˈæp(ə)l]</div><div class="hd_pr">英 [ˈæp(ə)l]</div>
<div class="hd_tf"><a onclick="BilingualDict.Click(this,'https://media.example.cn/tom/apple.mp3','akicon.png',false)"></a></div>
<div class="hd_tf"><a onclick="BilingualDict.Click(this,'https://media.example.cn/george/apple.mp3','akicon.png',false)"></a></div>
<div class="qdef"><ul><li><span class="pos">n.</span><span class="def">苹果</span></li></ul></div>
<div id="sentenceSeg"><div class="sen_en">I ate an apple.</div></div>
</body></html>
"""


def parse(adapter_cls, html: str):
    adapter = adapter_cls(fetcher=None)  # type: ignore[arg-type]
    return adapter.parse(HTMLParser(html), "apple")


def test_registry_covers_every_kind() -> None:
    assert set(ADAPTERS) == set(DictionaryKind)
    for kind, adapter_cls in ADAPTERS.items():
        assert adapter_cls.kind is kind


def test_webster_parser() -> None:
    entry = parse(WebsterDict, WEBSTER_HTML)
    assert entry.identity() == "apple"
    assert entry.pronunciation() == "ap*ple | /ˈa-pəl/"
    assert entry.asset_urls() == [
        "https://media.merriam-webster.com/audio/prons/en/us/mp3/a/apple001.mp3"
    ]
    (definition,) = entry.definitions
    assert definition.part_of_speech == "noun"
    assert [sense.definition for sense in definition.senses] == [
        "1 : the fleshy fruit of a tree",
        ": a tree that bears apples",
    ]
    assert definition.senses[0].examples[0].text == "an apple a day"


def test_collins_parser() -> None:
    entry = parse(CollinsDict, COLLINS_HTML)
    assert entry.identity() == "apple"
    assert entry.pronunciation() == "ap·ple | /ˈæpəl/"
    assert entry.asset_urls() == [
        "https://www.collinsdictionary.com/sounds/hwd_sounds/en_gb_apple.mp3"
    ]
    assert entry.summary() == ["countable noun: An apple is a round fruit."]


def test_dictcn_parser() -> None:
    entry = parse(DictcnDict, DICTCN_HTML)
    assert entry.identity() == "apple"
    assert entry.uk.phonetic == "[ˈæpl]"
    assert entry.us.male_mp3 == "http://audio.dict.cn/us/m.mp3"
    assert entry.asset_urls() == ["http://audio.dict.cn/us/f.mp3"]
    assert entry.summary() == ["n.: 苹果"]
    (section,) = entry.sections
    assert section.name == "详尽释义"
    sense = section.definitions[0].senses[0]
    assert sense.definition == "苹果"
    assert [example.text for example in sense.examples] == ["an apple a day"]


def test_bing_parser() -> None:
    entry = parse(BingDict, BING_HTML)
    assert entry.identity() == "apple"
    assert entry.us_audio == "https://media.example.cn/tom/apple.mp3"
    assert entry.asset_urls() == [
        "https://media.example.cn/george/apple.mp3",
        "https://media.example.cn/tom/apple.mp3",
    ]
    assert entry.summary() == ["n.: 苹果"]
    assert [example.text for example in entry.examples] == ["I ate an apple."]


@pytest.mark.parametrize("adapter_cls", [WebsterDict, CollinsDict, DictcnDict, BingDict])
def test_page_without_entry_parses_to_none(adapter_cls) -> None:
    assert parse(adapter_cls, "<html><body><p>No results</p></body></html>") is None


def test_serialized_entry_reloads_through_kind_deserializer() -> None:
    entry = parse(DictcnDict, DICTCN_HTML)
    payload = entry.serialize()
    assert "\n" not in payload
    assert entry_deserializer("dictcn")(payload) == entry


@pytest.fixture
def webster_adapter(sample_global_config, mock_client):
    def _build(handler):
        fetcher = Fetcher(sample_global_config, client=mock_client(handler))
        source = SourceConfig(kind=DictionaryKind.WEBSTER, http=HttpStrategies(retry_on_fail=0))
        return build_adapter("webster", fetcher, source=source)

    return _build


def test_lookup_quotes_keyword_and_parses(webster_adapter) -> None:
    urls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, text=WEBSTER_HTML)

    entry = webster_adapter(handler).lookup("ice cream")
    assert urls == ["https://www.merriam-webster.com/dictionary/ice%20cream"]
    assert entry.identity() == "apple"


def test_lookup_maps_404_to_not_found(webster_adapter) -> None:
    adapter = webster_adapter(lambda request: httpx.Response(404))
    with pytest.raises(NotFoundError):
        adapter.lookup("qwzx")


def test_lookup_maps_empty_page_to_not_found(webster_adapter) -> None:
    adapter = webster_adapter(lambda request: httpx.Response(200, text="<html></html>"))
    with pytest.raises(NotFoundError):
        adapter.lookup("qwzx")


def test_lookup_maps_server_error_to_transient(webster_adapter) -> None:
    adapter = webster_adapter(lambda request: httpx.Response(502))
    with pytest.raises(TransientLookupError):
        adapter.lookup("apple")
