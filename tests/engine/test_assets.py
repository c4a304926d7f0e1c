from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from word_harvester.engine.assets import AssetStore, asset_name
from word_harvester.errors import AssetError

URL = "https://media.example.com/audio/prons/en/us/mp3/a/apple001.mp3"


def test_download_then_dedup(tmp_path: Path, mock_client) -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, content=b"ID3-audio")

    store = AssetStore(tmp_path / "audio", mock_client(handler))
    assert store.fetch(URL) is False
    assert (tmp_path / "audio" / "apple001.mp3").read_bytes() == b"ID3-audio"
    assert store.fetch(URL) is True
    assert calls == [URL]
    assert store.exists(URL)


def test_empty_url_is_a_no_op(tmp_path: Path, mock_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    store = AssetStore(tmp_path / "audio", mock_client(handler))
    assert store.fetch("") is True


def test_existing_file_skips_network(tmp_path: Path, mock_client) -> None:
    target_dir = tmp_path / "audio"
    target_dir.mkdir()
    (target_dir / "apple001.mp3").write_bytes(b"old")

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    store = AssetStore(target_dir, mock_client(handler))
    assert store.fetch(URL) is True
    assert (target_dir / "apple001.mp3").read_bytes() == b"old"


def test_http_error_leaves_no_files(tmp_path: Path, mock_client) -> None:
    store = AssetStore(tmp_path / "audio", mock_client(lambda request: httpx.Response(503)))
    with pytest.raises(AssetError) as excinfo:
        store.fetch(URL)
    assert excinfo.value.url == URL
    assert list((tmp_path / "audio").iterdir()) == []


def test_transport_error_leaves_no_files(tmp_path: Path, mock_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    store = AssetStore(tmp_path / "audio", mock_client(handler))
    with pytest.raises(AssetError):
        store.fetch(URL)
    assert list((tmp_path / "audio").iterdir()) == []


def test_target_name_is_unquoted_basename(tmp_path: Path, mock_client) -> None:
    store = AssetStore(tmp_path / "audio", mock_client(lambda request: httpx.Response(200)))
    assert store.target_path("http://audio.dict.cn/a%20b.mp3?t=1").name == "a b.mp3"
    with pytest.raises(AssetError):
        store.target_path("https://example.com/")


def test_malformed_url_raises_asset_error_and_leaves_no_files(tmp_path: Path, mock_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    bad = "https://media.example.com:abc/audio/apple001.mp3"
    store = AssetStore(tmp_path / "audio", mock_client(handler))
    with pytest.raises(AssetError) as excinfo:
        store.fetch(bad)
    assert excinfo.value.url == bad
    assert list((tmp_path / "audio").iterdir()) == []


class BrokenBody(httpx.SyncByteStream):
    def __iter__(self):
        yield b"ID3-partial"
        raise httpx.ReadError("connection reset")


def test_failure_mid_body_leaves_no_target(tmp_path: Path, mock_client) -> None:
    store = AssetStore(
        tmp_path / "audio", mock_client(lambda request: httpx.Response(200, stream=BrokenBody()))
    )
    with pytest.raises(AssetError):
        store.fetch(URL)
    assert not store.target_path(URL).exists()
    assert list((tmp_path / "audio").iterdir()) == []
    assert not store.exists(URL)


def test_asset_name_matches_stored_file(tmp_path: Path, mock_client) -> None:
    url = "http://audio.dict.cn/a%20b.mp3?t=apple"
    store = AssetStore(tmp_path / "audio", mock_client(lambda request: httpx.Response(200, content=b"x")))
    store.fetch(url)
    assert [path.name for path in (tmp_path / "audio").iterdir()] == [asset_name(url)] == ["a b.mp3"]
