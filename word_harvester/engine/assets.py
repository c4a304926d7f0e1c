"""URL-addressed media downloads with at-most-once, crash-safe writes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

import httpx
import structlog

from ..errors import AssetError


def asset_name(url: str) -> str:
    """File name an asset URL is stored under: the decoded last path segment."""

    try:
        path = urlparse(url).path
    except ValueError as exc:
        raise AssetError(url, str(exc)) from exc
    name = PurePosixPath(unquote(path)).name
    if not name or name in (".", ".."):
        raise AssetError(url, "url has no file name")
    return name


class AssetStore:
    """Download referenced media into one directory, keyed by URL basename.

    A file at the target path is the only completion marker: it is written to a
    uniquely named sibling temp file and moved into place with ``os.replace``,
    so readers never observe a truncated target. Concurrent fetches of the
    same URL may both download; the last rename wins and the file stays whole.
    """

    def __init__(
        self,
        directory: Path,
        client: httpx.Client,
        logger: structlog.BoundLogger | None = None,
        chunk_size: int = 64 * 1024,
    ) -> None:
        self.directory = directory
        self.client = client
        self.logger = logger or structlog.get_logger("word_harvester.assets")
        self.chunk_size = chunk_size
        self.directory.mkdir(parents=True, exist_ok=True)

    def target_path(self, url: str) -> Path:
        return self.directory / asset_name(url)

    def exists(self, url: str) -> bool:
        return bool(url) and self.target_path(url).exists()

    def fetch(self, url: str) -> bool:
        """Ensure ``url`` is stored locally; return True when no download happened."""

        if not url:
            return True
        target = self.target_path(url)
        if target.exists():
            return True

        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=self.directory, prefix=f".{target.name}.", suffix=".part", delete=False
            ) as handle:
                tmp_path = Path(handle.name)
                with self.client.stream("GET", url) as response:
                    if not response.is_success:
                        raise AssetError(url, f"unexpected status {response.status_code}")
                    for chunk in response.iter_bytes(self.chunk_size):
                        handle.write(chunk)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, target)
            tmp_path = None
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, OSError) as exc:
            raise AssetError(url, str(exc)) from exc
        finally:
            if tmp_path is not None:
                self._discard(tmp_path)
        self.logger.info("asset_download_ok", url=url, path=str(target))
        return False

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass


__all__ = ["AssetStore", "asset_name"]
