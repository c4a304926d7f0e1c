"""Error taxonomy shared by the lookup pipeline."""

from __future__ import annotations

from pathlib import Path


class HarvesterError(Exception):
    """Base class for every error raised by word-harvester."""


class NotFoundError(HarvesterError):
    """The dictionary confirmed that the keyword has no entry."""

    def __init__(self, keyword: str) -> None:
        super().__init__(f"not found: {keyword}")
        self.keyword = keyword


class TransientLookupError(HarvesterError):
    """Network, timeout or malformed-response failure; safe to retry later."""


class CorruptionError(HarvesterError):
    """A record in an entry log could not be replayed."""

    def __init__(self, path: Path, line_number: int, raw: str, reason: str) -> None:
        super().__init__(f"corrupt record at {path}:{line_number}: {reason}")
        self.path = path
        self.line_number = line_number
        self.raw = raw


class DurabilityError(HarvesterError):
    """Appending to an entry log failed; the outcome was not recorded."""


class AssetError(HarvesterError):
    """Downloading a referenced media asset failed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"cannot download {url}: {reason}")
        self.url = url


__all__ = [
    "AssetError",
    "CorruptionError",
    "DurabilityError",
    "HarvesterError",
    "NotFoundError",
    "TransientLookupError",
]
