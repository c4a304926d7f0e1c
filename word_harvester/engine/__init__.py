"""Engine components: fetch, log, cache and download."""

from .assets import AssetStore, asset_name
from .cache import CacheOrchestrator, ResolveOutcome, ResolveResult
from .entry_log import EntryLog, LogLookup
from .fetcher import FetchRequest, FetchResponse, Fetcher

__all__ = [
    "AssetStore",
    "CacheOrchestrator",
    "EntryLog",
    "FetchRequest",
    "FetchResponse",
    "Fetcher",
    "LogLookup",
    "ResolveOutcome",
    "ResolveResult",
    "asset_name",
]
