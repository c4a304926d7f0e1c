"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    DEFAULT_PRIORITY,
    DictionaryKind,
    GlobalConfig,
    HttpStrategies,
    SourceConfig,
)

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_PRIORITY",
    "DictionaryKind",
    "GlobalConfig",
    "HttpStrategies",
    "SourceConfig",
]
