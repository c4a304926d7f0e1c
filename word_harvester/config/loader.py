"""Configuration loading helpers for word-harvester."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import DictionaryKind, GlobalConfig, SourceConfig

GLOBAL_CONFIG_FILENAME = "global_config.yaml"
SOURCE_CONFIG_SUFFIX = ".yaml"


def _read_file(path: Path) -> dict:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    dictionaries_dir: Path | None = None
    outputs_dir: Path | None = None
    sources_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("WORD_HARVESTER_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.dictionaries_dir = (self.data_dir / "dictionaries").resolve()
        self.outputs_dir = (self.data_dir / "outputs").resolve()
        self.sources_dir = (self.data_dir / "sources").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (
            self.data_dir,
            self.dictionaries_dir,
            self.outputs_dir,
            self.sources_dir,
            self.logs_dir,
        ):
            directory.mkdir(parents=True, exist_ok=True)

    def global_config_path(self) -> Path:
        return self.data_dir / GLOBAL_CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._global_cache: GlobalConfig | None = None

    # ------------------------------------------------------------------
    # Global configuration helpers
    # ------------------------------------------------------------------
    def load_global_config(self) -> GlobalConfig:
        if self._global_cache is not None:
            return self._global_cache
        path = self.locator.global_config_path()
        if path.exists():
            payload = _read_file(path)
            global_cfg = GlobalConfig.model_validate(payload)
        else:
            global_cfg = GlobalConfig()
            self.save_global_config(global_cfg)
        self._global_cache = global_cfg
        return global_cfg

    def save_global_config(self, config: GlobalConfig) -> None:
        path = self.locator.global_config_path()
        payload = config.model_dump(mode="json")
        _write_file(path, payload)
        self._global_cache = config

    def data_dir(self, config: GlobalConfig | None = None) -> Path:
        config = config or self.load_global_config()
        return config.resolved_dir(self.locator.project_root, config.data_dir)

    def outputs_dir(self, config: GlobalConfig | None = None) -> Path:
        config = config or self.load_global_config()
        return config.resolved_dir(self.locator.project_root, config.outputs_dir)

    # ------------------------------------------------------------------
    # Per-dictionary configuration helpers
    # ------------------------------------------------------------------
    def source_path(self, kind: DictionaryKind | str) -> Path:
        kind = DictionaryKind(kind)
        return self.locator.sources_dir / f"{kind.value}{SOURCE_CONFIG_SUFFIX}"

    def load_source(self, kind: DictionaryKind | str) -> SourceConfig:
        """Return the stored settings for ``kind`` or defaults when none exist."""

        kind = DictionaryKind(kind)
        path = self.source_path(kind)
        if not path.exists():
            return SourceConfig(kind=kind)
        cfg = SourceConfig.model_validate(_read_file(path))
        if cfg.kind is not kind:
            raise ValueError(f"{path} describes {cfg.kind.value}, expected {kind.value}")
        return cfg

    def save_source(self, config: SourceConfig) -> Path:
        path = self.source_path(config.kind)
        _write_file(path, config.model_dump(mode="json"))
        return path


__all__ = ["ConfigLocator", "ConfigRepository"]
