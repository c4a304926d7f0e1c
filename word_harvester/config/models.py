"""Pydantic models used across the word-harvester configuration flow."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class DictionaryKind(str, Enum):
    """Supported dictionary sources."""

    COLLINS = "collins"
    WEBSTER = "webster"
    DICTCN = "dictcn"
    BINGDICT = "bingdict"


# Lower index wins; decides the left-to-right layout of merged records.
DEFAULT_PRIORITY: tuple[DictionaryKind, ...] = (
    DictionaryKind.COLLINS,
    DictionaryKind.WEBSTER,
    DictionaryKind.DICTCN,
    DictionaryKind.BINGDICT,
)


class HttpStrategies(BaseModel):
    """Request tuning applied by the fetcher strategy chain."""

    user_agent_rotation: bool = False
    retry_on_fail: int = 1
    timeout: float = 20.0
    extra_headers: dict[str, str] = Field(default_factory=lambda: {"accept": "*/*"})

    @model_validator(mode="after")
    def _validate_numbers(self) -> "HttpStrategies":
        if self.retry_on_fail < 0:
            raise ValueError("retry_on_fail must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        return self


class SourceConfig(BaseModel):
    """Per-dictionary settings."""

    kind: DictionaryKind
    http: HttpStrategies = Field(default_factory=HttpStrategies)
    log_filename: str = "words.txt"
    asset_dirname: str = "audio"
    asset_error_filename: str = "asset-errors.txt"

    @field_validator("log_filename", "asset_dirname", "asset_error_filename")
    @classmethod
    def _plain_name(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            raise ValueError("expected a plain file or directory name")
        return value

    def source_dir(self, data_dir: Path) -> Path:
        return data_dir / self.kind.value

    def log_path(self, data_dir: Path) -> Path:
        return self.source_dir(data_dir) / self.log_filename

    def asset_dir(self, data_dir: Path) -> Path:
        return self.source_dir(data_dir) / self.asset_dirname

    def asset_error_path(self, data_dir: Path) -> Path:
        return self.source_dir(data_dir) / self.asset_error_filename


class GlobalConfig(BaseModel):
    """Process-level controls shared across dictionaries."""

    dictionaries: list[DictionaryKind] = Field(
        default_factory=lambda: [DictionaryKind.WEBSTER]
    )
    priority: list[DictionaryKind] = Field(default_factory=lambda: list(DEFAULT_PRIORITY))
    query_online: bool = True
    download_assets: bool = True
    sleep_interval: float = 1.0
    user_agent_list: list[str] | Path | None = None
    data_dir: Path = Field(default=Path("data/dictionaries"))
    outputs_dir: Path = Field(default=Path("data/outputs"))
    output_format: Literal["json", "csv", "sqlite"] = "json"
    enable_progress_bar: bool = True

    @field_validator("dictionaries", mode="before")
    @classmethod
    def _split_dictionaries(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [name.strip() for name in value.split(",") if name.strip()]
        return value

    @field_validator("dictionaries")
    @classmethod
    def _dedupe_dictionaries(cls, value: list[DictionaryKind]) -> list[DictionaryKind]:
        seen: list[DictionaryKind] = []
        for kind in value:
            if kind not in seen:
                seen.append(kind)
        return seen

    @field_validator("priority")
    @classmethod
    def _complete_priority(cls, value: list[DictionaryKind]) -> list[DictionaryKind]:
        if len(set(value)) != len(value):
            raise ValueError("priority entries must be unique")
        return list(value) + [kind for kind in DEFAULT_PRIORITY if kind not in value]

    @field_validator("sleep_interval")
    @classmethod
    def _non_negative_sleep(cls, value: float) -> float:
        if value < 0:
            raise ValueError("sleep_interval must be >= 0")
        return value

    @field_validator("data_dir", "outputs_dir", mode="before")
    @classmethod
    def _coerce_dirs(cls, value: Any) -> Path:
        return Path(value)

    @model_validator(mode="after")
    def _apply_user_agents(self) -> "GlobalConfig":
        if isinstance(self.user_agent_list, Path):
            if not self.user_agent_list.exists():
                raise ValueError(f"UA file not found: {self.user_agent_list}")
            content = self.user_agent_list.read_text(encoding="utf-8").splitlines()
            self.user_agent_list = [line.strip() for line in content if line.strip()]
        return self

    def ordered_dictionaries(self) -> list[DictionaryKind]:
        """Enabled dictionaries sorted by their priority rank."""

        rank = {kind: index for index, kind in enumerate(self.priority)}
        return sorted(self.dictionaries, key=lambda kind: rank[kind])

    def resolved_dir(self, base_dir: Path, directory: Path) -> Path:
        if directory.is_absolute():
            return directory
        return (base_dir / directory).resolve()


__all__ = [
    "DEFAULT_PRIORITY",
    "DictionaryKind",
    "GlobalConfig",
    "HttpStrategies",
    "SourceConfig",
]
