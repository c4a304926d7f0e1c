"""Pool of browser User-Agent strings used when rotation is enabled."""

from __future__ import annotations

import random
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional

from ..config import GlobalConfig


class UserAgentPool:
    """Hand out User-Agent strings at random; empty pools yield ``None``."""

    def __init__(
        self,
        user_agents: Iterable[str] | None = None,
        file_path: Path | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._lock = Lock()
        self._rng = rng or random.Random()
        self._uas: List[str] = []
        if user_agents:
            self._uas.extend(self._clean(user_agents))
        if file_path and file_path.exists():
            self._uas.extend(self._clean(file_path.read_text(encoding="utf-8").splitlines()))

    @classmethod
    def from_config(cls, global_config: GlobalConfig) -> "UserAgentPool":
        """Build from ``user_agent_list``; UA files are expanded during validation."""

        ua_list = global_config.user_agent_list
        return cls(user_agents=ua_list if isinstance(ua_list, list) else None)

    @staticmethod
    def _clean(lines: Iterable[str]) -> list[str]:
        return [line.strip() for line in lines if line.strip() and not line.lstrip().startswith("#")]

    def __len__(self) -> int:
        return len(self._uas)

    def get(self) -> Optional[str]:
        with self._lock:
            if not self._uas:
                return None
            return self._rng.choice(self._uas)

    def refresh(self, user_agents: Iterable[str]) -> None:
        with self._lock:
            self._uas = self._clean(user_agents)


__all__ = ["UserAgentPool"]
