"""Per-request strategies for dictionary page fetches.

Before each attempt every strategy may add headers or a timeout to a
:class:`RequestDirective`; afterwards it sees whether the attempt failed.
The fetch loop asks the :class:`StrategyChain` whether another attempt is
allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol

from ...config import SourceConfig
from ...infra import UserAgentPool


@dataclass
class RequestDirective:
    """Options applied to the next outgoing request."""

    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None


@dataclass
class Attempts:
    """Attempt counter for one fetch of one dictionary page."""

    source: SourceConfig
    number: int = 1
    limit: int = 1


class Strategy(Protocol):
    def before_request(self, attempts: Attempts, directive: RequestDirective) -> None:
        return

    def after_attempt(self, attempts: Attempts, failed: bool) -> None:
        return


class UserAgentStrategy(Strategy):
    """Pick a user agent from the pool when the dictionary rotates them."""

    def __init__(self, pool: UserAgentPool | None) -> None:
        self.pool = pool

    def before_request(self, attempts: Attempts, directive: RequestDirective) -> None:
        if not attempts.source.http.user_agent_rotation:
            return
        ua = self.pool.get() if self.pool else None
        if ua:
            directive.headers.setdefault("User-Agent", ua)


class HeaderStrategy(Strategy):
    """Apply per-dictionary static headers and timeout."""

    def before_request(self, attempts: Attempts, directive: RequestDirective) -> None:
        for name, value in attempts.source.http.extra_headers.items():
            directive.headers.setdefault(name, value)
        directive.timeout = attempts.source.http.timeout


class RetryStrategy(Strategy):
    """Allow ``retry_on_fail`` extra attempts after a failed one."""

    def before_request(self, attempts: Attempts, directive: RequestDirective) -> None:
        attempts.limit = max(1, attempts.source.http.retry_on_fail + 1)

    def after_attempt(self, attempts: Attempts, failed: bool) -> None:
        attempts.number = attempts.number + 1 if failed else 1


class StrategyChain:
    def __init__(self, source: SourceConfig, strategies: Iterable[Strategy]) -> None:
        self.attempts = Attempts(source=source)
        self.strategies = list(strategies)

    def prepare(self) -> RequestDirective:
        directive = RequestDirective()
        for strategy in self.strategies:
            strategy.before_request(self.attempts, directive)
        return directive

    def record(self, failed: bool) -> None:
        for strategy in self.strategies:
            strategy.after_attempt(self.attempts, failed)

    def should_retry(self) -> bool:
        return self.attempts.number <= self.attempts.limit


def build_chain(source: SourceConfig, ua_pool: UserAgentPool | None) -> StrategyChain:
    return StrategyChain(source, [RetryStrategy(), UserAgentStrategy(ua_pool), HeaderStrategy()])


__all__ = [
    "Attempts",
    "HeaderStrategy",
    "RequestDirective",
    "RetryStrategy",
    "Strategy",
    "StrategyChain",
    "UserAgentStrategy",
    "build_chain",
]
