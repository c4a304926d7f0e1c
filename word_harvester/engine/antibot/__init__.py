"""Request strategy chain applied by the fetcher."""

from .strategies import (
    Attempts,
    HeaderStrategy,
    RequestDirective,
    RetryStrategy,
    Strategy,
    StrategyChain,
    UserAgentStrategy,
    build_chain,
)

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
