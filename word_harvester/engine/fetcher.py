"""HTTP fetching for dictionary pages with strategy chain integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import httpx
import structlog

from ..config import GlobalConfig, SourceConfig
from ..errors import TransientLookupError
from ..infra import UserAgentPool
from .antibot import StrategyChain, build_chain

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 6.1) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/41.0.2228.0 Safari/537.36"
)


@dataclass(slots=True)
class FetchRequest:
    """Input for the fetcher."""

    url: str
    method: str = "GET"
    params: dict[str, Any] | None = None
    headers: dict[str, str] | None = None
    timeout: float | None = None


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)

    @property
    def not_found(self) -> bool:
        return self.status_code in (404, 410)


class Fetcher:
    """Coordinate request execution and the request strategy chain.

    One client is shared by every dictionary adapter and asset store of a run so
    that connections are pooled. ``client`` may be injected (tests pass an
    ``httpx.Client`` built on ``httpx.MockTransport``).
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        ua_pool: UserAgentPool | None = None,
        logger: structlog.BoundLogger | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.global_config = global_config
        self.ua_pool = ua_pool
        self.logger = logger or structlog.get_logger("word_harvester.fetcher")
        default_ua = DEFAULT_USER_AGENT
        ua_list = self.global_config.user_agent_list
        if isinstance(ua_list, list) and ua_list:
            default_ua = next((ua for ua in ua_list if "Windows NT" in ua), ua_list[0])
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=20,
            headers={"User-Agent": default_ua},
        )

    @property
    def client(self) -> httpx.Client:
        return self._client

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def fetch(self, source: SourceConfig, request: FetchRequest) -> FetchResponse:
        """Return the response, retrying failures; 404/410 are returned, not raised."""

        chain = self._build_chain(source)
        last_error: Exception | None = None
        while True:
            directive = chain.prepare()
            req_headers = dict(directive.headers)
            if request.headers:
                req_headers.update(request.headers)
            timeout = request.timeout or directive.timeout or 20
            try:
                response = self._client.request(
                    method=request.method,
                    url=request.url,
                    params=request.params,
                    headers=req_headers,
                    timeout=timeout,
                )
                if self._is_failure(response):
                    chain.record(failed=True)
                    last_error = TransientLookupError(
                        f"Unexpected status {response.status_code} for {request.url}"
                    )
                else:
                    chain.record(failed=False)
                    return FetchResponse(
                        url=str(response.url),
                        status_code=response.status_code,
                        text=response.text,
                        headers=dict(response.headers),
                        raw=response,
                    )
            except httpx.HTTPError as exc:
                self.logger.warning(
                    "fetch_error",
                    url=request.url,
                    attempt=chain.attempts.number,
                    error=str(exc),
                )
                chain.record(failed=True)
                last_error = exc

            if not chain.should_retry():
                break

        raise TransientLookupError(
            f"Fetch failed after {chain.attempts.limit} attempts: {request.url}"
        ) from last_error

    # ------------------------------------------------------------------
    def _build_chain(self, source: SourceConfig) -> StrategyChain:
        return build_chain(source, self.ua_pool)

    @staticmethod
    def _is_failure(response: Any) -> bool:
        status_code = getattr(response, "status_code", 0)
        if status_code >= 500:
            return True
        if status_code in {401, 403, 429}:
            return True
        return False


__all__ = ["DEFAULT_USER_AGENT", "Fetcher", "FetchRequest", "FetchResponse"]
