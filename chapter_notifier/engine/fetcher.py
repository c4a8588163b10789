"""HTTP fetching of the release listing page."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import httpx
import structlog

from ..config import SourceConfig
from ..infra import UserAgentPool


class FetchError(RuntimeError):
    """The source page could not be retrieved."""


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)


class Fetcher:
    """Retrieve the source page with a bounded timeout and rotating User-Agent."""

    def __init__(
        self,
        source: SourceConfig,
        ua_pool: UserAgentPool | None = None,
        logger: structlog.BoundLogger | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.source = source
        self.ua_pool = ua_pool or UserAgentPool()
        self.logger = logger or structlog.get_logger("chapter_notifier.fetcher").bind(
            component="fetcher"
        )
        client_kwargs: dict[str, Any] = {
            "follow_redirects": True,
            "timeout": source.request_timeout,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

    def close(self) -> None:
        self._client.close()

    def fetch(self, url: str | None = None) -> FetchResponse:
        target = url or self.source.website_url
        headers: dict[str, str] = {}
        user_agent = self.ua_pool.get()
        if user_agent:
            headers["User-Agent"] = user_agent
        self.logger.debug("fetch_start", url=target)
        try:
            response = self._client.request("GET", target, headers=headers)
        except httpx.TimeoutException as exc:
            raise FetchError(f"timed out visiting {target} after {self.source.request_timeout:g}s") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"error visiting {target}: {exc}") from exc
        if self._is_failure(response):
            raise FetchError(f"error visiting {target}: unexpected status {response.status_code}")
        self.logger.debug("fetch_done", url=str(response.url), status=response.status_code)
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
            raw=response,
        )

    @staticmethod
    def _is_failure(response: Any) -> bool:
        status_code = getattr(response, "status_code", 0)
        return status_code >= 400


__all__ = ["FetchError", "FetchResponse", "Fetcher"]
