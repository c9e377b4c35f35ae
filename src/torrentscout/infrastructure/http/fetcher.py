"""httpx implementation of the fetch capability handed to sources.

Network failures are translated into the domain ``FetchError`` family so
that sources and the engine never depend on httpx directly.  JSON helpers
return ``None`` (with a warning) for non-JSON or empty bodies.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

import httpx
import structlog

from torrentscout.domain.ports.fetch import FetchResponse
from torrentscout.domain.sources.exceptions import (
    FetchConnectionError,
    FetchError,
    FetchStatusError,
    FetchTimeoutError,
)
from torrentscout.infrastructure.sources.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
)

log = structlog.get_logger(__name__)


def build_client(
    *,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    follow_redirects: bool = True,
) -> httpx.AsyncClient:
    """Create the shared ``httpx.AsyncClient`` used for all sources."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=connect_timeout),
        follow_redirects=follow_redirects,
        headers={"User-Agent": user_agent},
    )


class HttpxFetcher:
    """``FetchPort`` backed by one shared ``httpx.AsyncClient``.

    The client is either injected (tests, callers sharing a pool) or
    created lazily; only a lazily created client is closed by ``aclose``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        follow_redirects: bool = True,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._connect_timeout = connect_timeout
        self._user_agent = user_agent
        self._follow_redirects = follow_redirects

    # ------------------------------------------------------------------
    # Client lifecycle
    # ------------------------------------------------------------------

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_client(
                timeout=self._timeout,
                connect_timeout=self._connect_timeout,
                user_agent=self._user_agent,
                follow_redirects=self._follow_redirects,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxFetcher:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_payload: Any = None,
    ) -> httpx.Response:
        client = self._ensure_client()
        kwargs: dict[str, Any] = {"headers": dict(headers) if headers else None}
        if json_payload is not None:
            kwargs["json"] = json_payload
        try:
            return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(f"Timed out fetching {url}", url=url) from exc
        except httpx.ConnectError as exc:
            raise FetchConnectionError(f"Could not connect to {url}", url=url) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"{type(exc).__name__}: {exc}", url=url) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, url: str) -> None:
        if response.is_success:
            return
        raise FetchStatusError(response.status_code, url=url)

    def _decode_json(self, response: httpx.Response, url: str) -> Any | None:
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type.lower() or not response.content.strip():
            log.warning(
                "fetch_not_json",
                url=url,
                content_type=content_type,
                length=len(response.content),
            )
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError):
            log.warning("fetch_invalid_json", url=url)
            return None

    async def get_text(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> str:
        response = await self._send("GET", url, headers=headers)
        self._raise_for_status(response, url)
        return response.text

    async def get_json(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Any | None:
        response = await self._send("GET", url, headers=headers)
        self._raise_for_status(response, url)
        return self._decode_json(response, url)

    async def post_json(
        self, url: str, payload: Any, *, headers: Mapping[str, str] | None = None
    ) -> Any | None:
        response = await self._send("POST", url, headers=headers, json_payload=payload)
        self._raise_for_status(response, url)
        return self._decode_json(response, url)

    async def get_response(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> FetchResponse:
        response = await self._send("GET", url, headers=headers)
        return FetchResponse(status_code=response.status_code, text=response.text)
