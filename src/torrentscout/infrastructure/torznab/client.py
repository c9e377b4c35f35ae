"""Torznab indexer client (Jackett, Prowlarr, ...).

One ``TorznabSource`` per configured indexer.  On the first search the
indexer's capabilities (``t=caps``) are fetched once and cached for the
lifetime of the instance.  A failed discovery is not retried and simply
disables category narrowing; a cancelled one is started again by the next
search.

See: https://torznab.github.io/spec-1.3-draft/torznab/Specification-v1.3.html
"""

from __future__ import annotations

import asyncio
from urllib.parse import quote_plus
from xml.etree import ElementTree as ET

import structlog

from torrentscout.domain.entities import (
    ApplicationError,
    Category,
    ConnectionCheckResult,
    ConnectionEstablished,
    ConnectionFailed,
    InvalidApiKey,
    SourceDescriptor,
    SourceKind,
    TorrentRecord,
    TorznabCapabilities,
    TorznabConfig,
    UnexpectedError,
    UnexpectedResponse,
)
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.domain.sources.exceptions import (
    FetchConnectionError,
    FetchError,
    FetchTimeoutError,
)

from .categories import category_ids_for
from .parsers import (
    TorznabItem,
    parse_capabilities,
    parse_error_code,
    parse_items,
    strip_declaration,
)

log = structlog.get_logger(__name__)

HTTP_STATUS_OK = 200
HTTP_STATUS_UNAUTHORIZED = 401


def normalize_api_url(url: str) -> str:
    """``https://host/torznab/`` -> ``https://host/torznab/api``.

    URLs already ending in ``api`` are used as is.
    """
    base = url.strip().rstrip("/")
    return base if base.endswith("api") else f"{base}/api"


def caps_url(api_url: str, api_key: str) -> str:
    return f"{api_url}?t=caps&apikey={quote_plus(api_key)}"


def search_url(api_url: str, api_key: str, query: str, category_ids: list[str]) -> str:
    url = (
        f"{api_url}?apikey={quote_plus(api_key)}"
        f"&extended=1&t=search&q={quote_plus(query.strip())}"
    )
    if category_ids:
        url = f"{url}&cat={','.join(category_ids)}"
    return url


def classify_caps_response(status_code: int, body: str) -> ConnectionCheckResult:
    """Classify an HTTP answer to a ``t=caps`` request."""
    # Prowlarr answers 401 for a bad key; Jackett answers 200 + <error code="100">.
    if status_code == HTTP_STATUS_UNAUTHORIZED:
        return InvalidApiKey()
    if status_code != HTTP_STATUS_OK:
        return UnexpectedError(f"HTTP {status_code}")

    text = strip_declaration(body)
    if text.startswith("<caps"):
        return ConnectionEstablished()
    if not text.startswith("<error"):
        return UnexpectedResponse(None)

    code = parse_error_code(text)
    if code is None:
        return UnexpectedResponse(None)
    if 100 <= code <= 199:
        return InvalidApiKey()
    if 200 <= code <= 299:
        return ApplicationError(code)
    return UnexpectedResponse(code)


class TorznabSource:
    """``SearchSource`` backed by a Torznab indexer."""

    def __init__(self, config: TorznabConfig) -> None:
        self.config = config
        self.api_url = normalize_api_url(config.url)
        self.capabilities: TorznabCapabilities | None = None
        self._caps_attempted = False
        self._caps_lock = asyncio.Lock()
        self._log = log.bind(indexer=config.id)

    @property
    def info(self) -> SourceDescriptor:
        return SourceDescriptor(
            id=self.config.id,
            name=self.config.name,
            url=self.config.url,
            specialized_category=self.config.category,
            safety=self.config.safety,
            enabled_by_default=False,
            kind=SourceKind.TORZNAB,
        )

    def __repr__(self) -> str:
        return f"<TorznabSource id={self.config.id!r} url={self.api_url!r}>"

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    async def ensure_capabilities(self, fetch: FetchPort) -> TorznabCapabilities | None:
        """Fetch capabilities once; later calls return the cached value."""
        async with self._caps_lock:
            if self._caps_attempted:
                return self.capabilities
            try:
                xml = await fetch.get_text(caps_url(self.api_url, self.config.api_key))
                capabilities = await asyncio.to_thread(parse_capabilities, xml)
            except (FetchError, ET.ParseError, ValueError) as exc:
                self._caps_attempted = True
                self._log.warning(
                    "torznab_caps_unavailable",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                return None
            self.capabilities = capabilities
            self._caps_attempted = True
            self._log.debug(
                "torznab_caps_cached",
                categories=len(self.capabilities.category_ids),
            )
            return self.capabilities

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        capabilities = await self.ensure_capabilities(fetch)
        url = search_url(
            self.api_url,
            self.config.api_key,
            query,
            category_ids_for(category, capabilities),
        )
        xml = await fetch.get_text(url)
        return await asyncio.to_thread(self._parse_results, xml)

    def _parse_results(self, xml: str) -> list[TorrentRecord]:
        try:
            items = parse_items(xml)
        except ET.ParseError as exc:
            self._log.warning("torznab_invalid_xml", error=str(exc), length=len(xml))
            return []

        records = [self._to_record(item) for item in items if item.is_complete()]
        if len(records) != len(items):
            self._log.debug(
                "torznab_items_dropped",
                dropped=len(items) - len(records),
                kept=len(records),
            )
        return records

    def _to_record(self, item: TorznabItem) -> TorrentRecord:
        return TorrentRecord(
            name=item.title or "",
            size=item.size or "",
            seeders=item.seeders or 0,
            peers=item.peers or 0,
            upload_date=item.pub_date or "",
            source_id=self.config.id,
            source_name=self.config.name,
            identifier=item.identifier,
            category=item.category,
            description_page_url=item.comments or "",
        )

    # ------------------------------------------------------------------
    # Connection diagnosis
    # ------------------------------------------------------------------

    async def check_connection(self, fetch: FetchPort) -> ConnectionCheckResult:
        return await check_connection(
            fetch, url=self.config.url, api_key=self.config.api_key
        )


async def check_connection(
    fetch: FetchPort,
    *,
    url: str,
    api_key: str,
) -> ConnectionCheckResult:
    """Validate an indexer URL and API key with a ``t=caps`` request."""
    request_url = caps_url(normalize_api_url(url), api_key)
    try:
        response = await fetch.get_response(request_url)
    except (FetchTimeoutError, FetchConnectionError) as exc:
        log.info("torznab_connection_failed", url=url, error=str(exc))
        return ConnectionFailed()
    except FetchError as exc:
        log.info("torznab_connection_error", url=url, error=str(exc))
        return UnexpectedError(str(exc))

    result = classify_caps_response(response.status_code, response.text)
    log.info(
        "torznab_connection_checked",
        url=url,
        status_code=response.status_code,
        result=type(result).__name__,
    )
    return result
