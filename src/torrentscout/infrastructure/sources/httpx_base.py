"""Shared base class for builtin search sources.

Eliminates boilerplate that every site adapter would otherwise repeat:
descriptor assembly, per-source logging, parsing off the event loop,
row-level failure isolation and detail-page enrichment.

This base class lives in the *infrastructure* layer because it depends
on ``structlog``.  The *domain* layer only knows ``SearchSource``;
sources that inherit from ``HttpxSourceBase`` structurally satisfy that
Protocol.  Sources never talk to httpx directly; they receive a
``FetchPort`` per search call.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Iterable, TypeVar
from urllib.parse import quote_plus

import structlog

from torrentscout.domain.entities import (
    Category,
    Safe,
    SafetyStatus,
    SourceDescriptor,
    SourceKind,
    TorrentIdentifier,
    TorrentRecord,
)
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.domain.sources.exceptions import FetchError

T = TypeVar("T")
R = TypeVar("R")


class HttpxSourceBase:
    """Shared base for builtin sources.

    Subclasses **must** set:
    - ``id``, ``name``, ``url``

    Subclasses **must** override:
    - ``search()`` (the abstract stub raises ``NotImplementedError``)

    Subclasses **may** override:
    - ``specialized_category``, ``safety``, ``enabled_by_default``
    """

    # --- Must be set by subclass ---
    id: str = ""
    name: str = ""
    url: str = ""

    # --- Overridable defaults ---
    specialized_category: Category = Category.ALL
    safety: SafetyStatus = Safe()
    enabled_by_default: bool = False
    kind: SourceKind = SourceKind.BUILTIN

    def __init__(self) -> None:
        self._log = structlog.get_logger(self.id or __name__)

    @property
    def info(self) -> SourceDescriptor:
        return SourceDescriptor(
            id=self.id,
            name=self.name,
            url=self.url,
            specialized_category=self.specialized_category,
            safety=self.safety,
            enabled_by_default=self.enabled_by_default,
            kind=self.kind,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _quote(query: str) -> str:
        return quote_plus(query.strip())

    def _record(
        self,
        *,
        name: str,
        size: str,
        seeders: int,
        peers: int,
        upload_date: str,
        identifier: TorrentIdentifier,
        category: Category | None = None,
        description_page_url: str = "",
    ) -> TorrentRecord:
        return TorrentRecord(
            name=name,
            size=size,
            seeders=seeders,
            peers=peers,
            upload_date=upload_date,
            source_id=self.id,
            source_name=self.name,
            identifier=identifier,
            category=category,
            description_page_url=description_page_url,
        )

    async def _parse_off_loop(
        self,
        parser: Callable[..., list[R]],
        raw: Any,
        *args: Any,
    ) -> list[R]:
        """Run *parser* in a worker thread so parsing never blocks fetches.

        A parser crash (unexpected page shape) is logged and yields ``[]``.
        """
        try:
            return await asyncio.to_thread(parser, raw, *args)
        except Exception as exc:  # noqa: BLE001
            self._log.warning(
                f"{self.id}_parse_error",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return []

    def _collect_rows(
        self,
        rows: Iterable[T],
        parse_row: Callable[[T], R | None],
    ) -> list[R]:
        """Apply *parse_row* to each row; failing or empty rows are dropped."""
        out: list[R] = []
        dropped = 0
        for row in rows:
            try:
                item = parse_row(row)
            except (AttributeError, IndexError, KeyError, TypeError, ValueError):
                item = None
            if item is None:
                dropped += 1
                continue
            out.append(item)
        if dropped:
            self._log.debug(f"{self.id}_rows_dropped", dropped=dropped, kept=len(out))
        return out

    async def _fetch_detail(
        self,
        fetch: FetchPort,
        url: str,
        *,
        context: str = "detail",
    ) -> str | None:
        """Fetch a per-row detail page; failure returns ``None``."""
        try:
            return await fetch.get_text(url)
        except FetchError as exc:
            self._log.warning(
                f"{self.id}_enrichment_failed",
                url=url,
                error=str(exc),
                context=context,
            )
            return None

    async def _enrich(
        self,
        items: Iterable[T],
        enrich: Callable[[T], Awaitable[R | None]],
    ) -> list[R]:
        """Run *enrich* for every item concurrently, keeping input order.

        A failed or empty enrichment drops only its own item.
        """
        items = list(items)
        results = await asyncio.gather(
            *(enrich(item) for item in items),
            return_exceptions=True,
        )
        out: list[R] = []
        for result in results:
            if isinstance(result, Exception):
                self._log.warning(
                    f"{self.id}_enrichment_failed",
                    error=str(result),
                    error_type=type(result).__name__,
                )
                continue
            if isinstance(result, BaseException):
                raise result
            if result is not None:
                out.append(result)
        return out

    # ------------------------------------------------------------------
    # Abstract search (subclass must implement)
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        """Search the site and return normalised records.

        Subclasses **must** override this method.
        """
        raise NotImplementedError(f"{type(self).__name__}.search() not implemented")
