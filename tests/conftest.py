"""Shared test fixtures for the torrentscout test suite."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Mapping

import pytest

from torrentscout.domain.entities import (
    Category,
    InfoHash,
    MagnetUri,
    SourceDescriptor,
    TorrentRecord,
)
from torrentscout.domain.ports.fetch import FetchResponse
from torrentscout.domain.sources import FetchStatusError

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


def make_record(
    name: str = "Ubuntu 24.04 LTS",
    *,
    source_id: str = "fake",
    seeders: int = 10,
    peers: int = 2,
    category: Category | None = Category.APPS,
    info_hash: str = "a" * 40,
) -> TorrentRecord:
    return TorrentRecord(
        name=name,
        size="4.50 GB",
        seeders=seeders,
        peers=peers,
        upload_date="11 Jun 2025",
        source_id=source_id,
        source_name=source_id.title(),
        identifier=InfoHash(info_hash),
        category=category,
        description_page_url=f"https://{source_id}.example/t/1",
    )


@pytest.fixture()
def record() -> TorrentRecord:
    return make_record()


@pytest.fixture()
def magnet_record() -> TorrentRecord:
    return TorrentRecord(
        name="[Group] Show - 01",
        size="1.20 GB",
        seeders=3,
        peers=1,
        upload_date="11 Jun 2025",
        source_id="nyaasi",
        source_name="Nyaa",
        identifier=MagnetUri("magnet:?xt=urn:btih:" + "b" * 40 + "&dn=show"),
        category=Category.ANIME,
    )


# ---------------------------------------------------------------------------
# Fake ports
# ---------------------------------------------------------------------------


@dataclass
class FakeFetcher:
    """In-memory ``FetchPort``.

    Responses are looked up by exact URL first, then by the longest
    registered prefix.  Values that are exceptions are raised.  Unknown
    URLs answer ``FetchStatusError(404)``.
    """

    texts: dict[str, Any] = field(default_factory=dict)
    json: dict[str, Any] = field(default_factory=dict)
    responses: dict[str, Any] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    headers: list[Mapping[str, str] | None] = field(default_factory=list)
    payloads: list[Any] = field(default_factory=list)

    @staticmethod
    def _lookup(table: dict[str, Any], url: str) -> Any:
        if url in table:
            value = table[url]
        else:
            prefixes = [key for key in table if url.startswith(key)]
            if not prefixes:
                raise FetchStatusError(404, url=url)
            value = table[max(prefixes, key=len)]
        if isinstance(value, BaseException):
            raise value
        return value

    def _track(self, method: str, url: str, headers: Mapping[str, str] | None) -> None:
        self.calls.append((method, url))
        self.headers.append(headers)

    @property
    def urls(self) -> list[str]:
        return [url for _, url in self.calls]

    async def get_text(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> str:
        self._track("GET", url, headers)
        return self._lookup(self.texts, url)

    async def get_json(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Any | None:
        self._track("GET", url, headers)
        return self._lookup(self.json, url)

    async def post_json(
        self, url: str, payload: Any, *, headers: Mapping[str, str] | None = None
    ) -> Any | None:
        self._track("POST", url, headers)
        self.payloads.append(payload)
        return self._lookup(self.json, url)

    async def get_response(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> FetchResponse:
        self._track("GET", url, headers)
        value = self._lookup(self.responses, url)
        if isinstance(value, FetchResponse):
            return value
        status, text = value
        return FetchResponse(status_code=status, text=text)


@pytest.fixture()
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


class FakeSource:
    """Scriptable ``SearchSource``.

    ``gate`` (when set) blocks the search until released, which lets
    tests control completion order.
    """

    def __init__(
        self,
        source_id: str,
        *,
        records: list[TorrentRecord] | None = None,
        error: BaseException | None = None,
        category: Category = Category.ALL,
        enabled_by_default: bool = True,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
    ) -> None:
        self._info = SourceDescriptor(
            id=source_id,
            name=source_id.title(),
            url=f"https://{source_id}.example",
            specialized_category=category,
            enabled_by_default=enabled_by_default,
        )
        self.records = records if records is not None else []
        self.error = error
        self.delay = delay
        self.gate = gate
        self.calls: list[tuple[str, Category]] = []
        self.cancelled = False

    @property
    def info(self) -> SourceDescriptor:
        return self._info

    async def search(
        self, query: str, category: Category, fetch: Any
    ) -> list[TorrentRecord]:
        self.calls.append((query, category))
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return list(self.records)
