"""Tests for HttpxSourceBase shared base class."""

from __future__ import annotations

import pytest
from conftest import FakeFetcher

from torrentscout.domain.entities import (
    Category,
    InfoHash,
    SourceKind,
    TorrentRecord,
    Unsafe,
)
from torrentscout.domain.sources import FetchTimeoutError, SearchSource
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

# ---------------------------------------------------------------------------
# Concrete test subclass
# ---------------------------------------------------------------------------


class _TestSource(HttpxSourceBase):
    id = "test-source"
    name = "Test Source"
    url = "https://test.example"
    specialized_category = Category.ANIME
    safety = Unsafe("malware")
    enabled_by_default = True

    def parse(self, raw: str) -> TorrentRecord | None:
        if not raw:
            return None
        return self._record(
            name=raw,
            size="1.00 GB",
            seeders=1,
            peers=0,
            upload_date="",
            identifier=InfoHash("a" * 40),
        )


class _BareSource(HttpxSourceBase):
    id = "bare"
    name = "Bare"
    url = "https://bare.example"


# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------


class TestInfo:
    def test_descriptor_from_class_attributes(self) -> None:
        info = _TestSource().info
        assert info.id == "test-source"
        assert info.name == "Test Source"
        assert info.url == "https://test.example"
        assert info.specialized_category is Category.ANIME
        assert info.safety == Unsafe("malware")
        assert info.enabled_by_default is True
        assert info.kind is SourceKind.BUILTIN

    def test_satisfies_search_source_protocol(self) -> None:
        assert isinstance(_TestSource(), SearchSource)

    def test_record_carries_source_identity(self) -> None:
        record = _TestSource().parse("abc")
        assert record is not None
        assert record.source_id == "test-source"
        assert record.source_name == "Test Source"

    @pytest.mark.asyncio
    async def test_search_must_be_overridden(self) -> None:
        with pytest.raises(NotImplementedError):
            await _BareSource().search("x", Category.ALL, FakeFetcher())


# ---------------------------------------------------------------------------
# Row isolation
# ---------------------------------------------------------------------------


class TestCollectRows:
    def test_drops_empty_and_failing_rows(self) -> None:
        source = _TestSource()

        def parse(row: str) -> str | None:
            if row == "boom":
                raise IndexError("missing cell")
            return row or None

        assert source._collect_rows(["a", "", "boom", "b"], parse) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_parse_off_loop_crash_yields_empty(self) -> None:
        def crash(raw: str) -> list[str]:
            raise RuntimeError("layout changed")

        assert await _TestSource()._parse_off_loop(crash, "<html/>") == []

    @pytest.mark.asyncio
    async def test_parse_off_loop_passes_args(self) -> None:
        source = _TestSource()
        result = await source._parse_off_loop(source._collect_rows, ["x"], source.parse)
        assert [r.name for r in result] == ["x"]


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------


class TestEnrichment:
    @pytest.mark.asyncio
    async def test_fetch_detail_failure_returns_none(self) -> None:
        fetch = FakeFetcher(
            texts={"https://test.example/t/1": FetchTimeoutError("slow")}
        )
        assert await _TestSource()._fetch_detail(fetch, "https://test.example/t/1") is None

    @pytest.mark.asyncio
    async def test_fetch_detail_success(self) -> None:
        fetch = FakeFetcher(texts={"https://test.example/t/1": "<html/>"})
        assert await _TestSource()._fetch_detail(fetch, "https://test.example/t/1") == "<html/>"

    @pytest.mark.asyncio
    async def test_enrich_keeps_order_and_drops_failures(self) -> None:
        async def enrich(item: int) -> int | None:
            if item == 2:
                raise ValueError("bad detail page")
            if item == 3:
                return None
            return item * 10

        assert await _TestSource()._enrich([1, 2, 3, 4], enrich) == [10, 40]
