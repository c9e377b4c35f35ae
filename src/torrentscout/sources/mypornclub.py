"""myporn.club search source (adult).

- GET /s/<query-with-dashes>/seeders

The info-hash is only published on the detail page as a
``[hash_info]:<hash>`` line inside ``div.torrent_info_div``.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

from bs4 import Tag

from torrentscout.domain.entities import Category, InfoHash, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.html_selectors import (
    extract_text,
    own_text,
    parse_html,
    select_items,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_HASH_RE = re.compile(r"\[hash_info]:(\w{32,40})")
_WHITESPACE_RE = re.compile(r"\s+")


def slugify_query(query: str) -> str:
    return _WHITESPACE_RE.sub("-", query.strip())


def parse_info_hash(html: str) -> str | None:
    info = select_one(parse_html(html), "div.torrent_info_div > div")
    match = _HASH_RE.search(own_text(info))
    return match.group(1) if match else None


class MyPornClubSource(HttpxSourceBase):
    id = "mypornclub"
    name = "MyPornClub"
    url = "https://myporn.club"
    specialized_category = Category.PORN
    enabled_by_default = False

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(f"{self.url}/s/{slugify_query(query)}/seeders")
        rows = await self._parse_off_loop(self._parse_results, html)
        return await self._enrich(rows, lambda row: self._complete_row(row, fetch))

    def _parse_results(self, html: str) -> list[dict[str, Any]]:
        rows = select_items(parse_html(html), "div.torrents_list > div.torrent_element")
        return self._collect_rows(rows, self._parse_row)

    def _parse_row(self, row: Tag) -> dict[str, Any] | None:
        anchor = select_one(row, 'a[href^="/t/"]')
        if anchor is None:
            return None
        spans = row.select("div.torrent_element_info span")

        def span(index: int) -> str:
            return extract_text(spans[index], "") if index < len(spans) else ""

        return {
            "name": extract_text(anchor, ""),
            "size": normalize_size(span(3)),
            "seeders": to_count(span(9)),
            "peers": to_count(span(11)),
            "upload_date": span(1),
            "category": Category.PORN,
            "description_page_url": f"{self.url}{anchor['href']}",
        }

    async def _complete_row(
        self, row: dict[str, Any], fetch: FetchPort
    ) -> TorrentRecord | None:
        html = await self._fetch_detail(fetch, row["description_page_url"])
        if html is None:
            return None
        info_hash = await asyncio.to_thread(parse_info_hash, html)
        if info_hash is None:
            return None
        return self._record(**row, identifier=InfoHash(info_hash))
