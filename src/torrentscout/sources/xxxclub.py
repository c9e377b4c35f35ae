"""xxxclub.to search source (adult).

- GET /torrents/search/all/<query>

Results are ``<li>`` items of ``ul.tsearch`` (the first one is a header).
The magnet link only appears on the detail page (``a.mg-link``).
"""

from __future__ import annotations

import asyncio
from typing import Any

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.html_selectors import (
    child_tags,
    extract_attr,
    extract_text,
    own_text,
    parse_html,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase


def strip_time(raw: str) -> str:
    """``"05 Aug 2025 07:23:05"`` -> ``"05 Aug 2025"``."""
    head, sep, _ = raw.strip().rpartition(" ")
    return head.strip() if sep else raw


def parse_magnet(html: str) -> str | None:
    return extract_attr(parse_html(html), "a.mg-link", "href") or None


class XXXClubSource(HttpxSourceBase):
    id = "xxxclub"
    name = "XXXClub"
    url = "https://xxxclub.to"
    specialized_category = Category.PORN
    enabled_by_default = False

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(
            f"{self.url}/torrents/search/all/{self._quote(query)}"
        )
        rows = await self._parse_off_loop(self._parse_results, html)
        return await self._enrich(rows, lambda row: self._complete_row(row, fetch))

    def _parse_results(self, html: str) -> list[dict[str, Any]]:
        listing = select_one(parse_html(html), "ul.tsearch")
        if listing is None:
            return []
        return self._collect_rows(child_tags(listing)[1:], self._parse_item)

    def _parse_item(self, li: Tag) -> dict[str, Any] | None:
        anchor = select_one(li, "span:nth-child(2) > a:nth-child(2)")
        size = own_text(select_one(li, "span.siz"))
        added = own_text(select_one(li, "span.adde"))
        if anchor is None or not anchor.get("href") or not size or not added:
            return None

        return {
            "name": extract_text(anchor, ""),
            "size": normalize_size(size),
            "seeders": to_count(own_text(select_one(li, "span.see"))),
            "peers": to_count(own_text(select_one(li, "span.lee"))),
            "upload_date": strip_time(added),
            "category": Category.PORN,
            "description_page_url": f"{self.url}{anchor['href']}",
        }

    async def _complete_row(
        self, row: dict[str, Any], fetch: FetchPort
    ) -> TorrentRecord | None:
        html = await self._fetch_detail(fetch, row["description_page_url"])
        if html is None:
            return None
        magnet = await asyncio.to_thread(parse_magnet, html)
        if magnet is None:
            return None
        return self._record(**row, identifier=MagnetUri(magnet))
