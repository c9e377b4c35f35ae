"""torrentdownloads.pro search source.

- GET /search/?s_cat=<id>&search=<query>

Result rows are ``div.grey_bar3`` blocks (the first two are headers) in
the last ``div.inner_container``.  The category is encoded in the row
icon (``menu_icon4.png`` = movies).  Magnet link and upload date only
appear on the detail page, which is fetched for every row.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.categories import map_category
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.dates import format_year_month_day
from torrentscout.infrastructure.common.html_selectors import (
    own_text,
    parse_html,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_CATEGORY_IDS: dict[Category, int] = {
    Category.ALL: 0,
    Category.ANIME: 1,
    Category.APPS: 7,
    Category.BOOKS: 2,
    Category.GAMES: 3,
    Category.MOVIES: 4,
    Category.MUSIC: 5,
    Category.SERIES: 8,
    Category.PORN: 9,
    Category.OTHER: 9,
}

_ICON_CATEGORIES: dict[int, Category] = {
    0: Category.ALL,
    1: Category.ANIME,
    2: Category.BOOKS,
    3: Category.GAMES,
    4: Category.MOVIES,
    5: Category.MUSIC,
    7: Category.APPS,
    8: Category.SERIES,
    9: Category.OTHER,
}

_ICON_RE = re.compile(r"menu_icon(\d+)\.png$")


def category_from_icon(src: str) -> Category:
    match = _ICON_RE.search(src)
    return map_category(_ICON_CATEGORIES, int(match.group(1)) if match else None)


def parse_detail(html: str) -> tuple[str, str] | None:
    """Return ``(magnet_uri, upload_date)`` from a detail page."""
    container = select_one(parse_html(html), "div.inner_container")
    if container is None:
        return None
    bars = container.select("div.grey_bar1")
    if len(bars) < 7:
        return None

    link = bars[3].find("a")
    paragraph = bars[6].find("p")
    if link is None or paragraph is None or not link.get("href"):
        return None
    date = own_text(paragraph).split(" ")[0]
    return str(link["href"]), format_year_month_day(date)


class TorrentDownloadsSource(HttpxSourceBase):
    id = "torrentdownloads"
    name = "TorrentDownloads"
    url = "https://torrentdownloads.pro"
    specialized_category = Category.ALL
    enabled_by_default = True

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        category_id = _CATEGORY_IDS.get(category, 0)
        html = await fetch.get_text(
            f"{self.url}/search/?s_cat={category_id}&search={self._quote(query)}"
        )
        rows = await self._parse_off_loop(self._parse_results, html)
        return await self._enrich(rows, lambda row: self._complete_row(row, fetch))

    def _parse_results(self, html: str) -> list[dict[str, Any]]:
        containers = parse_html(html).select("div.inner_container")
        if not containers:
            return []
        rows = containers[-1].select("div.grey_bar3")[2:]
        return self._collect_rows(rows, self._parse_row)

    def _parse_row(self, div: Tag) -> dict[str, Any] | None:
        anchor = select_one(div, "p > a")
        icon = select_one(div, "p > img")
        if anchor is None or icon is None or not anchor.get("href"):
            return None

        size = own_text(select_one(div, "span:nth-child(5)"))
        if not size:
            return None

        return {
            "name": own_text(anchor),
            "size": normalize_size(size),
            "seeders": to_count(own_text(select_one(div, "span:nth-child(4)"))),
            "peers": to_count(own_text(select_one(div, "span:nth-child(3)"))),
            "category": category_from_icon(str(icon.get("src", ""))),
            "description_page_url": f"{self.url}{anchor['href']}",
        }

    async def _complete_row(
        self, row: dict[str, Any], fetch: FetchPort
    ) -> TorrentRecord | None:
        html = await self._fetch_detail(fetch, row["description_page_url"])
        if html is None:
            return None
        detail = await asyncio.to_thread(parse_detail, html)
        if detail is None:
            return None
        magnet, upload_date = detail
        return self._record(
            **row, upload_date=upload_date, identifier=MagnetUri(magnet)
        )
