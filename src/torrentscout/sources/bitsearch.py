"""bitsearch.to search source.

- GET /search?q=<query>&page=<n>&sortBy=seeders[&category=<id>]

The first five result pages are fetched concurrently and concatenated
in page order.  Each hit is a card: an info column (name, category,
size, date, seeders, leechers) and a links column whose last link is
the magnet URI.
"""

from __future__ import annotations

import asyncio

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_int
from torrentscout.infrastructure.common.dates import format_month_day_year
from torrentscout.infrastructure.common.html_selectors import (
    child_tags,
    own_text,
    parse_html,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

PAGES = 5

_CATEGORY_IDS: dict[Category, int] = {
    Category.ANIME: 4,
    Category.APPS: 5,
    Category.BOOKS: 9,
    Category.GAMES: 6,
    Category.MOVIES: 2,
    Category.MUSIC: 7,
    Category.PORN: 10,
    Category.SERIES: 3,
    Category.OTHER: 1,
}

# Top-level label (before "/") -> category.  "Movies/Dub/Dual Audio" -> Movies.
_CATEGORY_LABELS: dict[str, Category] = {
    "Movies": Category.MOVIES,
    "TV": Category.SERIES,
    "Anime": Category.ANIME,
    "Softwares": Category.APPS,
    "Games": Category.GAMES,
    "Music": Category.MUSIC,
    "AudioBook": Category.BOOKS,
    "Ebook": Category.BOOKS,
    "XXX": Category.PORN,
}


def category_from_label(label: str) -> Category:
    return _CATEGORY_LABELS.get(label.split("/")[0].strip(), Category.OTHER)


def _span_text(parent: Tag, index: int) -> str:
    """Own text of ``parent > span:nth-child(index) > span``."""
    spans = parent.find_all("span", recursive=False)
    if len(spans) <= index:
        return ""
    return own_text(spans[index].find("span"))


class BitSearchSource(HttpxSourceBase):
    id = "bitsearch"
    name = "BitSearch"
    url = "https://bitsearch.to"
    specialized_category = Category.ALL
    enabled_by_default = False

    def _page_url(self, query: str, category: Category, page: int) -> str:
        url = f"{self.url}/search?q={self._quote(query)}&page={page}&sortBy=seeders"
        category_id = _CATEGORY_IDS.get(category)
        if category_id is not None:
            url = f"{url}&category={category_id}"
        return url

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        pages = await asyncio.gather(
            *(
                self._search_page(self._page_url(query, category, page), fetch)
                for page in range(1, PAGES + 1)
            )
        )
        return [record for page in pages for record in page]

    async def _search_page(self, url: str, fetch: FetchPort) -> list[TorrentRecord]:
        html = await fetch.get_text(url)
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        container = select_one(parse_html(html), "div.space-y-4")
        if container is None:
            return []
        return self._collect_rows(child_tags(container), self._parse_card)

    def _parse_card(self, card: Tag) -> TorrentRecord | None:
        layout = select_one(card, "div.flex.items-start.justify-between")
        if layout is None:
            return None
        columns = child_tags(layout)
        if len(columns) < 2:
            return None
        info, links = columns[0], columns[1]

        info_rows = info.find_all("div", recursive=False)
        if len(info_rows) < 3:
            return None

        anchor = select_one(info_rows[0], "h3 > a")
        magnets = links.select("a[href]")
        if anchor is None or not magnets:
            return None

        size = _span_text(info_rows[1], 1)
        seeders = to_int(_span_text(info_rows[2], 0))
        peers = to_int(_span_text(info_rows[2], 1))
        if not size or seeders is None or peers is None:
            return None

        return self._record(
            name=own_text(anchor),
            size=normalize_size(size),
            seeders=seeders,
            peers=peers,
            upload_date=format_month_day_year(_span_text(info_rows[1], 2)),
            identifier=MagnetUri(str(magnets[-1]["href"])),
            category=category_from_label(_span_text(info_rows[1], 0)),
            description_page_url=f"{self.url}{anchor.get('href', '')}",
        )
