"""therarbg.com search source.

- GET /get-posts/keywords:<query>[:category:<Name>]

The results table has no hash or magnet; every row is completed by
fetching its detail page and reading ``.info-hash-value``.  Detail pages
are fetched concurrently; a failed one drops only its own row.
"""

from __future__ import annotations

import asyncio
from typing import Any

from bs4 import Tag

from torrentscout.domain.entities import Category, InfoHash, TorrentRecord, is_info_hash
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.dates import format_date
from torrentscout.infrastructure.common.html_selectors import (
    child_tags,
    own_text,
    parse_html,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_CATEGORY_NAMES: dict[Category, str] = {
    Category.ANIME: "Anime",
    Category.APPS: "Apps",
    Category.BOOKS: "Books",
    Category.GAMES: "Games",
    Category.MOVIES: "Movies",
    Category.MUSIC: "Music",
    Category.PORN: "XXX",
    Category.SERIES: "Tv",
}


def parse_info_hash(html: str) -> str | None:
    value = own_text(select_one(parse_html(html), ".info-hash-value"))
    return value if is_info_hash(value) else None


class TheRarBgSource(HttpxSourceBase):
    id = "therarbg"
    name = "TheRarBg"
    url = "https://therarbg.com"
    specialized_category = Category.ALL
    enabled_by_default = True

    def _search_url(self, query: str, category: Category) -> str:
        url = f"{self.url}/get-posts/keywords:{self._quote(query)}"
        name = _CATEGORY_NAMES.get(category)
        if name is not None:
            url = f"{url}:category:{name}"
        return url

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(self._search_url(query, category))
        rows = await self._parse_off_loop(self._parse_results, html)
        return await self._enrich(rows, lambda row: self._complete_row(row, fetch))

    def _parse_results(self, html: str) -> list[dict[str, Any]]:
        tbody = select_one(parse_html(html), "table > tbody")
        if tbody is None:
            return []
        return self._collect_rows(child_tags(tbody), self._parse_row)

    def _parse_row(self, tr: Tag) -> dict[str, Any] | None:
        cells = tr.find_all("td", recursive=False)
        if len(cells) < 8:
            return None
        anchor = cells[1].find("a")
        size = own_text(cells[5])
        if anchor is None or not anchor.get("href") or not size:
            return None

        return {
            "name": own_text(anchor),
            "size": normalize_size(size),
            "seeders": to_count(own_text(cells[6])),
            "peers": to_count(own_text(cells[7])),
            "upload_date": format_date(own_text(cells[3].find("div"))),
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
