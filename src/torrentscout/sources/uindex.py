"""uindex.org search source.

- GET /search.php?search=<query>&c=<index>

Rows of ``table.maintable`` carry a category label, a magnet link, the
name/detail link, the upload date and size plus seeder/leecher counts.
"""

from __future__ import annotations

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.categories import map_category
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.dates import format_date
from torrentscout.infrastructure.common.html_selectors import (
    extract_attr,
    extract_text,
    own_text,
    parse_html,
    select_items,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_CATEGORY_INDEX: dict[Category, int] = {
    Category.ALL: 0,
    Category.BOOKS: 0,
    Category.ANIME: 7,
    Category.APPS: 5,
    Category.GAMES: 3,
    Category.MOVIES: 1,
    Category.MUSIC: 4,
    Category.PORN: 6,
    Category.SERIES: 2,
    Category.OTHER: 8,
}

_CATEGORY_LABELS: dict[str, Category] = {
    "Anime": Category.ANIME,
    "Apps": Category.APPS,
    "Games": Category.GAMES,
    "Movies": Category.MOVIES,
    "Music": Category.MUSIC,
    "XXX": Category.PORN,
    "TV": Category.SERIES,
    "Other": Category.OTHER,
}


class UIndexSource(HttpxSourceBase):
    id = "uindex"
    name = "UIndex"
    url = "https://uindex.org"
    specialized_category = Category.ALL
    enabled_by_default = True

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        index = _CATEGORY_INDEX.get(category, 0)
        html = await fetch.get_text(
            f"{self.url}/search.php?search={self._quote(query)}&c={index}"
        )
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        rows = select_items(parse_html(html), "table.maintable > tbody > tr")
        return self._collect_rows(rows, self._parse_row)

    def _parse_row(self, tr: Tag) -> TorrentRecord | None:
        cells = tr.find_all("td", recursive=False)
        if len(cells) < 5:
            return None

        label = extract_text(cells[0], "a")
        magnet = extract_attr(cells[1], "a:nth-child(1)", "href")
        name = extract_text(cells[1], "a:nth-child(2)")
        detail_path = extract_attr(cells[1], "a:nth-child(2)", "href")
        date = own_text(cells[1].find("div"))
        size = extract_text(cells[2], "")
        if not (name and magnet.startswith("magnet:") and size):
            return None

        return self._record(
            name=name,
            size=normalize_size(size),
            seeders=to_count(extract_text(cells[3], "span")),
            peers=to_count(extract_text(cells[4], "span")),
            upload_date=format_date(date),
            identifier=MagnetUri(magnet),
            category=map_category(_CATEGORY_LABELS, label),
            description_page_url=f"{self.url}{detail_path}" if detail_path else "",
        )
