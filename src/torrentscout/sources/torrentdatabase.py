"""TorrentDatabase (developify.ca) search source.

- GET /newest?q=<query>&category=<slug>

Rows of ``table.torrent-table`` carry a magnet link named after the
torrent, a category bubble, size, date and a seeders/leechers cell.
"""

from __future__ import annotations

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.categories import map_category
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.dates import format_year_month_day
from torrentscout.infrastructure.common.html_selectors import (
    extract_attr,
    own_text,
    parse_html,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_CATEGORY_SLUGS: dict[Category, str] = {
    Category.APPS: "software",
    Category.BOOKS: "e-books",
    Category.GAMES: "games",
    Category.MOVIES: "movies",
    Category.MUSIC: "music",
    Category.PORN: "porn",
    Category.SERIES: "tv",
}

_BUBBLE_LABELS: dict[str, Category] = {
    "Software": Category.APPS,
    "E-Books": Category.BOOKS,
    "AudioBooks": Category.BOOKS,
    "Games": Category.GAMES,
    "Movies": Category.MOVIES,
    "Music": Category.MUSIC,
    "Porn": Category.PORN,
    "TV": Category.SERIES,
}


class TorrentDatabaseSource(HttpxSourceBase):
    id = "torrentdatabase"
    name = "TorrentDatabase"
    url = "https://developify.ca"
    specialized_category = Category.ALL

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        slug = _CATEGORY_SLUGS.get(category, "")
        html = await fetch.get_text(
            f"{self.url}/newest?q={self._quote(query)}&category={slug}"
        )
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        tbody = select_one(
            parse_html(html), "table.torrent-table > tbody", "table.torrent-table"
        )
        if tbody is None:
            return []
        return self._collect_rows(tbody.find_all("tr"), self._parse_row)

    def _parse_row(self, tr: Tag) -> TorrentRecord | None:
        magnet_link = select_one(tr, "td.title-cell > a.magnet-link")
        info_path = extract_attr(tr, "td.title-cell > a.info-button", "href")
        bubble = select_one(tr, "span.category-bubble")
        size = own_text(select_one(tr, "td.size-cell"))
        date = own_text(select_one(tr, "td.date-cell")).split(" ")[0]
        stats = select_one(tr, "td:nth-of-type(5)")
        if magnet_link is None or bubble is None or stats is None:
            return None
        if not (info_path and size and date):
            return None

        return self._record(
            name=own_text(magnet_link),
            size=normalize_size(size),
            seeders=to_count(own_text(select_one(stats, "div > span:nth-child(1)"))),
            peers=to_count(own_text(select_one(stats, "div > span:nth-child(3)"))),
            upload_date=format_year_month_day(date),
            identifier=MagnetUri(str(magnet_link.get("href", ""))),
            category=map_category(_BUBBLE_LABELS, own_text(bubble)),
            description_page_url=f"{self.url}{info_path}",
        )
