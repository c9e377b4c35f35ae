"""share.dmhy.org search source.

- GET /topics/list?keyword=<query>

Only result rows with a magnet link are parsed.  Dates are
``yyyy/MM/dd HH:mm``; the category link ends in a numeric ``sort_id``.
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
    extract_text,
    own_text,
    parse_html,
    select_items,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_SORT_ID_PREFIX = "/topics/list/sort_id/"

_SORT_IDS: dict[str, Category] = {
    "2": Category.ANIME,
    "7": Category.ANIME,
    "31": Category.ANIME,
    "3": Category.BOOKS,
    "4": Category.MUSIC,
    "15": Category.MUSIC,
    "43": Category.MUSIC,
    "44": Category.MUSIC,
    "6": Category.SERIES,
    "41": Category.SERIES,
    "42": Category.SERIES,
    "9": Category.GAMES,
    "17": Category.GAMES,
    "18": Category.GAMES,
    "19": Category.GAMES,
    "20": Category.GAMES,
    "21": Category.GAMES,
}


def category_from_link(href: str) -> Category | None:
    if not href.startswith(_SORT_ID_PREFIX):
        return None
    return map_category(_SORT_IDS, href.removeprefix(_SORT_ID_PREFIX))


class DmhySource(HttpxSourceBase):
    id = "dmhy"
    name = "dmhy"
    url = "https://share.dmhy.org"
    specialized_category = Category.ALL

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(
            f"{self.url}/topics/list?keyword={self._quote(query)}"
        )
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        rows = select_items(parse_html(html), 'table tbody tr:has(a[href^="magnet:"])')
        return self._collect_rows(rows, self._parse_row)

    def _parse_row(self, tr: Tag) -> TorrentRecord | None:
        cells = tr.find_all("td", recursive=False)
        if len(cells) < 7:
            return None

        stamp = own_text(select_one(cells[0], "span")).split(" ")[0]
        category = category_from_link(extract_attr(cells[1], "a", "href"))
        title = select_one(cells[2], "a[href^='/topics/view/']", "a")
        magnet = extract_attr(tr, 'a[href^="magnet:"]', "href")
        size = own_text(cells[4])
        if not stamp or category is None or title is None or not size:
            return None

        return self._record(
            name=extract_text(title, ""),
            size=normalize_size(size),
            seeders=to_count(extract_text(cells[5], "")),
            peers=to_count(extract_text(cells[6], "")),
            upload_date=format_year_month_day(stamp.replace("/", "-")),
            identifier=MagnetUri(magnet),
            category=category,
            description_page_url=f"{self.url}{title.get('href', '')}",
        )
