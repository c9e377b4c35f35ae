"""eztvx.to search source (TV series).

- GET /search/<query>   with ``Cookie: layout=def_wlinks``

Without the layout cookie the results page omits magnet links.  The page
holds several tables; only the last one carries results, and its second
row is a header (``Show | Episode Name | Dload | Size | Released |
Seeds``) used to confirm the layout before parsing.  Dates are relative
("7h 8m", "1 week") and peers are not published, so peers is always 0.
"""

from __future__ import annotations

from bs4 import Tag

from torrentscout.domain.entities import (
    MAGNET_PREFIX,
    Category,
    MagnetUri,
    TorrentRecord,
)
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.html_selectors import (
    child_tags,
    own_text,
    parse_html,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_LAYOUT_COOKIE = {"Cookie": "layout=def_wlinks"}


def _is_results_header(tr: Tag) -> bool:
    cells = tr.find_all("td")
    return (
        len(cells) == 6
        and own_text(cells[0]) == "Show"
        and own_text(cells[1]) == "Episode Name"
    )


class EztvSource(HttpxSourceBase):
    id = "eztv"
    name = "Eztv"
    url = "https://eztvx.to"
    specialized_category = Category.SERIES
    enabled_by_default = True

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(
            f"{self.url}/search/{self._quote(query)}", headers=_LAYOUT_COOKIE
        )
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        tables = parse_html(html).find_all("table")
        if not tables:
            return []
        tbody = tables[-1].find("tbody")
        if tbody is None:
            return []

        rows = child_tags(tbody)
        if len(rows) < 2 or not _is_results_header(rows[1]):
            self._log.debug("eztv_unexpected_layout", rows=len(rows))
            return []
        return self._collect_rows(rows[2:], self._parse_row)

    def _parse_row(self, tr: Tag) -> TorrentRecord | None:
        cells = tr.find_all("td", recursive=False)
        if len(cells) < 6:
            return None

        anchor = cells[1].find("a")
        links = child_tags(cells[2])
        if anchor is None or not links:
            return None
        magnet = str(links[0].get("href", ""))
        if not magnet.startswith(MAGNET_PREFIX):
            return None

        name = own_text(anchor)
        size = own_text(cells[3])
        if not name or not size:
            return None

        # "-" instead of <font> when there are no seeds
        seeds = cells[5].find("font")
        return self._record(
            name=name,
            size=normalize_size(size),
            seeders=to_count(own_text(seeds)) if seeds is not None else 0,
            peers=0,
            upload_date=own_text(cells[4]),
            identifier=MagnetUri(magnet),
            category=Category.SERIES,
            description_page_url=f"{self.url}{anchor.get('href', '')}",
        )
