"""nyaa.si search source.

Scrapes the HTML result table of nyaa.si (anime tracker):
- GET /?f=0&c=1_0&q=<query>  (no filter, category "Anime")

Each ``<tr>`` of ``table.torrent-list`` carries name, magnet link, size,
a ``data-timestamp`` epoch and seeder/leecher counts.  The same layout is
served by sukebei.nyaa.si, see ``sukebei.py``.
"""

from __future__ import annotations

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count, to_int
from torrentscout.infrastructure.common.dates import format_epoch_seconds
from torrentscout.infrastructure.common.html_selectors import (
    child_tags,
    extract_attr,
    extract_text,
    parse_html,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase


class NyaaFamilySource(HttpxSourceBase):
    """Shared parser for nyaa-style trackers."""

    # Site category filter sent as ``c=``
    _site_category: str = "0_0"

    def _search_url(self, query: str) -> str:
        return f"{self.url}/?f=0&c={self._site_category}&q={self._quote(query)}"

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(self._search_url(query))
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        tbody = select_one(parse_html(html), "table.torrent-list > tbody")
        if tbody is None:
            return []
        return self._collect_rows(child_tags(tbody), self._parse_row)

    def _parse_row(self, tr: Tag) -> TorrentRecord | None:
        cells = tr.find_all("td", recursive=False)
        if len(cells) < 7:
            return None

        name_anchor = select_one(cells[1], "a:not(.comments)")
        if name_anchor is None:
            return None
        name = extract_text(name_anchor, "")
        description_path = extract_attr(name_anchor, "", "href")

        magnet = extract_attr(cells[2], 'a[href^="magnet:"]', "href")
        size = extract_text(cells[3], "")
        timestamp = to_int(extract_attr(cells[4], "", "data-timestamp"))
        if not (name and magnet and size) or timestamp is None:
            return None

        return self._record(
            name=name,
            size=normalize_size(size),
            seeders=to_count(extract_text(cells[5], "")),
            peers=to_count(extract_text(cells[6], "")),
            upload_date=format_epoch_seconds(timestamp),
            identifier=MagnetUri(magnet),
            category=self.specialized_category,
            description_page_url=f"{self.url}{description_path}",
        )


class NyaaSource(NyaaFamilySource):
    """nyaa.si, anime only."""

    id = "nyaasi"
    name = "Nyaa"
    url = "https://nyaa.si"
    specialized_category = Category.ANIME
    enabled_by_default = True

    _site_category = "1_0"
