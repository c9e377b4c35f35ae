"""anirena.com search source.

- GET /index.php?t=2&s=<query>

Each result is a ``div.full2`` without an ``id`` (the first one is the
table header).  The list page carries no upload date; fetching it needs
a request per row, so records leave it empty.
"""

from __future__ import annotations

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count
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


class AniRenaSource(HttpxSourceBase):
    id = "anirena"
    name = "AniRena"
    url = "https://anirena.com"
    specialized_category = Category.ANIME

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(f"{self.url}/index.php?t=2&s={self._quote(query)}")
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        blocks = select_items(parse_html(html), "div.full2:not([id])")
        return self._collect_rows(blocks[1:], self._parse_block)

    def _parse_block(self, div: Tag) -> TorrentRecord | None:
        tr = select_one(div, "table tr")
        if tr is None:
            return None

        name = own_text(select_one(tr, "td.torrents_small_info_data1 > div > a"))
        magnet = extract_attr(
            tr, 'td.torrents_small_info_data2 a[href^="magnet:"]', "href"
        )
        size = own_text(select_one(tr, "td.torrents_small_size_data1"))
        if not (name and magnet and size):
            return None

        return self._record(
            name=name,
            size=normalize_size(size),
            seeders=to_count(extract_text(tr, "td.torrents_small_seeders_data1")),
            peers=to_count(extract_text(tr, "td.torrents_small_leechers_data1")),
            upload_date="",
            identifier=MagnetUri(magnet),
            category=Category.ANIME,
        )
