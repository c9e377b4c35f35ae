"""tokyotosho.info search source (anime).

- GET /search.php?terms=<query>&type=1&searchName=true

Every hit spans two consecutive rows of ``table.listing``: the first
carries magnet, name and description link; the second a
``"... | Size: 1.2GB | Date: 2025-06-11 06:13 UTC | ..."`` summary and
the seeder/leecher spans.
"""

from __future__ import annotations

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.dates import format_year_month_day
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

# Names are rendered with zero-width break hints between words.
_ZERO_WIDTH = "​"


def _field(summary: str, label: str) -> str:
    for part in summary.split("|"):
        part = part.strip()
        if part.startswith(label):
            return part[len(label):].strip()
    return ""


class TokyoToshokanSource(HttpxSourceBase):
    id = "tokyotoshokan"
    name = "TokyoToshokan"
    url = "https://tokyotosho.info"
    specialized_category = Category.ANIME
    enabled_by_default = True

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(
            f"{self.url}/search.php?terms={self._quote(query)}&type=1&searchName=true"
        )
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        tbody = select_one(parse_html(html), "table.listing > tbody")
        if tbody is None:
            return []
        rows = child_tags(tbody)[1:]
        pairs = list(zip(rows[0::2], rows[1::2]))
        return self._collect_rows(pairs, self._parse_pair)

    def _parse_pair(self, pair: tuple[Tag, Tag]) -> TorrentRecord | None:
        head, detail = pair
        head_cells = head.find_all("td", recursive=False)
        detail_cells = detail.find_all("td", recursive=False)
        if len(head_cells) < 3 or len(detail_cells) < 2:
            return None

        magnet = extract_attr(head_cells[1], "a:nth-of-type(1)", "href")
        name = extract_text(head_cells[1], "a:nth-of-type(2)").replace(_ZERO_WIDTH, "")
        links = head_cells[2].find_all("a")
        if not magnet.startswith("magnet:") or not name or not links:
            return None

        summary = own_text(detail_cells[0])
        size = _field(summary, "Size:")
        date = _field(summary, "Date:")
        if not size:
            return None

        spans = detail_cells[1].find_all("span")
        return self._record(
            name=name,
            size=normalize_size(size),
            seeders=to_count(own_text(spans[0])) if spans else 0,
            peers=to_count(own_text(spans[1])) if len(spans) > 1 else 0,
            upload_date=format_year_month_day(date.split(" ")[0]) if date else "",
            identifier=MagnetUri(magnet),
            category=Category.ANIME,
            description_page_url=f"{self.url}/{links[-1].get('href', '')}",
        )
