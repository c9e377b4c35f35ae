"""limetorrents.lol search source.

- GET /search/<category>/<query>/date/1/

Result rows (``.table2 > tbody > tr[bgcolor]``) link to a ``.torrent``
cache URL that embeds the info-hash; the second column reads like
``"27 days ago - in Movies"`` and yields both date and category.
"""

from __future__ import annotations

import re

from bs4 import Tag

from torrentscout.domain.entities import Category, InfoHash, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.dates import format_date
from torrentscout.infrastructure.common.html_selectors import (
    extract_text,
    parse_html,
    select_items,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_INFO_HASH_RE = re.compile(r"/torrent/([A-Fa-f0-9]{40})\.torrent")

_CATEGORY_PATHS: dict[Category, str] = {
    Category.ALL: "all",
    Category.BOOKS: "all",
    Category.PORN: "all",
    Category.ANIME: "anime",
    Category.APPS: "applications",
    Category.GAMES: "games",
    Category.MOVIES: "movies",
    Category.MUSIC: "music",
    Category.SERIES: "tv",
    Category.OTHER: "other",
}

# Checked in order against the "- in <Category>" suffix.
_CATEGORY_KEYWORDS: tuple[tuple[str, Category], ...] = (
    ("tv", Category.SERIES),
    ("movie", Category.MOVIES),
    ("music", Category.MUSIC),
    ("app", Category.APPS),
    ("e-book", Category.BOOKS),
    ("anime", Category.ANIME),
    ("games", Category.GAMES),
)


def _category_from_text(text: str) -> Category:
    lowered = text.lower()
    for keyword, category in _CATEGORY_KEYWORDS:
        if keyword in lowered:
            return category
    return Category.OTHER


class LimeTorrentsSource(HttpxSourceBase):
    id = "limetorrents"
    name = "LimeTorrents"
    url = "https://www.limetorrents.lol"
    specialized_category = Category.ALL
    enabled_by_default = False

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        path = _CATEGORY_PATHS.get(category, "all")
        html = await fetch.get_text(
            f"{self.url}/search/{path}/{self._quote(query)}/date/1/"
        )
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        rows = select_items(parse_html(html), ".table2 > tbody > tr[bgcolor]")
        return self._collect_rows(rows, self._parse_row)

    def _parse_row(self, tr: Tag) -> TorrentRecord | None:
        name_anchor = select_one(tr, 'div.tt-name > a[href^="/"]')
        if name_anchor is None:
            return None
        info_hash = self._info_hash(tr)
        size = extract_text(tr, "td:nth-of-type(3)")
        if info_hash is None or not size:
            return None

        added = extract_text(tr, "td:nth-of-type(2)")
        return self._record(
            name=extract_text(name_anchor, ""),
            size=normalize_size(size),
            seeders=to_count(extract_text(tr, ".tdseed")),
            peers=to_count(extract_text(tr, ".tdleech")),
            upload_date=format_date(added.split(" -")[0].strip()),
            identifier=InfoHash(info_hash),
            category=_category_from_text(added),
            description_page_url=f"{self.url}{name_anchor['href']}",
        )

    @staticmethod
    def _info_hash(tr: Tag) -> str | None:
        for link in tr.select('a[class^="csprite"][href^="http"]'):
            href = str(link.get("href", ""))
            if "/torrent/" not in href:
                continue
            match = _INFO_HASH_RE.search(href)
            return match.group(1) if match else None
        return None
