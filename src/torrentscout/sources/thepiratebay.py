"""ThePirateBay search source via the apibay.org JSON API.

- GET https://apibay.org/q.php?q=<query>&cat=<index>

The API returns a JSON array of objects whose numeric fields are strings
(``"size": "1234"``, ``"added": "1718000000"``).  An empty search is
reported as a single placeholder row named "No results returned" with
an all-zero info-hash; it is dropped like any other invalid row.
"""

from __future__ import annotations

from typing import Any

from torrentscout.domain.entities import Category, InfoHash, TorrentRecord, Unsafe
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_int
from torrentscout.infrastructure.common.dates import format_epoch_seconds
from torrentscout.infrastructure.common.parsers import format_bytes
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_API_URL = "https://apibay.org/q.php"
_EMPTY_RESULT_NAME = "No results returned"
_ZERO_HASH = "0" * 40

# Request category index (https://thepiratebay.org/browse.php)
_CATEGORY_INDEX: dict[Category, int] = {
    Category.ALL: 0,
    Category.ANIME: 0,
    Category.APPS: 300,
    Category.BOOKS: 601,
    Category.GAMES: 400,
    Category.MOVIES: 200,
    Category.SERIES: 200,
    Category.MUSIC: 101,
    Category.PORN: 500,
    Category.OTHER: 600,
}


def _category_from_index(index: int | None) -> Category:
    """Map a TPB category index to a canonical category."""
    if index is None:
        return Category.OTHER
    if 300 <= index <= 306 or index == 399:
        return Category.APPS
    if index == 601:
        return Category.BOOKS
    if 400 <= index <= 408 or index == 499:
        return Category.GAMES
    if index in (201, 202, 204, 207, 209, 210, 211):
        return Category.MOVIES
    if 100 <= index <= 104 or index == 199:
        return Category.MUSIC
    if 500 <= index <= 507 or index == 599:
        return Category.PORN
    if index in (205, 208, 212):
        return Category.SERIES
    # TPB has no anime category; everything else is "Other".
    return Category.OTHER


class ThePirateBaySource(HttpxSourceBase):
    id = "thepiratebay"
    name = "ThePirateBay"
    url = "https://thepiratebay.org"
    specialized_category = Category.ALL
    safety = Unsafe(
        "Terrible regulation, and the calculated injection of insidious malware."
    )
    enabled_by_default = False

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        index = _CATEGORY_INDEX.get(category, 0)
        data = await fetch.get_json(f"{_API_URL}?q={self._quote(query)}&cat={index}")
        if not isinstance(data, list):
            return []
        return await self._parse_off_loop(self._collect_rows, data, self._parse_item)

    def _parse_item(self, item: dict[str, Any]) -> TorrentRecord | None:
        name = item.get("name")
        info_hash = item.get("info_hash")
        if not name or name == _EMPTY_RESULT_NAME:
            return None
        if not info_hash or info_hash == _ZERO_HASH:
            return None

        torrent_id = item.get("id")
        size_bytes = to_int(item.get("size"))
        seeders = to_int(item.get("seeders"))
        peers = to_int(item.get("leechers"))
        added = to_int(item.get("added"))
        if None in (torrent_id, size_bytes, seeders, peers, added):
            return None

        return self._record(
            name=name,
            size=format_bytes(size_bytes),
            seeders=seeders,
            peers=peers,
            upload_date=format_epoch_seconds(added),
            identifier=InfoHash(info_hash),
            category=_category_from_index(to_int(item.get("category"))),
            description_page_url=f"{self.url}/description.php?id={torrent_id}",
        )
