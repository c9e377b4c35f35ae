"""Knaben meta-search source (JSON API).

- POST https://api.knaben.org/v1

Knaben aggregates many trackers and exposes a filterable search API.
Category filters are numeric ids whose millions digit is the top-level
group (``3000000`` movies, ``3001000`` movies/HD, ...).
"""

from __future__ import annotations

from typing import Any

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_int
from torrentscout.infrastructure.common.dates import format_iso_date
from torrentscout.infrastructure.common.parsers import format_bytes
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_API_URL = "https://api.knaben.org/v1"
_PAGE_SIZE = 50

_CATEGORY_IDS: dict[Category, int] = {
    Category.MUSIC: 1_000_000,
    Category.SERIES: 2_000_000,
    Category.MOVIES: 3_000_000,
    Category.APPS: 4_000_000,
    Category.PORN: 5_000_000,
    Category.ANIME: 6_000_000,
    Category.GAMES: 7_000_000,
    Category.BOOKS: 9_000_000,
    Category.OTHER: 10_000_000,
}

_GROUP_CATEGORIES: dict[int, Category] = {
    group // 1_000_000: category for category, group in _CATEGORY_IDS.items()
}


def _category_from_ids(ids: Any) -> Category:
    """Map the lowest category id of a hit to its top-level group."""
    if not isinstance(ids, list):
        return Category.OTHER
    numeric = [i for i in (to_int(raw) for raw in ids) if i is not None]
    if not numeric:
        return Category.OTHER
    return _GROUP_CATEGORIES.get(min(numeric) // 1_000_000, Category.OTHER)


class KnabenSource(HttpxSourceBase):
    id = "knaben"
    name = "Knaben"
    url = "https://knaben.org"
    specialized_category = Category.ALL
    enabled_by_default = True

    def _payload(self, query: str, category: Category) -> dict[str, Any]:
        categories = [] if category is Category.ALL else [_CATEGORY_IDS[category]]
        return {
            "query": query.strip(),
            "size": _PAGE_SIZE,
            "order_by": "peers",
            "order_direction": "desc",
            "hide_unsafe": True,
            "hide_xxx": False,
            "categories": categories,
        }

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        data = await fetch.post_json(_API_URL, self._payload(query, category))
        if not isinstance(data, dict):
            return []
        hits = data.get("hits")
        if not isinstance(hits, list):
            return []
        return await self._parse_off_loop(self._collect_rows, hits, self._parse_hit)

    def _parse_hit(self, hit: dict[str, Any]) -> TorrentRecord | None:
        title = hit.get("title")
        magnet = hit.get("magnetUrl")
        size_bytes = to_int(hit.get("bytes"))
        if not title or not magnet or size_bytes is None:
            return None

        return self._record(
            name=title,
            size=format_bytes(size_bytes),
            seeders=to_int(hit.get("seeders")) or 0,
            peers=to_int(hit.get("peers")) or 0,
            upload_date=format_iso_date(hit.get("date") or ""),
            identifier=MagnetUri(magnet),
            category=_category_from_ids(hit.get("categoryId")),
            description_page_url=hit.get("details") or "",
        )
