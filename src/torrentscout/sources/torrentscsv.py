"""torrents-csv.com search source (JSON API).

- GET https://torrents-csv.com/service/search?q=<query>

Response: ``{"torrents": [{"name", "infohash", "size_bytes", "seeders",
"leechers", "created_unix"}, ...]}``.  No per-item category and no
description page.
"""

from __future__ import annotations

from typing import Any

from torrentscout.domain.entities import Category, InfoHash, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_int
from torrentscout.infrastructure.common.dates import format_epoch_seconds
from torrentscout.infrastructure.common.parsers import format_bytes
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_API_URL = "https://torrents-csv.com/service/search"


class TorrentsCsvSource(HttpxSourceBase):
    id = "torrentscsv"
    name = "TorrentsCSV"
    url = "https://torrents-csv.com"
    specialized_category = Category.ALL
    enabled_by_default = True

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        data = await fetch.get_json(f"{_API_URL}?q={self._quote(query)}")
        if not isinstance(data, dict):
            return []
        torrents = data.get("torrents")
        if not isinstance(torrents, list):
            return []
        return await self._parse_off_loop(self._collect_rows, torrents, self._parse_item)

    def _parse_item(self, item: dict[str, Any]) -> TorrentRecord | None:
        name = item.get("name")
        info_hash = item.get("infohash")
        size_bytes = to_int(item.get("size_bytes"))
        seeders = to_int(item.get("seeders"))
        peers = to_int(item.get("leechers"))
        created = to_int(item.get("created_unix"))
        if not name or not info_hash:
            return None
        if None in (size_bytes, seeders, peers, created):
            return None

        return self._record(
            name=name,
            size=format_bytes(size_bytes),
            seeders=seeders,
            peers=peers,
            upload_date=format_epoch_seconds(created),
            identifier=InfoHash(info_hash),
        )
