"""archive.org search source (advancedsearch JSON API).

- GET /advancedsearch.php?q=title:<query>[ AND mediatype:(<type>)]&output=json

Only items that carry a ``btih`` (archive.org publishes a torrent for
most items) become records.  The API has no swarm statistics, so every
record reports one seeder and one peer.
"""

from __future__ import annotations

from typing import Any

from torrentscout.domain.entities import Category, InfoHash, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.categories import map_category
from torrentscout.infrastructure.common.converters import to_int
from torrentscout.infrastructure.common.dates import format_iso_date
from torrentscout.infrastructure.common.parsers import format_bytes
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_FIELDS = "title,item_size,publicdate,mediatype,identifier,btih"
_ROWS = 100

_MEDIA_TYPES: dict[Category, str] = {
    Category.APPS: "software",
    Category.BOOKS: "texts",
    Category.MOVIES: "movies",
}

_MEDIA_TYPE_CATEGORIES: dict[str, Category] = {
    media_type: category for category, media_type in _MEDIA_TYPES.items()
}


class InternetArchiveSource(HttpxSourceBase):
    id = "internetarchive"
    name = "InternetArchive"
    url = "https://archive.org"
    specialized_category = Category.ALL

    def _search_url(self, query: str, category: Category) -> str:
        url = f"{self.url}/advancedsearch.php?q=title:{self._quote(query)}"
        if category is not Category.ALL:
            media_type = _MEDIA_TYPES.get(category, "other")
            url = f"{url}%20AND%20mediatype:%28{media_type}%29"
        return f"{url}&fl[]={_FIELDS}&rows={_ROWS}&page=1&output=json"

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        data = await fetch.get_json(self._search_url(query, category))
        if not isinstance(data, dict):
            return []
        response = data.get("response")
        docs = response.get("docs") if isinstance(response, dict) else None
        if not isinstance(docs, list):
            return []
        return await self._parse_off_loop(self._collect_rows, docs, self._parse_doc)

    def _parse_doc(self, doc: dict[str, Any]) -> TorrentRecord | None:
        title = doc.get("title")
        size_bytes = to_int(doc.get("item_size"))
        published = doc.get("publicdate")
        media_type = doc.get("mediatype")
        identifier = doc.get("identifier")
        btih = doc.get("btih")
        if not (title and published and media_type and identifier and btih):
            return None
        if size_bytes is None:
            return None

        return self._record(
            name=title,
            size=format_bytes(size_bytes),
            seeders=1,
            peers=1,
            upload_date=format_iso_date(published),
            identifier=InfoHash(btih),
            category=map_category(_MEDIA_TYPE_CATEGORIES, media_type),
            description_page_url=f"{self.url}/details/{identifier}",
        )
