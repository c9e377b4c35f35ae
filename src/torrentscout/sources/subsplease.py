"""subsplease.org search source (JSON API).

- GET /api/?f=search&tz=$&s=<query>

The response maps a release key to one episode object; each episode
lists a download per resolution.  Sizes come from the ``xl`` parameter
of the magnet link.  A search without hits answers ``[]``.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urlsplit

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_int
from torrentscout.infrastructure.common.dates import format_rfc1123_date
from torrentscout.infrastructure.common.parsers import format_bytes
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase


def size_from_magnet(magnet: str) -> str | None:
    """``magnet:?xt=...&xl=1536`` -> ``"1.50 KB"``."""
    exact_length = parse_qs(urlsplit(magnet).query).get("xl")
    size_bytes = to_int(exact_length[0]) if exact_length else None
    return format_bytes(size_bytes) if size_bytes is not None else None


class SubsPleaseSource(HttpxSourceBase):
    id = "subsplease"
    name = "SubsPlease"
    url = "https://subsplease.org"
    specialized_category = Category.ANIME

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        data = await fetch.get_json(
            f"{self.url}/api/?f=search&tz=$&s={self._quote(query)}"
        )
        if not isinstance(data, dict):
            return []
        return await self._parse_off_loop(self._parse_response, data)

    def _parse_response(self, data: dict[str, Any]) -> list[TorrentRecord]:
        records: list[TorrentRecord] = []
        for episode in data.values():
            if isinstance(episode, dict):
                records.extend(self._parse_episode(episode))
        return records

    def _parse_episode(self, episode: dict[str, Any]) -> list[TorrentRecord]:
        show = episode.get("show")
        released = episode.get("release_date")
        page = episode.get("page")
        downloads = episode.get("downloads")
        if not (show and released and page) or not isinstance(downloads, list):
            return []

        title = f"{show} - {episode['episode']}" if episode.get("episode") else show
        upload_date = format_rfc1123_date(released)
        page_url = f"{self.url}/shows/{page}/"
        return self._collect_rows(
            downloads,
            lambda download: self._parse_download(
                download, title=title, upload_date=upload_date, page_url=page_url
            ),
        )

    def _parse_download(
        self, download: dict[str, Any], *, title: str, upload_date: str, page_url: str
    ) -> TorrentRecord | None:
        resolution = download.get("res")
        magnet = download.get("magnet")
        if not resolution or not magnet:
            return None
        size = size_from_magnet(magnet)
        if size is None:
            return None

        return self._record(
            name=f"{title} ({resolution}p)",
            size=size,
            seeders=1,
            peers=1,
            upload_date=upload_date,
            identifier=MagnetUri(magnet),
            category=Category.ANIME,
            description_page_url=page_url,
        )
