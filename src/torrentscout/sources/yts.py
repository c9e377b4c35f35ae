"""yts.mx search source (movies, JSON API).

- GET /api/v2/list_movies.json?query_term=<query>   free-text search
- GET /api/v2/movie_details.json?imdb_id=<ttNNN>    when the query is an IMDB id

Every movie object carries several torrents (one per quality/codec);
each becomes its own record named ``"<title_long> [720p] [bluray] [x264]"``.
"""

from __future__ import annotations

import re
from typing import Any

from torrentscout.domain.entities import Category, InfoHash, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_int
from torrentscout.infrastructure.common.dates import format_epoch_seconds
from torrentscout.infrastructure.common.parsers import format_bytes, normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_IMDB_ID_RE = re.compile(r"^tt\d+$")


def is_imdb_id(query: str) -> bool:
    return bool(_IMDB_ID_RE.match(query.strip()))


class YtsSource(HttpxSourceBase):
    id = "yts"
    name = "YTS"
    url = "https://yts.mx"
    specialized_category = Category.MOVIES
    enabled_by_default = True

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        if is_imdb_id(query):
            url = f"{self.url}/api/v2/movie_details.json?imdb_id={query.strip()}"
        else:
            url = f"{self.url}/api/v2/list_movies.json?query_term={self._quote(query)}"

        data = await fetch.get_json(url)
        if not isinstance(data, dict):
            return []
        return await self._parse_off_loop(self._parse_response, data)

    def _parse_response(self, data: dict[str, Any]) -> list[TorrentRecord]:
        payload = data.get("data")
        if not isinstance(payload, dict):
            return []

        if isinstance(payload.get("movie"), dict):
            movies = [payload["movie"]]
        else:
            movies = payload.get("movies") or []

        records: list[TorrentRecord] = []
        for movie in movies:
            if isinstance(movie, dict):
                records.extend(self._parse_movie(movie))
        return records

    def _parse_movie(self, movie: dict[str, Any]) -> list[TorrentRecord]:
        page_url = movie.get("url")
        title = movie.get("title_long")
        torrents = movie.get("torrents")
        if not page_url or not title or not isinstance(torrents, list):
            return []
        return self._collect_rows(
            torrents,
            lambda torrent: self._parse_torrent(torrent, title=title, page_url=page_url),
        )

    def _parse_torrent(
        self, torrent: dict[str, Any], *, title: str, page_url: str
    ) -> TorrentRecord | None:
        info_hash = torrent.get("hash")
        seeders = to_int(torrent.get("seeds"))
        peers = to_int(torrent.get("peers"))
        uploaded = to_int(torrent.get("date_uploaded_unix"))
        if not info_hash or None in (seeders, peers, uploaded):
            return None

        if torrent.get("size"):
            size = normalize_size(str(torrent["size"]))
        elif to_int(torrent.get("size_bytes")) is not None:
            size = format_bytes(to_int(torrent.get("size_bytes")))
        else:
            return None

        quality = torrent.get("quality") or "-"
        kind = torrent.get("type") or "-"
        codec = torrent.get("video_codec") or "-"

        return self._record(
            name=f"{title} [{quality}] [{kind}] [{codec}]",
            size=size,
            seeders=seeders,
            peers=peers,
            upload_date=format_epoch_seconds(uploaded),
            identifier=InfoHash(info_hash),
            category=Category.MOVIES,
            description_page_url=page_url,
        )
