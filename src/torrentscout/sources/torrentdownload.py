"""torrentdownload.info search source.

The detail link of every row is ``/<INFOHASH>/<slug>``, so no detail
page fetch is needed.  The category label under the name is flattened
to letters only (``"Movies » Action"`` -> ``"MoviesAction"``) and looked
up in a table.
"""

from __future__ import annotations

import re

from bs4 import Tag

from torrentscout.domain.entities import Category, InfoHash, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.categories import map_category
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.dates import format_date
from torrentscout.infrastructure.common.html_selectors import (
    extract_text,
    own_text,
    parse_html,
    select_one,
)
from torrentscout.infrastructure.common.parsers import normalize_size
from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

_NON_LETTERS_RE = re.compile(r"[^A-Za-z]+")


def _labels(category: Category, *labels: str) -> dict[str, Category]:
    return {label: category for label in labels}


_CATEGORY_LABELS: dict[str, Category] = {
    **_labels(
        Category.PORN,
        "XXX", "XXXVideo", "XXXHDVideo", "XXXPictures", "Adult",
        "AdultPornHDVideo", "AdultPornPictures", "AdultPornVideo",
    ),
    **_labels(Category.ANIME, "Anime", "AnimeEnglishtranslated", "AnimeAnimeOther"),
    **_labels(
        Category.APPS,
        "Applications", "ApplicationsAndroid", "ApplicationsWindows", "Software",
    ),
    **_labels(
        Category.BOOKS,
        "BooksAcademic", "BooksComics", "BooksEbooks", "BooksEducational",
        "BooksMagazines", "BooksFiction", "BooksNonfiction", "BooksTextbooks",
        "Ebooks", "OtherEbooks", "OtherComics", "AudioBooks", "AudioAudiobooks",
    ),
    **_labels(Category.GAMES, "Games", "GamesWindows"),
    **_labels(
        Category.MOVIES,
        "Movies", "MoviesAction", "MoviesConcerts", "MoviesCrime",
        "MoviesDocumentary", "MoviesDubbedMovies", "MoviesHighresMovies",
        "MoviesMusicvideos", "MoviesThriller", "VideoMovies",
    ),
    **_labels(
        Category.MUSIC,
        "Music", "MusicHardrock", "MusicMp", "MusicFLAC", "MusicLossless",
        "MusicRB", "MusicTranceHouseDance", "VideoMusic", "AudioMusic",
    ),
    **_labels(Category.SERIES, "TV", "TVBBC", "TVshows", "Television"),
}


class TorrentDownloadSource(HttpxSourceBase):
    id = "torrentdownloadinfo"
    name = "TorrentDownload"
    url = "https://torrentdownload.info"
    specialized_category = Category.ALL
    enabled_by_default = False

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(f"{self.url}/search?q={self._quote(query)}")
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        tables = parse_html(html).select("table.table2")
        if not tables:
            return []
        return self._collect_rows(tables[-1].select("tbody > tr"), self._parse_row)

    def _parse_row(self, tr: Tag) -> TorrentRecord | None:
        name_div = select_one(tr, "td:nth-of-type(1) > div.tt-name")
        if name_div is None:
            return None
        anchor = name_div.find("a", recursive=False)
        label = name_div.find("span", recursive=False)
        if anchor is None or label is None:
            return None

        href = str(anchor.get("href", ""))
        parts = href.split("/")
        if len(parts) < 2 or not parts[1]:
            return None

        cells = tr.find_all("td", recursive=False)
        if len(cells) < 5:
            return None

        return self._record(
            name=extract_text(anchor, ""),
            size=normalize_size(own_text(cells[2])),
            seeders=to_count(own_text(cells[3])),
            peers=to_count(own_text(cells[4])),
            upload_date=format_date(own_text(cells[1])),
            identifier=InfoHash(parts[1]),
            category=map_category(
                _CATEGORY_LABELS, _NON_LETTERS_RE.sub("", own_text(label))
            ),
            description_page_url=f"{self.url}{href}",
        )
