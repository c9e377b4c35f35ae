"""animetosho.org search source (anime).

Each hit is a ``div.home_list_entry``.  The submission time lives in the
``title`` attribute of ``div.date`` (``"Date/time submitted: 11/06/2025
06:13"``, or ``"Today 06:13"`` for recent uploads); seeder and leecher
counts are rendered as ``[12↑/3↓]`` in a titled span.
"""

from __future__ import annotations

import re

from bs4 import Tag

from torrentscout.domain.entities import Category, MagnetUri, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort
from torrentscout.infrastructure.common.converters import to_count
from torrentscout.infrastructure.common.dates import (
    format_day_month_year,
    format_relative_date,
)
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

_DATE_PREFIX = "Date/time submitted:"
_STATS_RE = re.compile(r"\[(\d+)↑/(\d+)↓]")


def parse_submitted(raw: str) -> str:
    """``"Date/time submitted: 11/06/2025 06:13"`` -> ``"11 Jun 2025"``."""
    text = raw.strip()
    if text.startswith(_DATE_PREFIX):
        text = text[len(_DATE_PREFIX):].strip()
    if not text:
        return ""
    relative = format_relative_date(text)
    if relative != text:
        return relative
    return format_day_month_year(text.split()[0])


class AnimeToshoSource(HttpxSourceBase):
    id = "animetosho"
    name = "AnimeTosho"
    url = "https://animetosho.org"
    specialized_category = Category.ANIME
    enabled_by_default = True

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]:
        html = await fetch.get_text(f"{self.url}/search?q={self._quote(query)}")
        return await self._parse_off_loop(self._parse_results, html)

    def _parse_results(self, html: str) -> list[TorrentRecord]:
        entries = select_items(parse_html(html), "div.home_list_entry")
        return self._collect_rows(entries, self._parse_entry)

    def _parse_entry(self, entry: Tag) -> TorrentRecord | None:
        anchor = select_one(entry, "div.link > a")
        size = own_text(select_one(entry, "div.size"))
        submitted = extract_attr(entry, "div.date", "title")
        magnet = self._magnet(entry)
        if anchor is None or not size or not submitted or magnet is None:
            return None

        seeders, peers = self._stats(entry)
        return self._record(
            name=extract_text(anchor, ""),
            size=normalize_size(size),
            seeders=seeders,
            peers=peers,
            upload_date=parse_submitted(submitted),
            identifier=MagnetUri(magnet),
            category=Category.ANIME,
            description_page_url=str(anchor.get("href", "")),
        )

    @staticmethod
    def _magnet(entry: Tag) -> str | None:
        for link in entry.select("div.links > a"):
            if own_text(link) == "Magnet" and link.get("href"):
                return str(link["href"])
        return None

    @staticmethod
    def _stats(entry: Tag) -> tuple[int, int]:
        links = select_one(entry, "div.links")
        if links is None:
            return 0, 0
        span = links.find("span", attrs={"title": True})
        if span is None:
            return 0, 0
        match = _STATS_RE.search(own_text(span))
        if match is None:
            return 0, 0
        return to_count(match.group(1)), to_count(match.group(2))
