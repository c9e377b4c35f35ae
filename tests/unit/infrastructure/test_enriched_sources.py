"""Tests for sources that complete each row from its detail page."""

from __future__ import annotations

import pytest
from conftest import FakeFetcher

from torrentscout.domain.entities import Category, InfoHash, MagnetUri
from torrentscout.domain.sources import FetchConnectionError, FetchStatusError
from torrentscout.sources.mypornclub import (
    MyPornClubSource,
    parse_info_hash as parse_mpc_hash,
    slugify_query,
)
from torrentscout.sources.therarbg import TheRarBgSource, parse_info_hash
from torrentscout.sources.torrentdownloads import (
    TorrentDownloadsSource,
    category_from_icon,
    parse_detail,
)
from torrentscout.sources.xxxclub import XXXClubSource, parse_magnet, strip_time

_HASH = "0123456789abcdef0123456789abcdef01234567"

# ---------------------------------------------------------------------------
# TheRarBg
# ---------------------------------------------------------------------------

_RARBG_ROW = """
<tr>
  <td><img src="/c.png"></td>
  <td><a href="/post-detail/{slug}/">{name}</a></td>
  <td>Apps</td>
  <td><div>2025-06-11</div></td>
  <td>uploader</td>
  <td>5.7 GB</td>
  <td>120</td>
  <td>30</td>
</tr>
"""

_RARBG_HTML = (
    "<html><body><table><thead><tr><th>Cat</th></tr></thead><tbody>"
    + _RARBG_ROW.format(slug="a1", name="Ubuntu 24.04")
    + _RARBG_ROW.format(slug="b2", name="Detail Down")
    + _RARBG_ROW.format(slug="c3", name="No Hash")
    + "<tr><td>short row</td></tr>"
    + "</tbody></table></body></html>"
)


class TestTheRarBg:
    def test_parse_info_hash(self) -> None:
        html = f"<div><span class='info-hash-value'>{_HASH}</span></div>"
        assert parse_info_hash(html) == _HASH
        assert parse_info_hash("<div></div>") is None

    def test_parse_info_hash_rejects_non_hash_text(self) -> None:
        html = "<div><span class='info-hash-value'>not available</span></div>"
        assert parse_info_hash(html) is None

    @pytest.mark.asyncio
    async def test_completes_rows_from_detail_pages(self) -> None:
        fetch = FakeFetcher(
            texts={
                "https://therarbg.com/get-posts/": _RARBG_HTML,
                "https://therarbg.com/post-detail/a1/": (
                    f"<div class='info-hash-value'>{_HASH}</div>"
                ),
                "https://therarbg.com/post-detail/b2/": FetchConnectionError("down"),
                "https://therarbg.com/post-detail/c3/": "<div>removed</div>",
            }
        )
        records = await TheRarBgSource().search("ubuntu", Category.ALL, fetch)

        assert fetch.urls[0] == "https://therarbg.com/get-posts/keywords:ubuntu"
        assert len(records) == 1
        rec = records[0]
        assert rec.name == "Ubuntu 24.04"
        assert rec.identifier == InfoHash(_HASH)
        assert rec.size == "5.7 GB"
        assert rec.upload_date == "11 Jun 2025"
        assert (rec.seeders, rec.peers) == (120, 30)
        assert rec.description_page_url == "https://therarbg.com/post-detail/a1/"

    @pytest.mark.asyncio
    async def test_category_filter_in_url(self) -> None:
        fetch = FakeFetcher(texts={"https://therarbg.com/get-posts/": "<html></html>"})
        await TheRarBgSource().search("matrix", Category.MOVIES, fetch)
        assert fetch.urls == [
            "https://therarbg.com/get-posts/keywords:matrix:category:Movies"
        ]

    @pytest.mark.asyncio
    async def test_search_failure_propagates(self) -> None:
        fetch = FakeFetcher(
            texts={"https://therarbg.com/get-posts/": FetchStatusError(503)}
        )
        with pytest.raises(FetchStatusError):
            await TheRarBgSource().search("x", Category.ALL, fetch)


# ---------------------------------------------------------------------------
# TorrentDownloads
# ---------------------------------------------------------------------------

_TDS_ROW = """
<div class="grey_bar3">
  <p><img src="/templates/new/images/icons/menu_icon{icon}.png"><a href="/torrent/{id}/{slug}">{name}</a></p>
  <span>x</span>
  <span>3</span>
  <span>45</span>
  <span>{size}</span>
</div>
"""

_TDS_HTML = (
    "<html><body>"
    "<div class='inner_container'><div class='grey_bar3'>sidebar</div></div>"
    "<div class='inner_container'>"
    "<div class='grey_bar3'>Header</div><div class='grey_bar3'>Columns</div>"
    + _TDS_ROW.format(icon=4, id=1, slug="big-buck-bunny", name="Big Buck Bunny", size="276 MB")
    + _TDS_ROW.format(icon=5, id=2, slug="no-size", name="No Size", size="")
    + "</div></body></html>"
)

_TDS_DETAIL = (
    "<html><body><div class='inner_container'>"
    "<div class='grey_bar1'>0</div><div class='grey_bar1'>1</div>"
    "<div class='grey_bar1'>2</div>"
    f"<div class='grey_bar1'><a href='magnet:?xt=urn:btih:{_HASH}'>Magnet</a></div>"
    "<div class='grey_bar1'>4</div><div class='grey_bar1'>5</div>"
    "<div class='grey_bar1'><p>2025-06-11 06:13:00</p></div>"
    "</div></body></html>"
)


class TestTorrentDownloads:
    def test_category_from_icon(self) -> None:
        assert category_from_icon("/x/menu_icon4.png") is Category.MOVIES
        assert category_from_icon("/x/menu_icon8.png") is Category.SERIES
        assert category_from_icon("/x/menu_icon6.png") is Category.OTHER
        assert category_from_icon("/x/logo.png") is Category.OTHER

    def test_parse_detail(self) -> None:
        assert parse_detail(_TDS_DETAIL) == (
            f"magnet:?xt=urn:btih:{_HASH}",
            "11 Jun 2025",
        )

    def test_parse_detail_short_page(self) -> None:
        assert parse_detail("<div class='inner_container'></div>") is None

    @pytest.mark.asyncio
    async def test_search(self) -> None:
        fetch = FakeFetcher(
            texts={
                "https://torrentdownloads.pro/search/": _TDS_HTML,
                "https://torrentdownloads.pro/torrent/1/big-buck-bunny": _TDS_DETAIL,
            }
        )
        records = await TorrentDownloadsSource().search(
            "big buck bunny", Category.ALL, fetch
        )

        assert fetch.urls == [
            "https://torrentdownloads.pro/search/?s_cat=0&search=big+buck+bunny",
            "https://torrentdownloads.pro/torrent/1/big-buck-bunny",
        ]
        assert len(records) == 1
        rec = records[0]
        assert rec.identifier == MagnetUri(f"magnet:?xt=urn:btih:{_HASH}")
        assert rec.category is Category.MOVIES
        assert rec.size == "276 MB"
        assert (rec.seeders, rec.peers) == (45, 3)
        assert rec.upload_date == "11 Jun 2025"


# ---------------------------------------------------------------------------
# XXXClub
# ---------------------------------------------------------------------------

_XXX_HTML = """
<html><body>
<ul class="tsearch">
  <li><span>Category</span><span>Name</span></li>
  <li>
    <span class="catlabel">x</span>
    <span><a href="/category/1">c</a><a href="/torrents/details/123/Some-Title">Some Title</a></span>
    <span class="adde">05 Aug 2025 07:23:05</span>
    <span class="siz">1.2 GB</span>
    <span class="see">10</span>
    <span class="lee">2</span>
  </li>
</ul>
</body></html>
"""


class TestXXXClub:
    def test_strip_time(self) -> None:
        assert strip_time("05 Aug 2025 07:23:05") == "05 Aug 2025"
        assert strip_time("yesterday") == "yesterday"

    def test_parse_magnet(self) -> None:
        assert parse_magnet("<a class='mg-link' href='magnet:?xt=urn:btih:X'>m</a>") == (
            "magnet:?xt=urn:btih:X"
        )
        assert parse_magnet("<p>gone</p>") is None

    @pytest.mark.asyncio
    async def test_search(self) -> None:
        fetch = FakeFetcher(
            texts={
                "https://xxxclub.to/torrents/search/all/": _XXX_HTML,
                "https://xxxclub.to/torrents/details/123/Some-Title": (
                    "<a class='mg-link' href='magnet:?xt=urn:btih:X1'>Magnet</a>"
                ),
            }
        )
        records = await XXXClubSource().search("some title", Category.PORN, fetch)

        assert fetch.urls[0] == "https://xxxclub.to/torrents/search/all/some+title"
        assert len(records) == 1
        rec = records[0]
        assert rec.name == "Some Title"
        assert rec.identifier == MagnetUri("magnet:?xt=urn:btih:X1")
        assert rec.upload_date == "05 Aug 2025"
        assert rec.category is Category.PORN
        assert rec.is_nsfw()


# ---------------------------------------------------------------------------
# MyPornClub
# ---------------------------------------------------------------------------


def _mpc_element(slug: str, name: str) -> str:
    values = ["0", "2025-06-11", "x", "1.2 GB", "x", "x", "x", "x", "x", "15", "x", "4"]
    spans = "".join(f"<span>{value}</span>" for value in values)
    return (
        "<div class='torrent_element'>"
        f"<a href='/t/{slug}'>{name}</a>"
        f"<div class='torrent_element_info'>{spans}</div>"
        "</div>"
    )


_MPC_HTML = (
    "<html><body><div class='torrents_list'>"
    + _mpc_element("abc", "Some Title")
    + _mpc_element("def", "Broken Detail")
    + "</div></body></html>"
)


class TestMyPornClub:
    def test_slugify_query(self) -> None:
        assert slugify_query("  some   title ") == "some-title"

    def test_parse_info_hash(self) -> None:
        html = (
            "<div class='torrent_info_div'><div>"
            f"[name]:x [hash_info]:{_HASH} [size]:1</div></div>"
        )
        assert parse_mpc_hash(html) == _HASH
        assert parse_mpc_hash("<div></div>") is None

    @pytest.mark.asyncio
    async def test_search(self) -> None:
        fetch = FakeFetcher(
            texts={
                "https://myporn.club/s/some-title/seeders": _MPC_HTML,
                "https://myporn.club/t/abc": (
                    "<div class='torrent_info_div'>"
                    f"<div>[hash_info]:{_HASH}</div></div>"
                ),
                "https://myporn.club/t/def": FetchStatusError(404),
            }
        )
        records = await MyPornClubSource().search("some title", Category.PORN, fetch)

        assert len(records) == 1
        rec = records[0]
        assert rec.name == "Some Title"
        assert rec.identifier == InfoHash(_HASH)
        assert rec.size == "1.2 GB"
        assert (rec.seeders, rec.peers) == (15, 4)
        assert rec.upload_date == "2025-06-11"
        assert rec.description_page_url == "https://myporn.club/t/abc"

    @pytest.mark.asyncio
    async def test_search_failure_propagates(self) -> None:
        fetch = FakeFetcher(texts={"https://myporn.club/s/": FetchConnectionError("down")})
        with pytest.raises(FetchConnectionError):
            await MyPornClubSource().search("x", Category.PORN, fetch)
