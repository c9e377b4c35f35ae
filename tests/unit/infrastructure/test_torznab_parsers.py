"""Tests for Torznab XML parsing and category mapping."""

from __future__ import annotations

from xml.etree import ElementTree as ET

import pytest

from torrentscout.domain.entities import Category, InfoHash, MagnetUri, TorznabCapabilities
from torrentscout.infrastructure.torznab.categories import (
    category_from_id,
    category_from_ids,
    category_ids_for,
)
from torrentscout.infrastructure.torznab.parsers import (
    format_pub_date,
    local_name,
    parse_capabilities,
    parse_error_code,
    parse_items,
    strip_declaration,
)

_HASH = "0123456789abcdef0123456789abcdef01234567"

_CAPS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<caps>
  <server title="Jackett" />
  <searching><search available="yes" supportedParams="q" /></searching>
  <categories>
    <category id="2000" name="Movies">
      <subcat id="2040" name="Movies/HD" />
      <subcat id="2045" name="Movies/UHD" />
    </category>
    <category id="5070" name="TV/Anime" />
    <category id="100001" name="Custom" />
  </categories>
</caps>
"""

_SEARCH_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom" xmlns:torznab="http://torznab.com/schemas/2015/feed">
  <channel>
    <atom:link href="https://jackett.local/api" rel="self" type="application/rss+xml" />
    <title>Jackett</title>
    <item>
      <title>[Group] Show - 01</title>
      <guid>https://tracker.example/t/1</guid>
      <comments>https://tracker.example/t/1</comments>
      <pubDate>Wed, 11 Jun 2025 06:13:57 +0000</pubDate>
      <size>1073741824</size>
      <description />
      <torznab:attr name="category" value="5000" />
      <torznab:attr name="category" value="5070" />
      <torznab:attr name="category" value="100045" />
      <torznab:attr name="seeders" value="12" />
      <torznab:attr name="peers" value="15" />
      <torznab:attr name="infohash" value="{_HASH}" />
    </item>
    <item>
      <title>Some Movie 2025 2160p</title>
      <comments>https://tracker.example/t/2</comments>
      <pubDate>Tue, 10 Jun 2025 10:00:00 +0000</pubDate>
      <torznab:attr name="size" value="1536" />
      <torznab:attr name="category" value="2045" />
      <torznab:attr name="seeders" value="3" />
      <torznab:attr name="peers" value="4" />
      <torznab:attr name="infohash" value="{_HASH}" />
      <torznab:attr name="magneturl" value="magnet:?xt=urn:btih:{_HASH}&amp;dn=movie" />
    </item>
    <item>
      <title>No comments link</title>
      <pubDate>Tue, 10 Jun 2025 10:00:00 +0000</pubDate>
      <size>100</size>
      <torznab:attr name="seeders" value="1" />
      <torznab:attr name="peers" value="1" />
      <torznab:attr name="infohash" value="{_HASH}" />
    </item>
  </channel>
</rss>
"""


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


class TestCapabilities:
    def test_collects_categories_and_subcats(self) -> None:
        caps = parse_capabilities(_CAPS_XML)
        assert caps.category_ids == frozenset({"2000", "2040", "2045", "5070", "100001"})

    def test_wrong_root(self) -> None:
        with pytest.raises(ValueError):
            parse_capabilities('<error code="100" description="Invalid API Key" />')

    def test_malformed(self) -> None:
        with pytest.raises(ET.ParseError):
            parse_capabilities("<caps><categories>")

    def test_namespaced_tags(self) -> None:
        assert local_name("{http://torznab.com/schemas/2015/feed}attr") == "attr"
        assert local_name("item") == "item"


# ---------------------------------------------------------------------------
# Category ids
# ---------------------------------------------------------------------------


class TestCategoryIds:
    def test_all_sends_no_filter(self) -> None:
        assert category_ids_for(Category.ALL) == []

    def test_without_capabilities_full_list(self) -> None:
        assert category_ids_for(Category.ANIME) == ["5070"]
        assert category_ids_for(Category.MUSIC) == ["3000", "3010", "3040", "3050", "3060"]

    def test_narrowed_to_capabilities_in_canonical_order(self) -> None:
        caps = TorznabCapabilities(category_ids=frozenset({"2045", "2000", "9999"}))
        assert category_ids_for(Category.MOVIES, caps) == ["2000", "2045"]

    def test_unsupported_category_yields_empty(self) -> None:
        caps = TorznabCapabilities(category_ids=frozenset({"2000"}))
        assert category_ids_for(Category.BOOKS, caps) == []

    @pytest.mark.parametrize(
        ("category_id", "expected"),
        [
            (1000, Category.GAMES),
            (2040, Category.MOVIES),
            (3030, Category.BOOKS),
            (3010, Category.MUSIC),
            (4050, Category.GAMES),
            (4010, Category.APPS),
            (5070, Category.ANIME),
            (5040, Category.SERIES),
            (6000, Category.PORN),
            (7020, Category.BOOKS),
            (8010, Category.OTHER),
            (9999, Category.OTHER),
        ],
    )
    def test_category_from_id(self, category_id: int, expected: Category) -> None:
        assert category_from_id(category_id) is expected

    def test_highest_id_wins(self) -> None:
        assert category_from_ids({5000, 5070}) is Category.ANIME
        assert category_from_ids(set()) is Category.OTHER


# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------


class TestParseItems:
    def test_items_parsed(self) -> None:
        items = parse_items(_SEARCH_XML)
        assert len(items) == 3

        first = items[0]
        assert first.title == "[Group] Show - 01"
        assert first.size == "1.00 GB"
        assert first.pub_date == "11 Jun 2025"
        assert (first.seeders, first.peers) == (12, 15)
        assert first.category_ids == {5000, 5070}
        assert first.category is Category.ANIME
        assert first.identifier == InfoHash(_HASH)
        assert first.is_complete()

    def test_magnet_preferred_over_info_hash(self) -> None:
        second = parse_items(_SEARCH_XML)[1]
        assert second.identifier == MagnetUri(f"magnet:?xt=urn:btih:{_HASH}&dn=movie")
        assert second.size == "1.50 KB"
        assert second.category is Category.MOVIES

    def test_missing_comments_is_incomplete(self) -> None:
        third = parse_items(_SEARCH_XML)[2]
        assert not third.is_complete()
        assert third.category is Category.OTHER

    def test_negative_counters_make_item_incomplete(self) -> None:
        xml = _SEARCH_XML.replace('name="seeders" value="12"', 'name="seeders" value="-1"')
        first = parse_items(xml)[0]
        assert first.seeders is None
        assert not first.is_complete()

    def test_malformed_info_hash_is_no_identifier(self) -> None:
        xml = _SEARCH_XML.replace(f'value="{_HASH}"', 'value="n/a"', 1)
        first = parse_items(xml)[0]
        assert first.identifier is None
        assert not first.is_complete()

    def test_non_rss_root(self) -> None:
        assert parse_items('<error code="201" description="Incorrect parameter" />') == []

    def test_malformed(self) -> None:
        with pytest.raises(ET.ParseError):
            parse_items("<rss><channel>")


class TestPubDate:
    def test_rfc1123(self) -> None:
        assert format_pub_date("Wed, 11 Jun 2025 06:13:57 +0000") == "11 Jun 2025"

    def test_fallback_takes_day_month_year_words(self) -> None:
        assert format_pub_date("Wed, 11 Jun 2025 99:99:99 +0000") == "11 Jun 2025"

    def test_unparseable_kept(self) -> None:
        assert format_pub_date("yesterday") == "yesterday"


# ---------------------------------------------------------------------------
# Error documents
# ---------------------------------------------------------------------------


class TestErrorDocuments:
    def test_strip_declaration(self) -> None:
        assert strip_declaration('<?xml version="1.0"?>\n<caps/>') == "<caps/>"
        assert strip_declaration("  <caps/>") == "<caps/>"

    def test_error_code(self) -> None:
        xml = '<?xml version="1.0"?><error code="100" description="Invalid API Key" />'
        assert parse_error_code(xml) == 100

    def test_error_without_code(self) -> None:
        assert parse_error_code('<error description="x" />') is None

    def test_not_an_error(self) -> None:
        assert parse_error_code("<caps />") is None

    def test_malformed(self) -> None:
        assert parse_error_code("<error code=") is None
