"""Torznab XML parsers (capabilities, search results, error responses).

Each parser walks the tree top-down and dispatches on the local tag
name; tags it does not recognize are skipped together with their whole
subtree.

See: https://torznab.github.io/spec-1.3-draft/torznab/Specification-v1.3.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable
from xml.etree import ElementTree as ET

from torrentscout.domain.entities import (
    Category,
    InfoHash,
    MagnetUri,
    TorrentIdentifier,
    TorznabCapabilities,
    is_info_hash,
)
from torrentscout.infrastructure.common.converters import to_int
from torrentscout.infrastructure.common.dates import format_rfc1123_date
from torrentscout.infrastructure.common.parsers import format_bytes

from .categories import CUSTOM_CATEGORY_RANGE_START, category_from_ids


def local_name(tag: str) -> str:
    """``{http://torznab.com/schemas/2015/feed}attr`` -> ``attr``."""
    return tag.rsplit("}", 1)[-1]


def _dispatch(
    element: ET.Element,
    handlers: dict[str, Callable[[ET.Element], None]],
) -> None:
    for child in element:
        handler = handlers.get(local_name(child.tag))
        if handler is not None:
            handler(child)


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


def parse_capabilities(xml: str) -> TorznabCapabilities:
    """Collect every ``category``/``subcat`` id of a ``<caps>`` document.

    Raises ``xml.etree.ElementTree.ParseError`` for malformed XML and
    ``ValueError`` when the root element is not ``<caps>``.
    """
    root = ET.fromstring(xml)
    if local_name(root.tag) != "caps":
        raise ValueError(f"expected <caps>, got <{local_name(root.tag)}>")

    ids: set[str] = set()

    def read_subcat(subcat: ET.Element) -> None:
        if subcat.get("id"):
            ids.add(subcat.get("id", ""))

    def read_category(category: ET.Element) -> None:
        if category.get("id"):
            ids.add(category.get("id", ""))
        _dispatch(category, {"subcat": read_subcat})

    def read_categories(categories: ET.Element) -> None:
        _dispatch(categories, {"category": read_category})

    _dispatch(root, {"categories": read_categories})
    return TorznabCapabilities(category_ids=frozenset(ids))


# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------


@dataclass
class TorznabItem:
    """Fields gathered from one ``<item>``; completeness checked by the caller."""

    title: str | None = None
    comments: str | None = None
    pub_date: str | None = None
    size: str | None = None
    seeders: int | None = None
    peers: int | None = None
    magnet_uri: str | None = None
    info_hash: str | None = None
    category_ids: set[int] = field(default_factory=set)

    @property
    def identifier(self) -> TorrentIdentifier | None:
        if self.magnet_uri:
            return MagnetUri(self.magnet_uri)
        if self.info_hash and is_info_hash(self.info_hash):
            return InfoHash(self.info_hash)
        return None

    @property
    def category(self) -> Category:
        return category_from_ids(self.category_ids)

    def is_complete(self) -> bool:
        return (
            bool(self.title)
            and bool(self.size)
            and self.seeders is not None
            and self.peers is not None
            and bool(self.pub_date)
            and self.comments is not None
            and self.identifier is not None
        )


def format_pub_date(raw: str) -> str:
    """``Wed, 11 Jun 2025 06:13:57 +0000`` -> ``11 Jun 2025``."""
    formatted = format_rfc1123_date(raw)
    if formatted != raw:
        return formatted
    words = raw.split()
    return " ".join(words[1:4]) if len(words) >= 4 else raw


def _read_item(element: ET.Element) -> TorznabItem:
    item = TorznabItem()

    def read_title(el: ET.Element) -> None:
        item.title = _text(el)

    def read_comments(el: ET.Element) -> None:
        item.comments = _text(el)

    def read_pub_date(el: ET.Element) -> None:
        item.pub_date = format_pub_date(_text(el))

    def read_size(el: ET.Element) -> None:
        size_bytes = to_int(_text(el))
        if size_bytes is not None:
            item.size = format_bytes(size_bytes)

    def read_attr(el: ET.Element) -> None:
        name = el.get("name")
        value = el.get("value", "")
        if name == "seeders":
            item.seeders = to_int(value)
        elif name == "peers":
            item.peers = to_int(value)
        elif name == "magneturl":
            item.magnet_uri = value or None
        elif name == "infohash":
            item.info_hash = value or None
        elif name == "category":
            category_id = to_int(value)
            if category_id is not None and category_id < CUSTOM_CATEGORY_RANGE_START:
                item.category_ids.add(category_id)
        elif name == "size" and item.size is None:
            size_bytes = to_int(value)
            if size_bytes is not None:
                item.size = format_bytes(size_bytes)

    _dispatch(
        element,
        {
            "title": read_title,
            "comments": read_comments,
            "pubDate": read_pub_date,
            "size": read_size,
            "attr": read_attr,
        },
    )
    return item


def parse_items(xml: str) -> list[TorznabItem]:
    """Parse ``rss/channel/item`` elements of a search response.

    Items are returned as parsed, complete or not.  Raises
    ``ParseError`` for malformed XML.
    """
    root = ET.fromstring(xml)
    items: list[TorznabItem] = []
    if local_name(root.tag) != "rss":
        return items

    def read_channel(channel: ET.Element) -> None:
        _dispatch(channel, {"item": lambda el: items.append(_read_item(el))})

    _dispatch(root, {"channel": read_channel})
    return items


# ---------------------------------------------------------------------------
# Error responses
# ---------------------------------------------------------------------------


def strip_declaration(xml: str) -> str:
    text = xml.lstrip()
    if text.startswith("<?xml"):
        end = text.find("?>")
        if end != -1:
            text = text[end + 2:]
    return text.lstrip()


def parse_error_code(xml: str) -> int | None:
    """Return the ``code`` of an ``<error code="N" .../>`` document."""
    try:
        root = ET.fromstring(strip_declaration(xml))
    except ET.ParseError:
        return None
    if local_name(root.tag) != "error":
        return None
    code = root.get("code", "").strip()
    return int(code) if code.lstrip("-").isdigit() else None
