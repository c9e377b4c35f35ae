"""CSS-selector-based HTML extraction helpers.

Thin wrappers around BeautifulSoup that never raise on missing elements:
every lookup returns ``None`` or a default so that source parsers can
drop a row with a single ``if not ...: return None``.  Selectors accept
optional fallbacks; the first selector that yields a match wins.
"""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (``lxml`` parser)."""
    return BeautifulSoup(html, "lxml")


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Returns results from the **first** selector that matches at least
    one element.
    """
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def select_one(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> Tag | None:
    for sel in (selector, *fallback_selectors):
        match = root.select_one(sel)
        if match is not None:
            return match
    return None


def child_tags(element: Tag) -> list[Tag]:
    """Direct element children (text nodes skipped), like Jsoup ``children()``."""
    return [child for child in element.children if isinstance(child, Tag)]


def own_text(element: Tag | None) -> str:
    """Text of the element's direct text nodes only, whitespace-collapsed."""
    if element is None:
        return ""
    parts = [
        str(child)
        for child in element.children
        if isinstance(child, NavigableString)
    ]
    return " ".join("".join(parts).split())


def extract_text(
    element: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract whitespace-collapsed text from the first matching child.

    With ``selector=""`` the element's own full text is returned.
    """
    if selector == "":
        text = " ".join(element.get_text(" ").split())
        return text if text else default

    match = select_one(element, selector, *fallback_selectors)
    if match is None:
        return default
    text = " ".join(match.get_text(" ").split())
    return text if text else default


def extract_attr(
    element: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
    base_url: str = "",
) -> str:
    """Extract an HTML attribute from the first matching child element.

    With ``selector=""`` the attribute is read from *element* itself.
    Relative URLs are resolved against *base_url* when given.
    """
    if selector == "":
        candidates: list[Tag | BeautifulSoup] = [element]
    else:
        candidates = []
        for sel in (selector, *fallback_selectors):
            match = element.select_one(sel)
            if match is not None:
                candidates.append(match)

    for candidate in candidates:
        val = candidate.get(attr)
        if isinstance(val, list):
            val = " ".join(val)
        if val:
            value = str(val).strip()
            return urljoin(base_url, value) if base_url else value
    return default
