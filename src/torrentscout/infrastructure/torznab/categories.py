"""Torznab category ids.

See:
- https://github.com/Jackett/Jackett/wiki/Jackett-Categories
- https://newznab.readthedocs.io/en/latest/misc/api.html#predefined-categories
"""

from __future__ import annotations

from torrentscout.domain.entities import Category, TorznabCapabilities

# Ids at or above this are indexer-specific custom categories.
CUSTOM_CATEGORY_RANGE_START = 100_000

CATEGORY_IDS: dict[Category, tuple[str, ...]] = {
    Category.ALL: (),
    Category.ANIME: ("5070",),
    Category.APPS: tuple(str(i) for i in range(4000, 4080, 10)),
    Category.BOOKS: tuple(str(i) for i in range(7000, 7070, 10)),
    Category.GAMES: ("4050",),
    Category.MOVIES: (
        "2000", "2010", "2020", "2030", "2040",
        "2045", "2050", "2060", "2070", "2080",
    ),
    Category.MUSIC: ("3000", "3010", "3040", "3050", "3060"),
    Category.PORN: (
        "6000", "6010", "6020", "6030", "6040", "6045",
        "6050", "6060", "6070", "6080", "6090",
    ),
    Category.SERIES: (
        "5000", "5010", "5020", "5030", "5040",
        "5045", "5050", "5060", "5080",
    ),
    Category.OTHER: ("8000", "8010", "8020"),
}


def category_ids_for(
    category: Category,
    capabilities: TorznabCapabilities | None = None,
) -> list[str]:
    """Ids to request for *category*, narrowed to what the indexer supports.

    Canonical order is kept.  Without capabilities the full list is used.
    """
    ids = CATEGORY_IDS.get(category, ())
    if capabilities is None:
        return list(ids)
    return [i for i in ids if i in capabilities.category_ids]


def category_from_id(category_id: int) -> Category:
    """Map a standard Torznab category id to a canonical category."""
    if category_id == 3030:
        return Category.BOOKS
    if category_id == 4050:
        return Category.GAMES
    if category_id == 5070:
        return Category.ANIME

    group = category_id // 1000
    return {
        1: Category.GAMES,
        2: Category.MOVIES,
        3: Category.MUSIC,
        4: Category.APPS,
        5: Category.SERIES,
        6: Category.PORN,
        7: Category.BOOKS,
        8: Category.OTHER,
    }.get(group, Category.OTHER)


def category_from_ids(category_ids: set[int]) -> Category:
    """An item's category is decided by its highest standard id."""
    if not category_ids:
        return Category.OTHER
    return category_from_id(max(category_ids))
