"""Per-source category-code lookups."""

from __future__ import annotations

from typing import Hashable, Mapping

from torrentscout.domain.entities import Category


def map_category(
    table: Mapping[Hashable, Category],
    code: Hashable | None,
    *,
    default: Category = Category.OTHER,
) -> Category:
    """Map a source-specific category code, falling back to *default*."""
    if code is None:
        return default
    return table.get(code, default)
