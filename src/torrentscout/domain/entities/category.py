"""Canonical torrent categories."""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    """Closed set of categories every source is normalized into.

    ``ALL`` is a wildcard: as a request it matches any source, as a
    specialization it marks a source that is not scoped to one category.
    """

    ALL = "all"
    ANIME = "anime"
    APPS = "apps"
    BOOKS = "books"
    GAMES = "games"
    MOVIES = "movies"
    MUSIC = "music"
    PORN = "porn"
    SERIES = "series"
    OTHER = "other"

    @property
    def is_nsfw(self) -> bool:
        return self in (Category.PORN, Category.OTHER)

    def matches(self, requested: Category) -> bool:
        """Whether a source specialized in this category serves *requested*."""
        return (
            self is Category.ALL
            or requested is Category.ALL
            or self is requested
        )

    @classmethod
    def from_name(cls, name: str) -> Category:
        """Parse a category name case-insensitively (``"Anime"`` -> ``ANIME``)."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise ValueError(
                f"Unknown category '{name}' (expected one of: {valid})"
            ) from None
