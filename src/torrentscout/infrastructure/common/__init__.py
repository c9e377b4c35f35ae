"""Common infrastructure utilities."""

from __future__ import annotations

from .categories import map_category
from .converters import to_count, to_int
from .dates import format_date, format_epoch_seconds
from .parsers import format_bytes, normalize_size, parse_bytes

__all__ = [
    "format_bytes",
    "format_date",
    "format_epoch_seconds",
    "map_category",
    "normalize_size",
    "parse_bytes",
    "to_count",
    "to_int",
]
