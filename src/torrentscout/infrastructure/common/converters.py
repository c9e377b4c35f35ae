"""Type conversion utilities."""

from __future__ import annotations

import re

_COUNT_RE = re.compile(r"[0-9]+")


def to_int(raw: str | int | None) -> int | None:
    """Convert a scraped counter to int, return None if there is no number.

    Handles the formats sites use for seeders/peers:
        - None → None
        - int → int (passthrough)
        - "123" → 123
        - "1,234" → 1234
        - " 42 " → 42
        - "-" / "" → None
        - "-1" / "1.5" → None (signed or decimal text is not a counter)

    Args:
        raw: Input value (str, int, or None).

    Returns:
        Integer or None if conversion fails.
    """
    if raw is None:
        return None

    if isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        return raw

    if isinstance(raw, str):
        txt = raw.strip().replace(",", "")
        if not _COUNT_RE.fullmatch(txt):
            return None
        return int(txt)

    return None


def to_count(raw: str | int | None) -> int:
    """Like :func:`to_int` but defaults to 0 for missing counters."""
    value = to_int(raw)
    return value if value is not None and value >= 0 else 0
