"""Byte-size formatting and parsing."""

from __future__ import annotations

import re

_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB", "PB")

_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
    "PB": 1024**5,
}

# IEC spellings used by some sites ("1.2 GiB").
_UNIT_ALIASES: dict[str, str] = {
    "BYTES": "B",
    "KIB": "KB",
    "MIB": "MB",
    "GIB": "GB",
    "TIB": "TB",
    "PIB": "PB",
}

_SIZE_RE = re.compile(r"^\s*([\d.]+)\s*([KMGTP]?I?B|BYTES)\s*$", re.IGNORECASE)


def format_bytes(num_bytes: int | float) -> str:
    """Format a byte count with base-1024 units and two decimals.

    ``1536`` -> ``"1.50 KB"``, ``500`` -> ``"500.00 B"``.
    """
    value = float(num_bytes)
    unit = _UNITS[0]
    for candidate in reversed(_UNITS):
        if value >= _MULTIPLIERS[candidate]:
            unit = candidate
            break
    return f"{value / _MULTIPLIERS[unit]:.2f} {unit}"


def _split_size(size_str: str) -> tuple[str, float, str] | None:
    match = _SIZE_RE.match(size_str.replace(",", ""))
    if not match:
        return None
    raw_value = match.group(1)
    try:
        value = float(raw_value)
    except ValueError:
        return None
    unit = match.group(2).upper()
    return raw_value, value, _UNIT_ALIASES.get(unit, unit)


def parse_bytes(size_str: str | None) -> int | None:
    """Parse a display size back to bytes.

    Accepts ``"12.3 MB"``, ``"12.3MB"`` and IEC units (``"12.3 MiB"``).
    Returns ``None`` for anything unparseable.
    """
    if not size_str:
        return None
    if size_str.strip().isdigit():
        return int(size_str.strip())

    parsed = _split_size(size_str)
    if parsed is None:
        return None
    _, value, unit = parsed
    return int(value * _MULTIPLIERS[unit])


def normalize_size(size_str: str) -> str:
    """Rewrite a size into ``"<value> <UNIT>"`` form, keeping the site's value.

    ``"1.2GB"`` -> ``"1.2 GB"``, ``"700 MiB"`` -> ``"700 MB"``.
    Unparseable input is returned unchanged (stripped).
    """
    parsed = _split_size(size_str)
    if parsed is None:
        return size_str.strip()
    raw_value, _, unit = parsed
    return f"{raw_value} {unit}"
