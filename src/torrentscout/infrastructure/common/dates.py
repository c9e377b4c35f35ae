"""Upload-date normalization.

Sources publish dates in many encodings (epoch seconds, ``yyyy-M-d``,
``d/M/yyyy``, ``M/d/yyyy``, ISO-8601, RFC-1123, "Today"/"Yesterday").
Everything is rendered as ``dd Mon yyyy`` (``"11 Jun 2025"``).  Input that
cannot be parsed is returned unchanged; these helpers never raise.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

OUTPUT_FORMAT = "%d %b %Y"


def _render(value: date | datetime) -> str:
    return value.strftime(OUTPUT_FORMAT)


def format_epoch_seconds(epoch_seconds: int | str) -> str:
    try:
        moment = datetime.fromtimestamp(int(epoch_seconds), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return str(epoch_seconds)
    return _render(moment)


def _format_numeric(raw: str, sep: str, order: tuple[str, str, str]) -> str:
    parts = raw.strip().split(sep)
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return raw
    fields = dict(zip(order, (int(p) for p in parts)))
    if fields["y"] < 1000:
        return raw
    try:
        return _render(date(fields["y"], fields["m"], fields["d"]))
    except ValueError:
        return raw


def format_year_month_day(raw: str) -> str:
    """``2025-6-11`` / ``2025-06-11`` -> ``11 Jun 2025``."""
    return _format_numeric(raw, "-", ("y", "m", "d"))


def format_day_month_year(raw: str) -> str:
    """``11/6/2025`` -> ``11 Jun 2025``."""
    return _format_numeric(raw, "/", ("d", "m", "y"))


def format_month_day_year(raw: str) -> str:
    """``6/11/2025`` -> ``11 Jun 2025``."""
    return _format_numeric(raw, "/", ("m", "d", "y"))


def format_iso_date(raw: str) -> str:
    """``2025-06-11T06:13:57+00:00`` -> ``11 Jun 2025``."""
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return _render(datetime.fromisoformat(text))
    except ValueError:
        return raw


def format_rfc1123_date(raw: str) -> str:
    """``Wed, 11 Jun 2025 06:13:57 +0000`` -> ``11 Jun 2025``."""
    try:
        return _render(parsedate_to_datetime(raw.strip()))
    except (TypeError, ValueError, IndexError):
        return raw


def format_relative_date(raw: str, *, today: date | None = None) -> str:
    """Resolve ``Today``/``Yesterday`` markers; other text is returned as is."""
    today = today or date.today()
    marker = raw.strip().lower()
    if marker.startswith("today"):
        return _render(today)
    if marker.startswith("yesterday"):
        return _render(today - timedelta(days=1))
    return raw


def format_date(raw: str | int | None, *, today: date | None = None) -> str:
    """Best-effort conversion of any supported encoding to ``dd Mon yyyy``."""
    if raw is None:
        return ""
    if isinstance(raw, int):
        return format_epoch_seconds(raw)

    text = raw.strip()
    if not text:
        return raw
    if text.isdigit():
        return format_epoch_seconds(text)

    formatters = (
        format_year_month_day,
        format_iso_date,
        format_rfc1123_date,
        format_day_month_year,
        format_month_day_year,
    )
    for formatter in formatters:
        formatted = formatter(text)
        if formatted != text:
            return formatted

    return format_relative_date(raw, today=today)
