"""Canonical search-result record and its identifier variants."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote

from .category import Category

MAGNET_PREFIX = "magnet:?xt=urn:btih:"

# Public trackers appended to magnet links built from a bare info-hash.
DEFAULT_TRACKERS: tuple[str, ...] = (
    "udp://tracker.opentrackr.org:1337/announce",
    "udp://open.demonoid.ch:6969/announce",
    "udp://open.demonii.com:1337/announce",
    "udp://open.stealth.si:80/announce",
    "udp://exodus.desync.com:6969/announce",
    "udp://tracker.torrent.eu.org:451/announce",
    "udp://explodie.org:6969/announce",
    "udp://tracker2.dler.org:80/announce",
    "udp://tracker.qu.ax:6969/announce",
)

_BTIH_RE = re.compile(r"xt=urn:btih:([A-Za-z0-9]+)", re.IGNORECASE)
_INFO_HASH_RE = re.compile(r"[0-9A-Fa-f]{40}|[A-Za-z2-7]{32}")


def is_info_hash(value: str) -> bool:
    """40 hex characters, or the 32-character base32 form."""
    return bool(_INFO_HASH_RE.fullmatch(value))


@dataclass(frozen=True)
class InfoHash:
    """Torrent identified by its hex info-hash."""

    value: str

    def __post_init__(self) -> None:
        if not is_info_hash(self.value):
            raise ValueError(f"Not a BitTorrent info-hash: {self.value[:48]!r}")


@dataclass(frozen=True)
class MagnetUri:
    """Torrent identified by a full magnet link."""

    uri: str

    def __post_init__(self) -> None:
        if not self.uri.startswith("magnet:"):
            raise ValueError(f"Not a magnet link: {self.uri[:40]!r}")


TorrentIdentifier = InfoHash | MagnetUri


def info_hash_from_magnet(uri: str) -> str | None:
    """Return the btih hash embedded in a magnet link, if any."""
    match = _BTIH_RE.search(uri)
    return match.group(1) if match else None


@dataclass(frozen=True)
class TorrentRecord:
    """One normalized search result.

    A record always carries exactly one identifier; sources drop rows
    they cannot identify instead of constructing an invalid record.
    """

    name: str
    size: str
    seeders: int
    peers: int
    upload_date: str
    source_id: str
    source_name: str
    identifier: TorrentIdentifier
    category: Category | None = None
    description_page_url: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.identifier, (InfoHash, MagnetUri)):
            raise ValueError("TorrentRecord requires an InfoHash or MagnetUri")
        if self.seeders < 0 or self.peers < 0:
            raise ValueError("seeders/peers must be non-negative")

    def is_nsfw(self) -> bool:
        # Unknown category counts as NSFW.
        return self.category is None or self.category.is_nsfw

    def is_dead(self) -> bool:
        return self.seeders == 0 and self.peers == 0

    def info_hash(self) -> str | None:
        if isinstance(self.identifier, InfoHash):
            return self.identifier.value
        return info_hash_from_magnet(self.identifier.uri)

    def magnet_uri(self, trackers: tuple[str, ...] = DEFAULT_TRACKERS) -> str:
        """Return a magnet link, building one from the info-hash if needed."""
        if isinstance(self.identifier, MagnetUri):
            return self.identifier.uri

        parts = [f"{MAGNET_PREFIX}{self.identifier.value}"]
        parts.append(f"dn={quote(self.name)}")
        parts.extend(f"tr={tracker}" for tracker in trackers)
        return "&".join(parts)
