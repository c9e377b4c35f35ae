"""Builtin search sources, one module per site."""

from __future__ import annotations

from torrentscout.infrastructure.sources.httpx_base import HttpxSourceBase

from .animetosho import AnimeToshoSource
from .anirena import AniRenaSource
from .bitsearch import BitSearchSource
from .dmhy import DmhySource
from .eztv import EztvSource
from .internetarchive import InternetArchiveSource
from .knaben import KnabenSource
from .limetorrents import LimeTorrentsSource
from .mypornclub import MyPornClubSource
from .nyaa import NyaaSource
from .subsplease import SubsPleaseSource
from .sukebei import SukebeiSource
from .thepiratebay import ThePirateBaySource
from .therarbg import TheRarBgSource
from .tokyotoshokan import TokyoToshokanSource
from .torrentdatabase import TorrentDatabaseSource
from .torrentdownload import TorrentDownloadSource
from .torrentdownloads import TorrentDownloadsSource
from .torrentscsv import TorrentsCsvSource
from .uindex import UIndexSource
from .xxxclub import XXXClubSource
from .yts import YtsSource

BUILTIN_SOURCES: tuple[type[HttpxSourceBase], ...] = (
    AnimeToshoSource,
    AniRenaSource,
    BitSearchSource,
    DmhySource,
    EztvSource,
    InternetArchiveSource,
    KnabenSource,
    LimeTorrentsSource,
    MyPornClubSource,
    NyaaSource,
    SubsPleaseSource,
    SukebeiSource,
    ThePirateBaySource,
    TheRarBgSource,
    TokyoToshokanSource,
    TorrentDatabaseSource,
    TorrentDownloadSource,
    TorrentDownloadsSource,
    TorrentsCsvSource,
    UIndexSource,
    XXXClubSource,
    YtsSource,
)


def builtin_sources() -> list[HttpxSourceBase]:
    """Fresh instances of every builtin source."""
    return [cls() for cls in BUILTIN_SOURCES]


__all__ = [
    "BUILTIN_SOURCES",
    "AnimeToshoSource",
    "AniRenaSource",
    "BitSearchSource",
    "DmhySource",
    "EztvSource",
    "InternetArchiveSource",
    "KnabenSource",
    "LimeTorrentsSource",
    "MyPornClubSource",
    "NyaaSource",
    "SubsPleaseSource",
    "SukebeiSource",
    "ThePirateBaySource",
    "TheRarBgSource",
    "TokyoToshokanSource",
    "TorrentDatabaseSource",
    "TorrentDownloadSource",
    "TorrentDownloadsSource",
    "TorrentsCsvSource",
    "UIndexSource",
    "XXXClubSource",
    "YtsSource",
    "builtin_sources",
]
