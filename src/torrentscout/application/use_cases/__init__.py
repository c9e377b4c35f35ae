from .search_torrents import SearchSession, TorrentSearchEngine

__all__ = ["SearchSession", "TorrentSearchEngine"]
