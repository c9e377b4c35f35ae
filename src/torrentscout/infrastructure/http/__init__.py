from .fetcher import HttpxFetcher, build_client

__all__ = ["HttpxFetcher", "build_client"]
