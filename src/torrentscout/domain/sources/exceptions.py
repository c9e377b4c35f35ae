"""Source and fetch exceptions."""

from __future__ import annotations


class SourceError(Exception):
    """Base class for all source-related errors."""


class SourceNotFoundError(SourceError):
    """Raised when a source id is not known to the registry."""


class DuplicateSourceError(SourceError):
    """Raised when two sources resolve to the same id."""


class SearchSourceError(SourceError):
    """Raised (and reported as an outcome) when a source search fails."""

    def __init__(self, message: str, *, source_name: str, source_url: str) -> None:
        super().__init__(message)
        self.source_name = source_name
        self.source_url = source_url


class SearchLimitReachedError(SourceError):
    """Reported for sources cancelled because the result limit was reached."""


class FetchError(Exception):
    """Base class for network failures of the fetch capability."""

    def __init__(self, message: str, *, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class FetchTimeoutError(FetchError):
    """The request did not complete within its deadline."""


class FetchConnectionError(FetchError):
    """DNS resolution or TCP/TLS connect failed."""


class FetchStatusError(FetchError):
    """The server answered with a non-success HTTP status."""

    def __init__(self, status_code: int, *, url: str = "") -> None:
        super().__init__(f"HTTP {status_code} for {url}", url=url)
        self.status_code = status_code
