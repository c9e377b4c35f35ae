from .base import SearchSource
from .exceptions import (
    DuplicateSourceError,
    FetchConnectionError,
    FetchError,
    FetchStatusError,
    FetchTimeoutError,
    SearchLimitReachedError,
    SearchSourceError,
    SourceError,
    SourceNotFoundError,
)

__all__ = [
    "DuplicateSourceError",
    "FetchConnectionError",
    "FetchError",
    "FetchStatusError",
    "FetchTimeoutError",
    "SearchLimitReachedError",
    "SearchSource",
    "SearchSourceError",
    "SourceError",
    "SourceNotFoundError",
]
