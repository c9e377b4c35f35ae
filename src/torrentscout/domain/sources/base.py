"""Domain protocol every search source implements."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from torrentscout.domain.entities import Category, SourceDescriptor, TorrentRecord
from torrentscout.domain.ports.fetch import FetchPort


@runtime_checkable
class SearchSource(Protocol):
    """
    Protocol for search sources (builtin sites and Torznab indexers).

    Contract of ``search``:
    - rows that cannot be fully extracted are dropped, never raised;
    - an unexpected page layout yields an empty list;
    - only a network failure of the primary request may propagate,
      the engine records it as a failed outcome for this source.
    """

    @property
    def info(self) -> SourceDescriptor: ...

    async def search(
        self,
        query: str,
        category: Category,
        fetch: FetchPort,
    ) -> list[TorrentRecord]: ...
