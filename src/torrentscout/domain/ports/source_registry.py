"""Port for source discovery and selection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Collection, Protocol, runtime_checkable

from torrentscout.domain.entities import Category, SourceDescriptor

if TYPE_CHECKING:
    from torrentscout.domain.sources.base import SearchSource


@runtime_checkable
class SourceRegistryPort(Protocol):
    """Synchronous interface for listing and selecting sources."""

    def descriptors(self) -> list[SourceDescriptor]: ...
    def default_enabled_ids(self) -> set[str]: ...
    def get(self, source_id: str) -> SearchSource: ...
    def eligible(
        self, enabled_ids: Collection[str], category: Category
    ) -> list[SearchSource]: ...
