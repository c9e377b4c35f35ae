"""In-memory source registry (builtin sources + configured Torznab indexers)."""

from __future__ import annotations

from typing import Collection, Iterable

import structlog

from torrentscout.domain.entities import Category, SourceDescriptor, TorznabConfig
from torrentscout.domain.sources import (
    DuplicateSourceError,
    SearchSource,
    SourceNotFoundError,
)
from torrentscout.infrastructure.torznab.client import TorznabSource

log = structlog.get_logger(__name__)


class SourceRegistry:
    """Holds one long-lived instance per source, keyed by source id.

    Built explicitly at startup and handed to the search engine; adapters
    are never constructed per query.
    """

    def __init__(
        self,
        builtins: Iterable[SearchSource] = (),
        torznab_configs: Iterable[TorznabConfig] = (),
    ) -> None:
        self._sources: dict[str, SearchSource] = {}
        for source in builtins:
            self.add(source)
        for config in torznab_configs:
            self.add_torznab(config)

        log.info(
            "sources_registered",
            count=len(self._sources),
            default_enabled=len(self.default_enabled_ids()),
        )

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources

    def add(self, source: SearchSource) -> None:
        source_id = source.info.id
        if not source_id:
            raise ValueError(f"{source!r} has no id")
        if source_id in self._sources:
            raise DuplicateSourceError(f"Duplicate source id: {source_id!r}")
        self._sources[source_id] = source

    def add_torznab(self, config: TorznabConfig) -> TorznabSource:
        source = TorznabSource(config)
        self.add(source)
        log.debug("torznab_indexer_registered", indexer=config.id, url=source.api_url)
        return source

    def descriptors(self) -> list[SourceDescriptor]:
        return sorted(
            (source.info for source in self._sources.values()),
            key=lambda info: (info.name.lower(), info.id),
        )

    def default_enabled_ids(self) -> set[str]:
        return {
            source_id
            for source_id, source in self._sources.items()
            if source.info.enabled_by_default
        }

    def get(self, source_id: str) -> SearchSource:
        try:
            return self._sources[source_id]
        except KeyError:
            raise SourceNotFoundError(f"Unknown source: {source_id!r}") from None

    def eligible(
        self, enabled_ids: Collection[str], category: Category
    ) -> list[SearchSource]:
        """Enabled sources able to serve *category*, in registration order.

        Unknown ids in *enabled_ids* are ignored.
        """
        return [
            source
            for source_id, source in self._sources.items()
            if source_id in enabled_ids
            and source.info.specialized_category.matches(category)
        ]
