from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .category import Category


@dataclass(frozen=True)
class Safe:
    pass


@dataclass(frozen=True)
class Unsafe:
    reason: str


SafetyStatus = Safe | Unsafe


class SourceKind(str, Enum):
    BUILTIN = "builtin"
    TORZNAB = "torznab"


@dataclass(frozen=True)
class SourceDescriptor:
    """Static description of one search source."""

    id: str
    name: str
    url: str
    specialized_category: Category = Category.ALL
    safety: SafetyStatus = field(default_factory=Safe)
    enabled_by_default: bool = False
    kind: SourceKind = SourceKind.BUILTIN


@dataclass(frozen=True)
class TorznabConfig:
    """User-supplied Torznab indexer settings (read-only input)."""

    id: str
    name: str
    url: str
    api_key: str
    category: Category = Category.ALL
    unsafe_reason: str | None = None

    @property
    def safety(self) -> SafetyStatus:
        if self.unsafe_reason:
            return Unsafe(self.unsafe_reason)
        return Safe()
