"""Port for the HTTP fetch capability injected into sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, runtime_checkable


@dataclass(frozen=True)
class FetchResponse:
    status_code: int
    text: str


@runtime_checkable
class FetchPort(Protocol):
    """Async HTTP access; network failures raise ``FetchError`` subclasses."""

    async def get_text(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> str: ...

    async def get_json(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Any | None: ...

    async def post_json(
        self, url: str, payload: Any, *, headers: Mapping[str, str] | None = None
    ) -> Any | None: ...

    async def get_response(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> FetchResponse: ...
