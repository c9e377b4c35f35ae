from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TorznabCapabilities:
    category_ids: frozenset[str]


# Connection diagnosis results


@dataclass(frozen=True)
class ConnectionEstablished:
    pass


@dataclass(frozen=True)
class ConnectionFailed:
    pass


@dataclass(frozen=True)
class InvalidApiKey:
    pass


@dataclass(frozen=True)
class ApplicationError:
    code: int


@dataclass(frozen=True)
class UnexpectedResponse:
    code: int | None = None


@dataclass(frozen=True)
class UnexpectedError:
    detail: str = ""


ConnectionCheckResult = (
    ConnectionEstablished
    | ConnectionFailed
    | InvalidApiKey
    | ApplicationError
    | UnexpectedResponse
    | UnexpectedError
)
