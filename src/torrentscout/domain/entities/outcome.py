"""Per-source outcomes and session/task states of a search."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .record import TorrentRecord
from .source import SourceDescriptor


@dataclass(frozen=True)
class Ok:
    source: SourceDescriptor
    records: list[TorrentRecord] = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    source: SourceDescriptor
    error: BaseException

    @property
    def is_ok(self) -> bool:
        return False


SourceOutcome = Ok | Err


class SessionState(str, Enum):
    IDLE = "idle"
    FANNING_OUT = "fanning_out"
    DRAINING = "draining"


class TaskState(str, Enum):
    RUNNING = "running"
    COMPLETED_OK = "completed_ok"
    COMPLETED_ERR = "completed_err"
    CANCELLED = "cancelled"
