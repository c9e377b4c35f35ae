from .category import Category
from .outcome import Err, Ok, SessionState, SourceOutcome, TaskState
from .record import (
    DEFAULT_TRACKERS,
    MAGNET_PREFIX,
    InfoHash,
    MagnetUri,
    TorrentIdentifier,
    TorrentRecord,
    info_hash_from_magnet,
    is_info_hash,
)
from .source import (
    Safe,
    SafetyStatus,
    SourceDescriptor,
    SourceKind,
    TorznabConfig,
    Unsafe,
)
from .torznab import (
    ApplicationError,
    ConnectionCheckResult,
    ConnectionEstablished,
    ConnectionFailed,
    InvalidApiKey,
    TorznabCapabilities,
    UnexpectedError,
    UnexpectedResponse,
)

__all__ = [
    "DEFAULT_TRACKERS",
    "MAGNET_PREFIX",
    "ApplicationError",
    "Category",
    "ConnectionCheckResult",
    "ConnectionEstablished",
    "ConnectionFailed",
    "Err",
    "InfoHash",
    "InvalidApiKey",
    "MagnetUri",
    "Ok",
    "Safe",
    "SafetyStatus",
    "SessionState",
    "SourceDescriptor",
    "SourceKind",
    "SourceOutcome",
    "TaskState",
    "TorrentIdentifier",
    "TorrentRecord",
    "TorznabCapabilities",
    "TorznabConfig",
    "UnexpectedError",
    "UnexpectedResponse",
    "Unsafe",
    "info_hash_from_magnet",
    "is_info_hash",
]
