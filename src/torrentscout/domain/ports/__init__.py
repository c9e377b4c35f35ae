from .fetch import FetchPort, FetchResponse
from .source_registry import SourceRegistryPort

__all__ = [
    "FetchPort",
    "FetchResponse",
    "SourceRegistryPort",
]
