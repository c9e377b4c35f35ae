from .httpx_base import HttpxSourceBase
from .registry import SourceRegistry

__all__ = ["HttpxSourceBase", "SourceRegistry"]
