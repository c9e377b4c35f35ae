from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, TorznabIndexerConfig

__all__ = ["AppConfig", "EnvOverrides", "TorznabIndexerConfig", "load_config"]
