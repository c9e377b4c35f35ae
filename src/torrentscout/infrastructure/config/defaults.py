"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

from torrentscout.infrastructure.sources.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
)

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "torrentscout",
    "environment": "dev",
    "http": {
        "timeout_seconds": DEFAULT_REQUEST_TIMEOUT,
        "connect_timeout_seconds": DEFAULT_CONNECT_TIMEOUT,
        "follow_redirects": True,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "search": {
        "enabled_sources": None,  # None = each source's enabled_by_default
        "max_results": None,
    },
    "torznab": {
        "indexers": [],
    },
}
