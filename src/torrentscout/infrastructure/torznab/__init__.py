from .categories import CATEGORY_IDS, category_from_id, category_ids_for
from .client import (
    TorznabSource,
    check_connection,
    classify_caps_response,
    normalize_api_url,
)
from .parsers import parse_capabilities, parse_error_code, parse_items

__all__ = [
    "CATEGORY_IDS",
    "TorznabSource",
    "category_from_id",
    "category_ids_for",
    "check_connection",
    "classify_caps_response",
    "normalize_api_url",
    "parse_capabilities",
    "parse_error_code",
    "parse_items",
]
