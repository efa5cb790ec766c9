"""Token libraries: store access, extraction and conflict detection.

- base: TokenStore access point
- memory_store: JSON-backed TokenStore
- extractor: LibraryInfo extraction and category inference
- conflicts: cross-library value conflicts
"""

from .base import STYLE_KINDS, TokenStore
from .conflicts import check_for_conflicts, conflict_key, detect_conflicts
from .extractor import (
    LibraryExtractor,
    LibraryLoadResult,
    determine_category,
    get_connected_libraries,
    resolve_variable_value,
    style_value,
)
from .memory_store import InMemoryTokenStore

__all__ = [
    "STYLE_KINDS",
    "TokenStore",
    "InMemoryTokenStore",
    "LibraryExtractor",
    "LibraryLoadResult",
    "determine_category",
    "get_connected_libraries",
    "resolve_variable_value",
    "style_value",
    "check_for_conflicts",
    "conflict_key",
    "detect_conflicts",
]
