"""Token Reconnect: rebind detached style values to design-system tokens.

Finds style values set directly on document nodes (fills, strokes,
effects, corner radius, auto-layout spacing, typography), matches them
against the tokens and styles of connected libraries, and applies the
bindings the user approves.

Main components:
- scanner: detached style detection over a document scope
- library: token store access, extraction and conflict detection
- matcher: candidate tokens per detached style
- resolver: applying approved fixes to the document
- session: scan/apply message protocol
- config: configuration loading and validation
"""

__version__ = "1.0.0"

from .colors import normalize_color
from .config import ReconnectConfig, ScanOptions, load_config
from .document import MIXED, DocumentAccess, InMemoryDocument
from .errors import ErrorCategory, ReconnectError
from .library import InMemoryTokenStore, LibraryExtractor, TokenStore
from .matcher import find_matches
from .models import (
    ApplyResult,
    DetachedStyle,
    DetachedStylesMap,
    Fix,
    LibraryInfo,
    LibraryStyle,
    LibraryToken,
    MatchResult,
    ScanResult,
    StyleCategory,
    VariableMatch,
)
from .resolver import FixResolver, apply_fixes
from .scanner import DocumentScanner, scan_for_detached_styles
from .session import ReconnectSession, run_stdio_session

__all__ = [
    "__version__",
    # Models
    "StyleCategory",
    "DetachedStyle",
    "DetachedStylesMap",
    "ScanResult",
    "LibraryToken",
    "LibraryStyle",
    "LibraryInfo",
    "VariableMatch",
    "MatchResult",
    "Fix",
    "ApplyResult",
    # Document and tokens
    "MIXED",
    "DocumentAccess",
    "InMemoryDocument",
    "TokenStore",
    "InMemoryTokenStore",
    # Pipeline
    "normalize_color",
    "DocumentScanner",
    "scan_for_detached_styles",
    "LibraryExtractor",
    "find_matches",
    "FixResolver",
    "apply_fixes",
    "ReconnectSession",
    "run_stdio_session",
    # Config and errors
    "ReconnectConfig",
    "ScanOptions",
    "load_config",
    "ErrorCategory",
    "ReconnectError",
]
