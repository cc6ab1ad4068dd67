"""Terminal reader for FictionBook documents."""

from .bookmarks import BookmarkStore, advance_to, derive_bookmark, document_identity, locate_line
from .config import ReaderConfig, load_config, parse_config
from .errors import (
    Fb2TermError,
    LayoutError,
    LayoutInvariantViolated,
    MalformedToken,
    StreamError,
    StyleStackMismatch,
)
from .layout import LayoutEngine, LineBuffer, NullOracle, PyphenOracle, Translator, WordBreaker
from .models import Alignment, Line, PositionKey, StyleMap, StyleTag
from .session import ReadingSession

__all__ = [
    "Alignment",
    "BookmarkStore",
    "Fb2TermError",
    "LayoutEngine",
    "LayoutError",
    "LayoutInvariantViolated",
    "Line",
    "LineBuffer",
    "MalformedToken",
    "NullOracle",
    "PositionKey",
    "PyphenOracle",
    "ReaderConfig",
    "ReadingSession",
    "StreamError",
    "StyleMap",
    "StyleStackMismatch",
    "StyleTag",
    "Translator",
    "WordBreaker",
    "advance_to",
    "derive_bookmark",
    "document_identity",
    "load_config",
    "locate_line",
    "parse_config",
]
