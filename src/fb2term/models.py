from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Dict, FrozenSet, List, Optional, Pattern, Tuple


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class StyleTag(Enum):
    EMPHASIS = "emphasis"
    STRONG = "strong"
    TITLE = "title"
    SUBTITLE = "subtitle"


@dataclass(frozen=True, order=True)
class PositionKey:
    """Point in the markup stream: text node counter, then word within it."""

    text_index: int = 0
    word_index: int = 0

    def with_word(self, word_index: int) -> PositionKey:
        return PositionKey(self.text_index, word_index)

    def next_text(self) -> PositionKey:
        return PositionKey(self.text_index + 1, 0)


ZERO_KEY = PositionKey()


@dataclass(frozen=True)
class Line:
    content: str
    position: Optional[PositionKey] = None
    width: int = 0

    @property
    def is_synthetic(self) -> bool:
        return self.position is None


BLANK_LINE = Line("")


@dataclass(frozen=True)
class StyleMap:
    """Open/close marker pairs wrapped around styled text."""

    markers: Dict[StyleTag, Tuple[str, str]] = field(default_factory=dict)

    def open_marker(self, style: StyleTag) -> str:
        return self.markers.get(style, ("", ""))[0]

    def close_marker(self, style: StyleTag) -> str:
        return self.markers.get(style, ("", ""))[1]

    def strip(self, content: str) -> str:
        return "".join(text for text, _ in self.segments(content))

    @cached_property
    def _lookup(self) -> Dict[str, Tuple[StyleTag, bool]]:
        lookup: Dict[str, Tuple[StyleTag, bool]] = {}
        for style, (opener, closer) in self.markers.items():
            if opener:
                lookup[opener] = (style, True)
            if closer:
                lookup[closer] = (style, False)
        return lookup

    @cached_property
    def _pattern(self) -> Optional[Pattern[str]]:
        if not self._lookup:
            return None
        return re.compile("|".join(re.escape(marker) for marker in sorted(self._lookup, key=len, reverse=True)))

    def segments(self, content: str) -> List[Tuple[str, FrozenSet[StyleTag]]]:
        """Split a rendered line into runs of text and the styles active on each."""
        lookup = self._lookup
        pattern = self._pattern
        if pattern is None:
            return [(content, frozenset())] if content else []
        active: List[StyleTag] = []
        result: List[Tuple[str, FrozenSet[StyleTag]]] = []
        last = 0
        for match in pattern.finditer(content):
            if match.start() > last:
                result.append((content[last:match.start()], frozenset(active)))
            style, opening = lookup[match.group()]
            if opening:
                active.append(style)
            elif style in active:
                active.remove(style)
            last = match.end()
        if last < len(content):
            result.append((content[last:], frozenset(active)))
        return result


ANSI_STYLE_MAP = StyleMap(
    {
        StyleTag.EMPHASIS: ("\x1b[3m", "\x1b[23m"),
        StyleTag.STRONG: ("\x1b[1m", "\x1b[22m"),
        StyleTag.TITLE: ("\x1b[1;94m", "\x1b[22;39m"),
        StyleTag.SUBTITLE: ("\x1b[94m", "\x1b[39m"),
    }
)

PLAIN_STYLE_MAP = StyleMap()


@dataclass(frozen=True)
class LayoutOptions:
    paragraph_indent: int = 4
    verse_indent: int = 8
    quote_prefix: str = "  | "
    ornament: str = "* * *"
    author_dash: str = "— "

