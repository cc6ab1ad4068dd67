from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from ..errors import StyleStackMismatch
from ..markup import EmptyTag, EndTag, Eof, MarkupEvent, StartTag, Text
from ..models import Alignment, LayoutOptions, Line, PositionKey, StyleMap, StyleTag
from .buffer import LineBuffer
from .engine import LayoutEngine
from .hyphenation import WordBreaker


logger = logging.getLogger(__name__)

SKIP_TAGS = frozenset({"binary", "description"})
INLINE_STYLES = {"emphasis": StyleTag.EMPHASIS, "strong": StyleTag.STRONG}
HEADING_STYLES = {"title": StyleTag.TITLE, "subtitle": StyleTag.SUBTITLE}


class Translator:
    """Drive a LayoutEngine from FB2 markup events, a batch of lines at a time."""

    def __init__(
        self,
        events: Iterable[MarkupEvent],
        *,
        width: int,
        style_map: Optional[StyleMap] = None,
        breaker: Optional[WordBreaker] = None,
        options: Optional[LayoutOptions] = None,
    ) -> None:
        self._events: Iterator[MarkupEvent] = iter(events)
        self.options = options or LayoutOptions()
        self.buffer = LineBuffer(width, style_map)
        self.engine = LayoutEngine(self.buffer, breaker or WordBreaker())
        self.unrecognized_tags: Counter[str] = Counter()
        self._open_elements: List[str] = []
        self._skip_depth = 0
        self._title_depth = 0
        self._first_paragraph = True
        self._open_handlers: Dict[str, Callable[[str], None]] = {
            "p": self._open_paragraph,
            "v": self._open_verse,
            "stanza": self._open_block,
            "poem": self._open_block,
            "section": self._open_section,
            "epigraph": self._open_quote,
            "cite": self._open_quote,
            "emphasis": self._open_style,
            "strong": self._open_style,
            "title": self._open_heading,
            "subtitle": self._open_heading,
            "text-author": self._open_author,
            "binary": self._open_skip,
            "description": self._open_skip,
            "empty-line": self._empty_line,
        }
        self._close_handlers: Dict[str, Callable[[str], None]] = {
            "p": self._close_paragraph,
            "v": self._close_line,
            "stanza": self._close_stanza,
            "poem": self._close_stanza,
            "section": self._close_section,
            "epigraph": self._close_quote,
            "cite": self._close_quote,
            "emphasis": self._close_style,
            "strong": self._close_style,
            "title": self._close_heading,
            "subtitle": self._close_heading,
            "text-author": self._close_author,
            "binary": self._close_skip,
            "description": self._close_skip,
        }

    @property
    def lines(self) -> List[Line]:
        return self.buffer.lines

    @property
    def at_eof(self) -> bool:
        return self.buffer.at_eof

    @property
    def current_position(self) -> PositionKey:
        return self.buffer.position

    @property
    def in_title(self) -> bool:
        return self._title_depth > 0

    def crank(self, count: int) -> int:
        """Lay out until ``count`` more lines are final or the stream ends."""
        start = len(self.lines)
        target = start + count
        while len(self.lines) < target and not self.at_eof:
            self.handle(next(self._events, Eof()))
        return len(self.lines) - start

    request_lines = crank

    def handle(self, event: MarkupEvent) -> None:
        if isinstance(event, Text):
            self._handle_text(event.text)
        elif isinstance(event, StartTag):
            self._open_elements.append(event.name)
            self._start(event.name)
        elif isinstance(event, EndTag):
            if not self._open_elements or self._open_elements[-1] != event.name:
                expected = self._open_elements[-1] if self._open_elements else None
                raise StyleStackMismatch(expected, event.name)
            self._open_elements.pop()
            self._end(event.name)
        elif isinstance(event, EmptyTag):
            self._start(event.name)
            self._end(event.name)
        elif isinstance(event, Eof):
            self.buffer.finish()
            if self.unrecognized_tags:
                logger.debug("Unrecognized tags: %s", dict(self.unrecognized_tags))

    def _start(self, name: str) -> None:
        if self._skip_depth:
            if name in SKIP_TAGS:
                self._skip_depth += 1
            return
        handler = self._open_handlers.get(name)
        if handler is None:
            if name not in self.unrecognized_tags:
                logger.debug("Ignoring tag <%s> for layout", name)
            self.unrecognized_tags[name] += 1
            return
        handler(name)

    def _end(self, name: str) -> None:
        if self._skip_depth and name not in SKIP_TAGS:
            return
        handler = self._close_handlers.get(name)
        if handler is not None:
            handler(name)

    def _handle_text(self, text: str) -> None:
        if self._skip_depth:
            return
        self.buffer.position = self.buffer.position.next_text()
        self.engine.emit(text.upper() if self.in_title else text)

    # Block elements -------------------------------------------------------
    def _open_paragraph(self, _name: str) -> None:
        self.buffer.close_line()
        if not self.in_title and not self._first_paragraph:
            self.buffer.append_text(" " * self.options.paragraph_indent)

    def _close_paragraph(self, _name: str) -> None:
        self.buffer.close_line()
        self._first_paragraph = False

    def _open_verse(self, _name: str) -> None:
        self.buffer.close_line()
        if not self.in_title:
            self.buffer.append_text(" " * self.options.verse_indent)

    def _close_line(self, _name: str) -> None:
        self.buffer.close_line()

    def _open_block(self, _name: str) -> None:
        self.buffer.close_line()

    def _close_stanza(self, _name: str) -> None:
        self.buffer.ensure_blank_line()

    def _open_section(self, _name: str) -> None:
        self.buffer.close_line()
        self._first_paragraph = True

    def _close_section(self, _name: str) -> None:
        self.buffer.ensure_blank_line()
        self.buffer.push_centered(self.options.ornament)
        self.buffer.push_blank()

    def _open_quote(self, name: str) -> None:
        alignment = Alignment.RIGHT if name == "epigraph" else Alignment.LEFT
        self.buffer.push_context(alignment, self.options.quote_prefix)

    def _close_quote(self, _name: str) -> None:
        self.buffer.pop_context()
        self.buffer.ensure_blank_line()

    def _open_author(self, _name: str) -> None:
        self.buffer.push_context(Alignment.RIGHT, self.buffer.prefix)
        self.buffer.append_text(self.options.author_dash)

    def _close_author(self, _name: str) -> None:
        self.buffer.pop_context()

    def _empty_line(self, _name: str) -> None:
        self.buffer.close_line()
        self.buffer.push_blank()

    # Inline styles --------------------------------------------------------
    def _open_style(self, name: str) -> None:
        self.buffer.push_style(INLINE_STYLES[name])

    def _close_style(self, name: str) -> None:
        self.buffer.pop_style(INLINE_STYLES[name])

    def _open_heading(self, name: str) -> None:
        self.buffer.ensure_blank_line()
        self.buffer.push_style(HEADING_STYLES[name])
        self._title_depth += 1

    def _close_heading(self, name: str) -> None:
        self.buffer.pop_style(HEADING_STYLES[name])
        self.buffer.ensure_blank_line()
        self._title_depth -= 1
        self._first_paragraph = True

    # Skipped regions ------------------------------------------------------
    def _open_skip(self, _name: str) -> None:
        self._skip_depth += 1

    def _close_skip(self, _name: str) -> None:
        self._skip_depth -= 1
