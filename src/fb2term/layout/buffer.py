from __future__ import annotations

from typing import List, Optional, Tuple

from ..errors import LayoutError, LayoutInvariantViolated, StyleStackMismatch
from ..models import BLANK_LINE, Alignment, Line, PositionKey, StyleMap, StyleTag, ZERO_KEY


Fragment = Tuple[str, bool]


class LineBuffer:
    """In-progress output line plus the append-only log of finished lines.

    Columns count visible characters only; style markers are zero width.
    Each finished line is self-contained: styles still open when it closes
    are closed at its end and reopened at the start of the next line.
    """

    def __init__(self, width: int, style_map: Optional[StyleMap] = None) -> None:
        if width < 1:
            raise ValueError("Line width must be positive.")
        self.width = width
        self.style_map = style_map or StyleMap()
        self.lines: List[Line] = []
        self.styles: List[StyleTag] = []
        self.position: PositionKey = ZERO_KEY
        self.at_eof = False
        self._contexts: List[Tuple[Alignment, str]] = [(Alignment.LEFT, "")]
        self._fragments: List[Fragment] = []
        self.column = 0
        self.has_words = False
        self.ends_with_space = False
        self._line_position: Optional[PositionKey] = None

    # Context --------------------------------------------------------------
    @property
    def alignment(self) -> Alignment:
        return self._contexts[-1][0]

    @property
    def prefix(self) -> str:
        return self._contexts[-1][1]

    @property
    def line_width(self) -> int:
        return self.width - len(self.prefix)

    @property
    def remaining(self) -> int:
        return self.line_width - self.column

    @property
    def pending_line(self) -> str:
        return "".join(text for text, _ in self._fragments)

    def push_context(self, alignment: Alignment, prefix: str) -> None:
        if len(prefix) >= self.width:
            raise LayoutError(f"Prefix {prefix!r} leaves no room on a {self.width}-column line.")
        self.close_line()
        self._contexts.append((alignment, prefix))

    def pop_context(self) -> None:
        if len(self._contexts) == 1:
            raise LayoutError("No alignment context to restore.")
        self.close_line()
        self._contexts.pop()

    # Pending line ---------------------------------------------------------
    def append_word(self, text: str, position: PositionKey) -> None:
        self._append_visible(text)
        self.has_words = True
        self.position = position
        self._line_position = position

    def append_space(self) -> None:
        self._append_visible(" ")

    def append_text(self, text: str) -> None:
        """Visible text that is not part of the source (indents, dashes)."""
        self._append_visible(text)

    def append_marker(self, marker: str) -> None:
        if marker:
            self._fragments.append((marker, False))

    def push_style(self, style: StyleTag) -> None:
        self.styles.append(style)
        self.append_marker(self.style_map.open_marker(style))

    def pop_style(self, style: StyleTag) -> None:
        if not self.styles or self.styles[-1] is not style:
            raise StyleStackMismatch(self.styles[-1] if self.styles else None, style)
        self.append_marker(self.style_map.close_marker(style))
        self.styles.pop()

    def _append_visible(self, text: str) -> None:
        if not text:
            return
        column = self.column + len(text)
        if column > self.line_width:
            raise LayoutInvariantViolated(column, self.line_width)
        self._fragments.append((text, True))
        self.column = column
        self.ends_with_space = text.endswith(" ")

    # Finishing lines ------------------------------------------------------
    def break_line(self) -> None:
        """Finish the pending line unconditionally."""
        self._trim_trailing_space()
        closers = self._closers()
        pad = self._alignment_pad()
        content = self.prefix + " " * pad + self.pending_line + closers
        width = len(self.prefix) + pad + self.column
        if width > self.width:
            raise LayoutInvariantViolated(width, self.width)
        self.lines.append(Line(content, self._line_position if self.has_words else None, width))
        self._reset_pending()

    def close_line(self) -> None:
        """Finish the pending line if it holds words, otherwise discard it."""
        if self.has_words:
            self.break_line()
        else:
            self._reset_pending()

    def push_blank(self) -> None:
        self.lines.append(BLANK_LINE)

    def push_centered(self, text: str) -> None:
        room = self.line_width
        text = text[:room]
        pad = (room - len(text)) // 2
        self.lines.append(Line(self.prefix + " " * pad + text, None, len(self.prefix) + pad + len(text)))

    def ensure_blank_line(self) -> None:
        self.close_line()
        if self.lines and self.lines[-1].content.strip():
            self.push_blank()

    def finish(self) -> None:
        self.close_line()
        self.at_eof = True
        if self.styles:
            raise StyleStackMismatch(None, self.styles[-1])

    def _closers(self) -> str:
        """Close markers for open styles; styles opened after the last visible text are dropped instead."""
        closers: List[str] = []
        for style in reversed(self.styles):
            opener = self.style_map.open_marker(style)
            if not closers and opener and self._fragments and self._fragments[-1] == (opener, False):
                self._fragments.pop()
                continue
            closers.append(self.style_map.close_marker(style))
        return "".join(closers)

    def _alignment_pad(self) -> int:
        free = max(0, self.line_width - self.column)
        if self.alignment is Alignment.CENTER:
            return free // 2
        if self.alignment is Alignment.RIGHT:
            return free
        return 0

    def _trim_trailing_space(self) -> None:
        for index in range(len(self._fragments) - 1, -1, -1):
            text, visible = self._fragments[index]
            if not visible:
                continue
            trimmed = text.rstrip(" ")
            self.column -= len(text) - len(trimmed)
            self._fragments[index] = (trimmed, True)
            if trimmed:
                return

    def _reset_pending(self) -> None:
        self._fragments = []
        self.column = 0
        self.has_words = False
        self.ends_with_space = False
        self._line_position = None
        for style in self.styles:
            self.append_marker(self.style_map.open_marker(style))
