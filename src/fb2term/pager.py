from __future__ import annotations

import curses
from typing import Dict, List, Tuple

from .models import Line, StyleMap, StyleTag
from .session import ReadingSession


SCROLL_DOWN: Tuple[int, ...] = (curses.KEY_DOWN, ord("j"), 10, 13)
SCROLL_UP: Tuple[int, ...] = (curses.KEY_UP, ord("k"))
PAGE_DOWN: Tuple[int, ...] = (curses.KEY_NPAGE, ord(" "))
PAGE_UP: Tuple[int, ...] = (curses.KEY_PPAGE, ord("b"))
TO_START: Tuple[int, ...] = (curses.KEY_HOME, ord("g"))
TO_END: Tuple[int, ...] = (curses.KEY_END, ord("G"))
QUIT: Tuple[int, ...] = (ord("q"), 27)


class Pager:
    """Window over a session's lines, pulling more layout as it moves."""

    def __init__(self, session: ReadingSession, height: int) -> None:
        self.session = session
        self.height = max(1, height)

    @property
    def top(self) -> int:
        return self.session.top

    def visible(self) -> List[Line]:
        return self.session.window(self.top, self.height)

    def scroll(self, count: int) -> None:
        if count > 0:
            self.session.ensure_lines(self.top + count + self.height)
        last = max(0, len(self.session.lines) - 1)
        self.session.top = max(0, min(self.top + count, last))

    def page(self, count: int) -> None:
        self.scroll(count * self.height)

    def to_start(self) -> None:
        self.session.top = 0

    def to_end(self) -> None:
        lines = self.session.read_all()
        self.session.top = max(0, len(lines) - self.height)


def _style_attributes() -> Dict[StyleTag, int]:
    try:
        italic = curses.A_ITALIC
    except AttributeError:
        italic = curses.A_UNDERLINE
    return {
        StyleTag.EMPHASIS: italic,
        StyleTag.STRONG: curses.A_BOLD,
        StyleTag.TITLE: curses.A_BOLD,
        StyleTag.SUBTITLE: curses.A_BOLD,
    }


def _draw(screen, pager: Pager, style_map: StyleMap) -> None:
    rows, cols = screen.getmaxyx()
    attributes = _style_attributes()
    screen.erase()
    lines = pager.visible()
    for row in range(min(pager.height, rows)):
        if row >= len(lines):
            screen.addnstr(row, 0, "~", cols - 1)
            continue
        column = 0
        for text, styles in style_map.segments(lines[row].content):
            if column >= cols - 1:
                break
            attr = curses.A_NORMAL
            for style in styles:
                attr |= attributes[style]
            screen.addnstr(row, column, text, cols - 1 - column, attr)
            column += len(text)
    screen.refresh()


def run_pager(session: ReadingSession, style_map: StyleMap) -> None:
    """Interactive loop; returns when the reader quits."""

    def loop(screen) -> None:
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        rows, _ = screen.getmaxyx()
        pager = Pager(session, rows)
        while True:
            _draw(screen, pager, style_map)
            key = screen.getch()
            if key in QUIT:
                return
            if key in SCROLL_DOWN:
                pager.scroll(1)
            elif key in SCROLL_UP:
                pager.scroll(-1)
            elif key in PAGE_DOWN:
                pager.page(1)
            elif key in PAGE_UP:
                pager.page(-1)
            elif key in TO_START:
                pager.to_start()
            elif key in TO_END:
                pager.to_end()
            elif key == curses.KEY_RESIZE:
                pager.height = max(1, screen.getmaxyx()[0])

    curses.wrapper(loop)
