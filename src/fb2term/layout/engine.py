from __future__ import annotations

from ..models import PositionKey
from .buffer import LineBuffer
from .hyphenation import WordBreaker


class LayoutEngine:
    """Word and hyphen aware wrapping of text runs into a LineBuffer."""

    def __init__(self, buffer: LineBuffer, breaker: WordBreaker) -> None:
        self.buffer = buffer
        self.breaker = breaker

    def emit(self, text: str) -> None:
        if not text or text.isspace():
            return
        buffer = self.buffer
        if text[0].isspace() and self._can_space():
            buffer.append_space()
        for index, word in enumerate(text.split()):
            position = buffer.position.with_word(index)
            self._place(word, position, first_in_run=index == 0)
        if text[-1].isspace() and self._can_space():
            buffer.append_space()

    def _can_space(self) -> bool:
        buffer = self.buffer
        return buffer.column > 0 and not buffer.ends_with_space and buffer.remaining > 0

    def _separator(self, first_in_run: bool) -> str:
        buffer = self.buffer
        if first_in_run or buffer.column == 0 or buffer.ends_with_space:
            return ""
        return " "

    def _place(self, word: str, position: PositionKey, *, first_in_run: bool) -> None:
        buffer = self.buffer
        separator = self._separator(first_in_run)
        if len(separator) + len(word) <= buffer.remaining:
            buffer.append_word(separator + word, position)
            return
        if self._place_hyphenated(word, separator, position):
            return
        # A word that fits an empty line goes there whole; an indent or dash
        # with no words after it is dropped with the old line.
        if buffer.has_words or len(word) <= buffer.line_width:
            buffer.close_line()
            self._place(word, position, first_in_run=True)
            return
        self._force_split(word, position)

    def _place_hyphenated(self, word: str, separator: str, position: PositionKey) -> bool:
        buffer = self.buffer
        leading, core, trailing = self.breaker.decompose(word)
        for head, hyphen, tail in reversed(self.breaker.break_candidates(core)):
            piece = separator + leading + head + hyphen
            if len(piece) > buffer.remaining:
                continue
            buffer.append_word(piece, position)
            buffer.break_line()
            self._place(tail + trailing, position, first_in_run=True)
            return True
        return False

    def _force_split(self, word: str, position: PositionKey) -> None:
        # Every chunk shares the word's key; sub-word positions are not tracked.
        buffer = self.buffer
        while word:
            room = buffer.remaining
            if room <= 0:
                buffer.break_line()
                continue
            chunk, word = word[:room], word[room:]
            buffer.append_word(chunk, position)
            buffer.break_line()
