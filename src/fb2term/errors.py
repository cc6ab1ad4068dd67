"""Exception hierarchy for fb2term."""

from __future__ import annotations


class Fb2TermError(Exception):
    """Base class for all fb2term errors."""


class MalformedToken(Fb2TermError):
    """A word could not be split into punctuation and letter core."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Cannot decompose token {token!r}.")
        self.token = token


class LayoutError(Fb2TermError):
    """Fatal layout failure; the line log can no longer be trusted."""


class LayoutInvariantViolated(LayoutError):
    def __init__(self, column: int, line_width: int) -> None:
        super().__init__(f"Column {column} exceeds line width {line_width}.")
        self.column = column
        self.line_width = line_width


class StyleStackMismatch(LayoutError):
    def __init__(self, expected: object, found: object) -> None:
        super().__init__(f"Style stack mismatch: expected {expected!r}, found {found!r}.")
        self.expected = expected
        self.found = found


class StreamError(Fb2TermError):
    """The markup source could not be read or parsed."""

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        location = f" at line {line}, column {column}" if line is not None else ""
        super().__init__(f"{message}{location}")
        self.line = line
        self.column = column
