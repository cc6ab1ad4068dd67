"""
Pytest configuration for fb2term
"""

import io
import logging
import sys

import pytest

from fb2term.layout import LineBuffer, LayoutEngine, Translator, WordBreaker
from fb2term.markup import iter_events
from fb2term.models import PositionKey, StyleMap, StyleTag


TEST_STYLE_MAP = StyleMap(
    {
        StyleTag.EMPHASIS: ("<i>", "</i>"),
        StyleTag.STRONG: ("<b>", "</b>"),
        StyleTag.TITLE: ("<t>", "</t>"),
        StyleTag.SUBTITLE: ("<s>", "</s>"),
    }
)


class FakeOracle:
    """Hyphenation oracle answering from a fixed table."""

    def __init__(self, table=None):
        self.table = table or {}

    def hyphenate(self, word):
        return set(self.table.get(word, ()))


def fb2(body):
    """Wrap body markup in a minimal FictionBook document."""
    return f"<FictionBook><body>{body}</body></FictionBook>"


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))
    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)
    yield
    root_logger.handlers.clear()


@pytest.fixture
def engine_for():
    """Build a LayoutEngine over a fresh buffer positioned at the first text node."""

    def build(width, table=None):
        buffer = LineBuffer(width, TEST_STYLE_MAP)
        buffer.position = PositionKey(1, 0)
        return LayoutEngine(buffer, WordBreaker(FakeOracle(table)))

    return build


@pytest.fixture
def translator_for():
    """Build a Translator over an XML string without running it."""

    def build(xml, width=40, table=None, options=None, chunk_size=65536):
        events = iter_events(io.BytesIO(xml.encode("utf-8")), chunk_size=chunk_size)
        return Translator(
            events,
            width=width,
            style_map=TEST_STYLE_MAP,
            breaker=WordBreaker(FakeOracle(table)),
            options=options,
        )

    return build


@pytest.fixture
def layout(translator_for):
    """Lay out a whole XML document and return the translator."""

    def run(xml, **kwargs):
        translator = translator_for(xml, **kwargs)
        while not translator.at_eof:
            translator.crank(16)
        return translator

    return run
