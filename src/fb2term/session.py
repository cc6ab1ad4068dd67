from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Union

from .bookmarks import BookmarkStore, advance_to, derive_bookmark, document_identity, locate_line
from .config import ReaderConfig
from .errors import Fb2TermError
from .layout import NullOracle, PyphenOracle, Translator, WordBreaker
from .markup import iter_events, open_document
from .models import Line, PositionKey


logger = logging.getLogger(__name__)


class ReadingSession:
    """One open document: its layout pipeline, reading position and bookmark."""

    def __init__(
        self,
        identity: str,
        translator: Translator,
        *,
        store: Optional[BookmarkStore] = None,
        batch_size: int = 64,
        stream: Optional[BinaryIO] = None,
    ) -> None:
        self.identity = identity
        self.translator = translator
        self.store = store
        self.batch_size = batch_size
        self.top = 0
        self.failed = False
        self._stream = stream

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        config: Optional[ReaderConfig] = None,
        store: Optional[BookmarkStore] = None,
    ) -> ReadingSession:
        config = config or ReaderConfig()
        oracle = PyphenOracle(config.hyphen_lang) if config.hyphenate else NullOracle()
        stream = open_document(path)
        translator = Translator(
            iter_events(stream),
            width=config.width,
            style_map=config.style_map(),
            breaker=WordBreaker(oracle),
            options=config.layout_options(),
        )
        session = cls(
            document_identity(path),
            translator,
            store=store,
            batch_size=config.batch_size,
            stream=stream,
        )
        try:
            session.resume()
        except Exception:
            session.release()
            raise
        return session

    def __enter__(self) -> ReadingSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if isinstance(exc, Fb2TermError):
            self.failed = True
        self.close()

    @property
    def lines(self) -> List[Line]:
        return self.translator.lines

    @property
    def at_eof(self) -> bool:
        return self.translator.at_eof

    @contextmanager
    def _tracking(self) -> Iterator[None]:
        try:
            yield
        except Fb2TermError:
            self.failed = True
            raise

    def resume(self) -> None:
        saved = self.store.load(self.identity) if self.store is not None else None
        with self._tracking():
            if saved is None:
                self.translator.crank(self.batch_size)
                self.top = 0
                return
            logger.debug("Resuming %s at %s", self.identity, saved)
            advance_to(self.translator, saved, self.batch_size)
            self.translator.crank(self.batch_size)
            self.top = locate_line(self.lines, saved)

    def request_lines(self, count: int) -> int:
        with self._tracking():
            return self.translator.crank(count)

    def ensure_lines(self, count: int) -> None:
        while len(self.lines) < count and not self.at_eof:
            self.request_lines(max(count - len(self.lines), 1))

    def window(self, start: int, height: int) -> List[Line]:
        self.ensure_lines(start + height)
        return self.lines[start:start + height]

    def read_all(self) -> List[Line]:
        while not self.at_eof:
            self.request_lines(self.batch_size)
        return self.lines

    def bookmark(self) -> PositionKey:
        return derive_bookmark(self.lines, self.top)

    def close(self) -> None:
        if self.failed:
            logger.warning("Not saving bookmark for %s after a layout failure", self.identity)
        elif self.store is not None:
            self.store.save(self.identity, self.bookmark())
        self.release()

    def release(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
