"""FB2 markup events and an incremental expat-based tokenizer."""

from __future__ import annotations

import io
import logging
import zipfile
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Deque, Iterator, List, Optional, Union
from xml.parsers import expat

from .errors import StreamError


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StartTag:
    name: str


@dataclass(frozen=True)
class EndTag:
    name: str


@dataclass(frozen=True)
class EmptyTag:
    name: str


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Eof:
    pass


MarkupEvent = Union[StartTag, EndTag, EmptyTag, Text, Eof]


class _EventCollector:
    """Turn expat callbacks into ordered events.

    Character data is held until the next tag so a text node is always one
    event. A start tag is held until something follows it, which lets an
    element with no content at all be reported as a single EmptyTag.
    """

    def __init__(self) -> None:
        self.ready: Deque[MarkupEvent] = deque()
        self._text: List[str] = []
        self._pending_start: Optional[str] = None

    def start(self, name: str, _attributes: object) -> None:
        self._release_start()
        self._flush_text()
        self._pending_start = name

    def end(self, name: str) -> None:
        if self._pending_start == name:
            self._pending_start = None
            self.ready.append(EmptyTag(name))
            return
        self._release_start()
        self._flush_text()
        self.ready.append(EndTag(name))

    def characters(self, data: str) -> None:
        self._release_start()
        self._text.append(data)

    def flush(self) -> None:
        self._release_start()
        self._flush_text()

    def drain(self) -> Iterator[MarkupEvent]:
        while self.ready:
            yield self.ready.popleft()

    def _release_start(self) -> None:
        if self._pending_start is not None:
            self.ready.append(StartTag(self._pending_start))
            self._pending_start = None

    def _flush_text(self) -> None:
        if self._text:
            self.ready.append(Text("".join(self._text)))
            self._text = []


def iter_events(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[MarkupEvent]:
    """Read ``stream`` forward once, yielding events as they become final."""
    collector = _EventCollector()
    parser = expat.ParserCreate()
    parser.buffer_text = True
    parser.StartElementHandler = collector.start
    parser.EndElementHandler = collector.end
    parser.CharacterDataHandler = collector.characters
    while True:
        try:
            chunk = stream.read(chunk_size)
        except OSError as exc:
            raise StreamError(f"Failed to read document: {exc}") from exc
        try:
            parser.Parse(chunk, not chunk)
        except expat.ExpatError as exc:
            raise StreamError(expat.ErrorString(exc.code), line=exc.lineno, column=exc.offset) from exc
        yield from collector.drain()
        if not chunk:
            break
    collector.flush()
    yield from collector.drain()
    yield Eof()


def open_document(path: Union[str, Path]) -> BinaryIO:
    """Open a ``.fb2`` file, or the first ``.fb2`` member of a zip archive."""
    path = Path(path)
    if not zipfile.is_zipfile(path):
        return path.open("rb")
    try:
        with zipfile.ZipFile(path) as archive:
            members = [name for name in archive.namelist() if name.lower().endswith(".fb2")]
            if not members:
                raise StreamError(f"Archive '{path}' contains no .fb2 document.")
            logger.debug("Reading %s from archive %s", members[0], path)
            return io.BytesIO(archive.read(members[0]))
    except zipfile.BadZipFile as exc:
        raise StreamError(f"Archive '{path}' is corrupt: {exc}") from exc
