"""Resume support: mapping saved positions to lines and persisting them."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .models import Line, PositionKey, ZERO_KEY


logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 64


def advance_to(translator, target: PositionKey, batch_size: int = DEFAULT_BATCH_SIZE) -> int:
    """Replay layout until ``target`` has been reached or the stream ends.

    Returns the number of finalized lines afterwards.
    """
    while not translator.at_eof and translator.current_position < target:
        translator.crank(batch_size)
    return len(translator.lines)


def locate_line(lines: Sequence[Line], target: PositionKey) -> int:
    """Index of the last line positioned at or before ``target``.

    Lines sharing that position resolve to the first of them, so a resumed
    view never starts below the line it was saved from. Returns 0 when no
    line qualifies.
    """
    best_index = 0
    best: Optional[PositionKey] = None
    for index, line in enumerate(lines):
        position = line.position
        if position is None:
            continue
        if position > target:
            break
        if best is None or position > best:
            best = position
            best_index = index
    return best_index


def derive_bookmark(lines: Sequence[Line], top: int) -> PositionKey:
    if not lines:
        return ZERO_KEY
    for index in range(min(top, len(lines) - 1), -1, -1):
        position = lines[index].position
        if position is not None:
            return position
    return ZERO_KEY


def document_identity(path: Union[str, Path]) -> str:
    return str(Path(path).expanduser().resolve())


class BookmarkStore:
    """JSON file of ``{identity: [text_index, word_index]}``."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def load(self, identity: str) -> Optional[PositionKey]:
        entry = self._read().get(identity)
        if entry is None:
            return None
        if (
            not isinstance(entry, list)
            or len(entry) != 2
            or not all(type(value) is int and value >= 0 for value in entry)
        ):
            logger.warning("Ignoring malformed bookmark for %s: %r", identity, entry)
            return None
        return PositionKey(entry[0], entry[1])

    def save(self, identity: str, position: PositionKey) -> None:
        data = self._read()
        data[identity] = [position.text_index, position.word_index]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".bookmarks-", suffix=".json")
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as temp:
                json.dump(data, temp, indent=2, sort_keys=True)
            os.replace(temp_name, self.path)
        except BaseException:
            os.unlink(temp_name)
            raise
        logger.debug("Saved bookmark %s for %s", position, identity)

    def _read(self) -> Dict[str, List[int]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Bookmark file %s is not valid JSON (%s); starting fresh", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Bookmark file %s does not hold an object; starting fresh", self.path)
            return {}
        return data
