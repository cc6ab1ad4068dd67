from __future__ import annotations

import logging
import re
from typing import List, Optional, Protocol, Set, Tuple

import pyphen

from ..errors import MalformedToken


logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"^(?P<leading>\W*)(?P<core>\w(?:.*\w)?)(?P<trailing>\W*)$", re.DOTALL)

Candidate = Tuple[str, str, str]


class HyphenationOracle(Protocol):
    def hyphenate(self, word: str) -> Set[int]:
        ...


class PyphenOracle:
    def __init__(self, lang: str = "en_US") -> None:
        try:
            self._dic = pyphen.Pyphen(lang=lang)
        except KeyError as exc:
            raise ValueError(f"No hyphenation dictionary for language '{lang}'.") from exc
        self.lang = lang

    def hyphenate(self, word: str) -> Set[int]:
        return set(self._dic.positions(word))


class NullOracle:
    def hyphenate(self, word: str) -> Set[int]:
        return set()


def split_punctuation(token: str) -> Tuple[str, str, str]:
    match = TOKEN_PATTERN.match(token)
    if match is None:
        raise MalformedToken(token)
    return match.group("leading"), match.group("core"), match.group("trailing")


class WordBreaker:
    """Offer hyphenation points for the letter core of a word."""

    def __init__(self, oracle: Optional[HyphenationOracle] = None) -> None:
        self.oracle = oracle if oracle is not None else NullOracle()

    def decompose(self, token: str) -> Tuple[str, str, str]:
        try:
            return split_punctuation(token)
        except MalformedToken:
            logger.debug("Treating %r as an opaque token", token)
            return "", token, ""

    def break_candidates(self, word: str) -> List[Candidate]:
        if len(word) < 2:
            return []
        offsets = {offset for offset in self.oracle.hyphenate(word) if 0 < offset < len(word)}
        offsets.update(index + 1 for index, char in enumerate(word[:-1]) if char == "-" and index > 0)
        candidates: List[Candidate] = []
        for offset in sorted(offsets):
            head, tail = word[:offset], word[offset:]
            hyphen = "" if head.endswith("-") else "-"
            candidates.append((head, hyphen, tail))
        return candidates
