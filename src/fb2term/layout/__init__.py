"""Incremental hyphenation-aware layout of FB2 markup."""

from .buffer import LineBuffer
from .engine import LayoutEngine
from .hyphenation import HyphenationOracle, NullOracle, PyphenOracle, WordBreaker, split_punctuation
from .translator import Translator

__all__ = [
    "HyphenationOracle",
    "LayoutEngine",
    "LineBuffer",
    "NullOracle",
    "PyphenOracle",
    "Translator",
    "WordBreaker",
    "split_punctuation",
]
