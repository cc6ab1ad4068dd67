from __future__ import annotations

import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from .models import ANSI_STYLE_MAP, PLAIN_STYLE_MAP, LayoutOptions, StyleMap


CONFIG_LINE_PATTERN = re.compile(r"^\s*(?P<key>[A-Za-z_][\w-]*)\s*:\s*(?P<value>.*?)\s*$")
DEFAULT_CONFIG_PATH = Path("~/.config/fb2term/config")
DEFAULT_BOOKMARKS_PATH = "~/.local/share/fb2term/bookmarks.json"
MIN_WIDTH = 20


@dataclass
class ReaderConfig:
    width: int = 80
    hyphenate: bool = True
    hyphen_lang: str = "en_US"
    quote_prefix: str = "  | "
    ornament: str = "* * *"
    paragraph_indent: int = 4
    verse_indent: int = 8
    plain: bool = False
    bookmarks_path: str = DEFAULT_BOOKMARKS_PATH
    batch_size: int = 64

    def style_map(self) -> StyleMap:
        return PLAIN_STYLE_MAP if self.plain else ANSI_STYLE_MAP

    def layout_options(self) -> LayoutOptions:
        return LayoutOptions(
            paragraph_indent=self.paragraph_indent,
            verse_indent=self.verse_indent,
            quote_prefix=self.quote_prefix,
            ornament=self.ornament,
        )


def _parse_int(value: Optional[str], default: int = 0) -> int:
    if value is None:
        return default
    match = re.search(r"-?\d+", value)
    if not match:
        return default
    try:
        return int(match.group())
    except ValueError:
        return default


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"true", "yes", "1", "on"}:
        return True
    if lowered in {"false", "no", "0", "off"}:
        return False
    return default


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def read_settings(lines: Iterable[str]) -> Dict[str, str]:
    settings: Dict[str, str] = {}
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = CONFIG_LINE_PATTERN.match(line)
        if match:
            settings[match.group("key").replace("-", "_").lower()] = match.group("value")
    return settings


def parse_config(lines: Iterable[str], base: Optional[ReaderConfig] = None) -> ReaderConfig:
    """Apply ``key: value`` lines on top of ``base`` (defaults if omitted)."""
    base = base or ReaderConfig()
    settings = read_settings(lines)
    quote_prefix = settings.get("quote_prefix")
    ornament = settings.get("ornament")
    hyphen_lang = settings.get("hyphen_lang")
    bookmarks_path = settings.get("bookmarks_path")
    config = replace(
        base,
        width=max(MIN_WIDTH, _parse_int(settings.get("width"), base.width)),
        hyphenate=_parse_bool(settings.get("hyphenate"), base.hyphenate),
        hyphen_lang=(hyphen_lang or base.hyphen_lang).strip() or base.hyphen_lang,
        quote_prefix=_unquote(quote_prefix) if quote_prefix is not None else base.quote_prefix,
        ornament=_unquote(ornament) if ornament else base.ornament,
        paragraph_indent=max(0, _parse_int(settings.get("paragraph_indent"), base.paragraph_indent)),
        verse_indent=max(0, _parse_int(settings.get("verse_indent"), base.verse_indent)),
        plain=_parse_bool(settings.get("plain"), base.plain),
        bookmarks_path=_unquote(bookmarks_path) if bookmarks_path else base.bookmarks_path,
        batch_size=max(1, _parse_int(settings.get("batch_size"), base.batch_size)),
    )
    if len(config.quote_prefix) >= config.width:
        raise ValueError(f"quote_prefix {config.quote_prefix!r} must be shorter than width {config.width}.")
    return config


def load_config(path: Union[str, Path, None] = None) -> ReaderConfig:
    config_path = Path(path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.exists():
        return ReaderConfig()
    with config_path.open("r", encoding="utf-8") as handle:
        return parse_config(handle.readlines())
