"""
Page through FictionBook documents in the terminal, resuming where you left off.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .bookmarks import BookmarkStore
from .config import DEFAULT_CONFIG_PATH, ReaderConfig, load_config, parse_config
from .errors import Fb2TermError
from .session import ReadingSession


logger = logging.getLogger(__name__)


def _split_option(token: str) -> Tuple[str, str]:
    if "=" not in token:
        raise argparse.ArgumentTypeError("Expected KEY=VALUE format.")
    key, value = token.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Option key cannot be empty.")
    return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read FB2 books in the terminal with hyphenation and bookmarks.")
    parser.add_argument("input_path", type=Path, help="Path to a .fb2 file or a zip archive holding one.")
    parser.add_argument("--width", type=int, help="Line width in columns (default: from config, 80).")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Configuration file to read.")
    parser.add_argument("--lang", help="Hyphenation dictionary, e.g. en_US or ru_RU.")
    parser.add_argument("--no-hyphenate", action="store_true", help="Wrap at word boundaries only.")
    parser.add_argument("--plain", action="store_true", help="Do not emit terminal style sequences.")
    parser.add_argument("--bookmarks", type=Path, help="Bookmark file to use.")
    parser.add_argument("--no-bookmark", action="store_true", help="Neither restore nor save the reading position.")
    parser.add_argument("--dump", action="store_true", help="Write laid-out lines to stdout instead of paging.")
    parser.add_argument("--lines", type=int, help="With --dump, stop after this many lines.")
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        type=_split_option,
        metavar="KEY=VALUE",
        help="Override a configuration value (may repeat).",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging on stderr (repeatable).")
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format="%(name)s - %(levelname)s - %(message)s")


def resolve_config(args: argparse.Namespace) -> ReaderConfig:
    config = load_config(args.config)
    overrides = [f"{key}: {value}" for key, value in args.set]
    if args.width is not None:
        overrides.append(f"width: {args.width}")
    if args.lang:
        overrides.append(f"hyphen_lang: {args.lang}")
    if args.no_hyphenate:
        overrides.append("hyphenate: false")
    if args.plain:
        overrides.append("plain: true")
    if args.bookmarks is not None:
        overrides.append(f"bookmarks_path: {args.bookmarks}")
    return parse_config(overrides, base=config)


def write_dump(session: ReadingSession, limit: Optional[int]) -> None:
    lines = session.window(0, limit) if limit is not None else session.read_all()
    for line in lines:
        sys.stdout.write(line.content + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = resolve_config(args)
    except (OSError, UnicodeDecodeError) as exc:
        sys.stderr.write(f"Cannot read configuration: {exc}\n")
        return 2
    except ValueError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return 2
    store = None if args.no_bookmark or args.dump else BookmarkStore(config.bookmarks_path)
    try:
        session = ReadingSession.open(args.input_path, config, store)
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 2
    except (OSError, Fb2TermError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    try:
        with session:
            if args.dump:
                write_dump(session, args.lines)
            else:
                from .pager import run_pager

                run_pager(session, config.style_map())
    except Fb2TermError as exc:
        logger.error("Layout failed: %s", exc)
        sys.stderr.write(f"{exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
