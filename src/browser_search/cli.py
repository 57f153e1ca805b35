"""Command-line entry point: `browser-search [bookmarks|history|all] [query]`."""

from __future__ import annotations

import argparse
import logging
import sys

from browser_search.alfred import render
from browser_search.config import SearchConfig
from browser_search.engine import BrowserSearch
from browser_search.exceptions import ConfigParseError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="browser-search",
        description="Search browser bookmarks and history.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="all",
        help="bookmarks, history, or anything else for both",
    )
    parser.add_argument("query", nargs="?", default="", help="search query")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = SearchConfig.from_env()
    except ConfigParseError as e:
        print(f"browser-search: {e}", file=sys.stderr)
        return 1

    searcher = BrowserSearch(config)
    results = searcher.search(
        args.query,
        include_bookmarks=args.command != "history",
        include_history=args.command != "bookmarks",
    )
    print(render(results, show_favicon=config.show_favicon))
    return 0


if __name__ == "__main__":
    sys.exit(main())
