"""CLI entry point for the job crawler."""

from __future__ import annotations

import sys

from jobcrawler.cli import build_parser, handle_boards, handle_crawl, handle_search
from jobcrawler.errors import ActionableError
from jobcrawler.logging import set_verbose


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    try:
        if args.command == "crawl":
            handle_crawl(args)
        elif args.command == "search":
            handle_search(args)
        elif args.command == "boards":
            handle_boards()
    except ActionableError as exc:
        print(f"Error: {exc.error}", file=sys.stderr)
        if exc.suggestion:
            print(f"Suggestion: {exc.suggestion}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
