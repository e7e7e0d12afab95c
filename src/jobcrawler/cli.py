"""CLI command handlers for the job crawler.

Each public function corresponds to a CLI subcommand and encapsulates
the wiring, orchestration, and output for that command.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import TYPE_CHECKING

from jobcrawler.adapters import AdapterRegistry
from jobcrawler.config import DEFAULT_SETTINGS_PATH, Settings, load_settings
from jobcrawler.logging import configure_file_logging
from jobcrawler.text import extract_domain, format_salary

if TYPE_CHECKING:
    from jobcrawler.storage.store import PersistedListing


def _load(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    if settings.logging.file_logging:
        configure_file_logging(settings.logging.log_dir)
    return settings


def _print_listing(index: int, listing: PersistedListing) -> None:
    salary = format_salary(listing.salary_text) or "salary n/a"
    print(f"  {index:>3}. {listing.title}")
    print(f"       {listing.company} · {listing.location} · {salary}")
    print(f"       [{listing.source} / {extract_domain(listing.url)}] {listing.url}")


def handle_boards() -> None:
    """List all registered adapter board names."""
    boards = AdapterRegistry.list_registered()
    if not boards:
        print("No adapters registered.")
        return
    print("Registered adapters:")
    for name in sorted(boards):
        print(f"  - {name}")


def handle_crawl(args: argparse.Namespace) -> None:
    """Crawl every configured board, save results, and report matches."""
    from jobcrawler.pipeline.runner import PipelineRunner

    settings = _load(args)
    runner = PipelineRunner(settings)

    result = asyncio.run(runner.run(args.title, args.location, args.min_salary))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    if not result.success:
        print(f"\nCrawl failed: {result.error}")
        return

    print(f"\n{'=' * 60}")
    print(" Crawl Summary")
    print(f"{'=' * 60}")
    print(f" Title:           {args.title}")
    print(f" Locations:       {', '.join(args.location)}")
    print(f" Boards:          {', '.join(settings.crawler.boards)}")
    print(f" Jobs scraped:    {result.jobs_scraped}")
    print(f" Jobs saved:      {result.jobs_saved}")
    print(f" Matching jobs:   {result.matching_jobs}")
    print(f"{'=' * 60}\n")

    for i, listing in enumerate(result.jobs, 1):
        _print_listing(i, listing)


def handle_search(args: argparse.Namespace) -> None:
    """Query previously saved listings without crawling."""
    from jobcrawler.pipeline.crawler import CrawlRequest
    from jobcrawler.storage.store import ListingStore

    settings = _load(args)
    request = CrawlRequest.create(args.title, args.location, args.min_salary)
    store = ListingStore(settings.storage.db_path)
    matches = store.search(request.title, request.locations, request.min_salary)

    if not matches:
        print("No saved listings match. Run 'crawl' to collect some.")
        return

    print(f"{len(matches)} saved listing(s) of {store.count()} match:\n")
    for i, listing in enumerate(matches, 1):
        _print_listing(i, listing)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="jobcrawler",
        description="Low-profile job listing crawler for Indeed and LinkedIn",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_SETTINGS_PATH),
        metavar="PATH",
        help=f"Settings file (default: {DEFAULT_SETTINGS_PATH})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # -- crawl ---------------------------------------------------------------
    crawl_p = sub.add_parser("crawl", help="Crawl configured boards and save listings")
    crawl_p.add_argument("title", type=str, help="Job title to search for")
    crawl_p.add_argument(
        "--location",
        action="append",
        required=True,
        help="Location to search (repeatable; searched in the given order)",
    )
    crawl_p.add_argument(
        "--min-salary",
        type=float,
        default=0,
        metavar="N",
        help="Exclude matches whose annual salary is below N",
    )
    crawl_p.add_argument(
        "--json",
        action="store_true",
        help="Print the run result as JSON",
    )

    # -- search --------------------------------------------------------------
    search_p = sub.add_parser("search", help="Search saved listings without crawling")
    search_p.add_argument("title", type=str, help="Job title substring")
    search_p.add_argument(
        "--location",
        action="append",
        required=True,
        help="Location to match (repeatable)",
    )
    search_p.add_argument(
        "--min-salary",
        type=float,
        default=0,
        metavar="N",
        help="Exclude listings whose annual salary is below N",
    )

    # -- boards --------------------------------------------------------------
    sub.add_parser("boards", help="List registered adapters")

    return parser
