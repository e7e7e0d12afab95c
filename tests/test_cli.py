"""CLI handler tests — parser construction, command wiring, output formatting.

Maps to BDD specs: TestParserConstruction, TestBoardsCommand, TestCrawlCommand,
TestSearchCommand, TestErrorExit
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_listing
from jobcrawler.__main__ import main
from jobcrawler.cli import build_parser, handle_boards, handle_crawl, handle_search
from jobcrawler.config import Settings, StorageConfig
from jobcrawler.errors import ActionableError
from jobcrawler.pipeline.runner import RunResult
from jobcrawler.storage.store import ListingStore

if TYPE_CHECKING:
    from pathlib import Path


def _settings(tmp_path: Path) -> Settings:
    return Settings(storage=StorageConfig(db_path=str(tmp_path / "listings.db")))


# ---------------------------------------------------------------------------
# TestParserConstruction
# ---------------------------------------------------------------------------


class TestParserConstruction:
    """
    REQUIREMENT: The command line exposes crawl, search and boards.

    WHO: The operator at a terminal; cron jobs
    WHAT: 'crawl' takes a title, one or more --location and optional
          --min-salary/--json; 'search' takes the same filters; --config
          and --verbose are global
    WHY: Repeatable --location keeps multi-city crawls one command
    """

    def test_crawl_with_repeated_locations(self) -> None:
        args = build_parser().parse_args(
            ["crawl", "data engineer", "--location", "Remote", "--location", "Austin, TX", "--min-salary", "90000"]
        )

        assert args.command == "crawl"
        assert args.title == "data engineer"
        assert args.location == ["Remote", "Austin, TX"]
        assert args.min_salary == 90_000
        assert args.json is False

    def test_global_options(self) -> None:
        args = build_parser().parse_args(["--config", "alt.toml", "--verbose", "boards"])

        assert args.config == "alt.toml"
        assert args.verbose is True
        assert args.command == "boards"

    def test_config_defaults_to_project_settings(self) -> None:
        args = build_parser().parse_args(["boards"])
        assert args.config.endswith("settings.toml")

    def test_crawl_requires_a_location(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["crawl", "engineer"])

    def test_command_is_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# ---------------------------------------------------------------------------
# TestBoardsCommand
# ---------------------------------------------------------------------------


class TestBoardsCommand:
    """The boards command lists every registered adapter."""

    def test_lists_registered_boards(self, capsys: pytest.CaptureFixture[str]) -> None:
        handle_boards()
        out = capsys.readouterr().out

        assert "Registered adapters:" in out
        assert "- indeed" in out
        assert "- linkedin" in out


# ---------------------------------------------------------------------------
# TestCrawlCommand
# ---------------------------------------------------------------------------


class TestCrawlCommand:
    """
    REQUIREMENT: 'crawl' runs the pipeline and prints a summary or JSON.

    WHO: The operator; scripts consuming --json
    WHAT: The runner receives the title, locations and salary floor; the
          summary shows the three counts and each match with compact
          salary and site; --json prints RunResult.to_dict(); a failed run
          prints its reason
    WHY: The terminal output is the only result most operators read
    """

    def _run(self, tmp_path: Path, argv: list[str], result: RunResult) -> MagicMock:
        runner_cls = MagicMock()
        runner_cls.return_value.run = AsyncMock(return_value=result)
        args = build_parser().parse_args(argv)
        with (
            patch("jobcrawler.cli.load_settings", return_value=_settings(tmp_path)),
            patch("jobcrawler.pipeline.runner.PipelineRunner", runner_cls),
        ):
            handle_crawl(args)
        return runner_cls

    def test_summary_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        store = ListingStore(tmp_path / "listings.db")
        store.save(
            make_listing("https://www.indeed.com/viewjob?jk=1", salary_text="$80,000 - $100,000 a year")
        )
        stored = store.search("engineer", ["Austin, TX"])
        result = RunResult(jobs_scraped=5, jobs_saved=4, jobs=stored)

        runner_cls = self._run(
            tmp_path,
            ["crawl", "engineer", "--location", "Austin, TX", "--min-salary", "50000"],
            result,
        )
        out = capsys.readouterr().out

        runner_cls.return_value.run.assert_awaited_once_with("engineer", ["Austin, TX"], 50_000.0)
        assert "Jobs scraped:    5" in out
        assert "Jobs saved:      4" in out
        assert "Matching jobs:   1" in out
        assert "$80,000-$100,000" in out
        assert "indeed.com" in out

    def test_json_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        self._run(
            tmp_path,
            ["crawl", "engineer", "--location", "Remote", "--json"],
            RunResult(jobs_scraped=2, jobs_saved=2),
        )

        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["jobsScraped"] == 2
        assert data["matchingJobs"] == 0

    def test_failed_run_prints_reason(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        self._run(
            tmp_path,
            ["crawl", "engineer", "--location", "Remote"],
            RunResult.failed("Browser session failed to start: no chromium"),
        )

        assert "Crawl failed: Browser session failed to start" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# TestSearchCommand
# ---------------------------------------------------------------------------


class TestSearchCommand:
    """
    REQUIREMENT: 'search' queries saved listings without opening a browser.

    WHO: The operator revisiting earlier crawls
    WHAT: Matching rows are printed with a count; no match prints a hint
    WHY: Re-crawling just to re-read results is slow and risks a block
    """

    def test_prints_matches(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        store = ListingStore(tmp_path / "listings.db")
        store.save(make_listing("https://example.org/1", title="Platform Engineer"))
        store.save(make_listing("https://example.org/2", title="Designer"))
        args = build_parser().parse_args(["search", "engineer", "--location", "Austin, TX"])

        with patch("jobcrawler.cli.load_settings", return_value=_settings(tmp_path)):
            handle_search(args)
        out = capsys.readouterr().out

        assert "1 saved listing(s) of 2 match" in out
        assert "Platform Engineer" in out
        assert "Designer" not in out

    def test_no_matches_prints_hint(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        args = build_parser().parse_args(["search", "engineer", "--location", "Austin, TX"])

        with patch("jobcrawler.cli.load_settings", return_value=_settings(tmp_path)):
            handle_search(args)

        assert "Run 'crawl'" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# TestErrorExit
# ---------------------------------------------------------------------------


class TestErrorExit:
    """
    REQUIREMENT: Actionable errors end the process with guidance and status 1.

    WHO: The operator; shell scripts checking the exit code
    WHAT: The error message and suggestion go to stderr; exit status is 1
    WHY: A traceback hides the one line the operator needs
    """

    def test_missing_config_exits_with_suggestion(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path / "missing.toml"), "search", "engineer", "--location", "Remote"])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Settings file not found" in err
        assert "Suggestion:" in err

    def test_validation_error_exits_nonzero(self, tmp_path: Path) -> None:
        with (
            patch("jobcrawler.cli.load_settings", return_value=_settings(tmp_path)),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["search", "   ", "--location", "Remote"])

        assert exc_info.value.code == 1

    def test_unexpected_actionable_error_from_handler(self, tmp_path: Path) -> None:
        with (
            patch("jobcrawler.__main__.handle_boards", side_effect=ActionableError.unexpected("x", "y", "z")),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["boards"])

        assert exc_info.value.code == 1
