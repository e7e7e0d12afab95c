"""Pipeline runner — crawl → save → report matches.

The PipelineRunner is the top-level entry point that ties the system
together for one request:

1. Validate the request (title, locations, minimum salary)
2. Build the configured adapters from the registry
3. Crawl every (location, source) pair inside one stealth session
4. Upsert the scraped listings into the sink
5. Query the sink for stored listings matching the request

The runner owns the control flow but delegates all domain logic to
specialized components (orchestrator, adapters, store).  Fatal crawl
failures are reported in the :class:`RunResult` instead of raised, so a
caller always gets a structured answer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from jobcrawler.adapters import AdapterRegistry, Timeouts
from jobcrawler.adapters.pacing import Pacer
from jobcrawler.adapters.session import SessionConfig, SessionFactory
from jobcrawler.errors import ActionableError, SessionInitError
from jobcrawler.pipeline.crawler import CrawlOrchestrator, CrawlRequest
from jobcrawler.storage.store import ListingStore, PersistedListing

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jobcrawler.adapters.base import JobBoardAdapter
    from jobcrawler.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of one crawl request, consumed by the CLI and JSON output."""

    success: bool = True
    jobs_scraped: int = 0
    jobs_saved: int = 0
    jobs: list[PersistedListing] = field(default_factory=list)
    error: str | None = None

    @property
    def matching_jobs(self) -> int:
        return len(self.jobs)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "jobsScraped": self.jobs_scraped,
            "jobsSaved": self.jobs_saved,
            "matchingJobs": self.matching_jobs,
            "jobs": [job.to_dict() for job in self.jobs],
        }
        if self.error is not None:
            result["error"] = self.error
        return result

    @classmethod
    def failed(cls, reason: str) -> RunResult:
        return cls(success=False, error=reason)


class PipelineRunner:
    """Runs a crawl request end to end: adapters → orchestrator → sink.

    Collaborators can be injected for tests; by default they are built
    from *settings*.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        store: ListingStore | None = None,
        session_factory: SessionFactory | None = None,
        pacer: Pacer | None = None,
    ) -> None:
        self._settings = settings
        self._store = store or ListingStore(settings.storage.db_path)
        self._sessions = session_factory or SessionFactory(
            SessionConfig(
                headless=settings.crawler.headless,
                stealth=settings.crawler.stealth,
            )
        )
        self._pacer = pacer or Pacer()

    @property
    def store(self) -> ListingStore:
        return self._store

    async def run(
        self,
        title: str,
        locations: Sequence[str],
        min_salary: float | None = None,
    ) -> RunResult:
        """Crawl, save and return the stored listings matching the request.

        Raises :class:`~jobcrawler.errors.ActionableError` (VALIDATION) for
        a malformed request and (CONFIG) for an unknown board.  Once the
        crawl has started no exception escapes: a browser that will not
        start, a crawl longer than ``[crawler].request_timeout`` and any
        other orchestrator failure each produce a failed :class:`RunResult`
        after the session has been closed.
        """
        request = CrawlRequest.create(title, locations, min_salary)
        adapters = self._build_adapters()

        logger.info(
            "Crawling '%s' in %s across %s",
            request.title,
            ", ".join(request.locations),
            ", ".join(a.board_name for a in adapters),
        )

        orchestrator = CrawlOrchestrator(
            adapters,
            self._sessions,
            pacer=self._pacer,
            pacing=self._settings.pacing,
        )
        timeout = self._settings.crawler.request_timeout
        try:
            if timeout > 0:
                scraped = await asyncio.wait_for(orchestrator.run(request), timeout=timeout)
            else:
                scraped = await orchestrator.run(request)
        except SessionInitError as exc:
            logger.error("%s", exc.error)
            return RunResult.failed(exc.error)
        except TimeoutError:
            reason = f"Crawl exceeded the {timeout:g}s request timeout"
            logger.error(reason)
            return RunResult.failed(reason)
        except ActionableError as exc:
            logger.error("%s", exc.error)
            return RunResult.failed(exc.error)
        except Exception as exc:
            err = ActionableError.from_exception(exc, "pipeline", "crawl")
            logger.exception("%s", err.error)
            return RunResult.failed(err.error)

        saved = self._store.save_many(scraped)
        matches = self._store.search(request.title, request.locations, request.min_salary)
        logger.info(
            "Run complete: %d scraped, %d saved, %d matching",
            len(scraped),
            len(saved),
            len(matches),
        )
        return RunResult(
            success=True,
            jobs_scraped=len(scraped),
            jobs_saved=len(saved),
            jobs=matches,
        )

    def _build_adapters(self) -> list[JobBoardAdapter]:
        crawler = self._settings.crawler
        pacing = self._settings.pacing
        timeouts = Timeouts(
            navigation_ms=self._settings.timeouts.navigation_ms,
            detail_ms=self._settings.timeouts.detail_ms,
        )
        adapters: list[JobBoardAdapter] = []
        for name in crawler.boards:
            try:
                adapter = AdapterRegistry.get(
                    name,
                    pacer=self._pacer,
                    timeouts=timeouts,
                    max_results=crawler.max_results,
                    settle_delay=pacing.settle,
                    card_delay=pacing.between_cards,
                )
            except ValueError as exc:
                raise ActionableError.config(
                    field_name="crawler.boards",
                    reason=str(exc),
                    suggestion=f"Use one of: {', '.join(sorted(AdapterRegistry.list_registered()))}",
                ) from exc
            adapters.append(adapter)
        return adapters
