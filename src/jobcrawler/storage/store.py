"""SQLite listing sink.

Accepts crawl output, upserts each listing keyed by its URL, and serves
the filtered lookup used to report matching jobs back to the caller.

Every operation opens its own connection, so independent crawls (or
threads) can share one database file.  WAL mode plus a busy timeout lets
concurrent writers queue instead of failing; when two crawls write the
same URL the later write wins, which is fine because a listing is an
immutable snapshot of the posting.

Salary filtering re-derives the annual value from the stored raw text
on every query rather than storing a pre-computed column.
"""

from __future__ import annotations

import contextlib
import sqlite3
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jobcrawler.errors import ActionableError
from jobcrawler.logging import logger
from jobcrawler.text import extract_salary_value

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from jobcrawler.adapters.base import ScrapedListing

_SCHEMA = """
CREATE TABLE IF NOT EXISTS listings (
    id          INTEGER PRIMARY KEY,
    url         TEXT NOT NULL UNIQUE,
    title       TEXT NOT NULL,
    company     TEXT NOT NULL,
    location    TEXT NOT NULL,
    description TEXT NOT NULL,
    salary_text TEXT,
    source      TEXT NOT NULL,
    posted_date TEXT,
    scraped_at  TEXT NOT NULL
)
"""

_UPSERT = """
INSERT INTO listings
    (url, title, company, location, description, salary_text, source, posted_date, scraped_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(url) DO UPDATE SET
    title = excluded.title,
    company = excluded.company,
    location = excluded.location,
    description = excluded.description,
    salary_text = excluded.salary_text,
    source = excluded.source,
    posted_date = excluded.posted_date,
    scraped_at = excluded.scraped_at
"""


@dataclass(frozen=True)
class PersistedListing:
    """A stored listing with its sink-assigned id."""

    id: int
    title: str
    company: str
    location: str
    description: str
    url: str
    source: str
    salary_text: str | None
    posted_date: str | None
    scraped_at: str

    @property
    def annual_salary(self) -> float | None:
        return extract_salary_value(self.salary_text)

    def to_dict(self) -> dict[str, Any]:
        """Camel-cased dict for JSON output."""
        data = asdict(self)
        return {
            "id": data["id"],
            "title": data["title"],
            "company": data["company"],
            "location": data["location"],
            "description": data["description"],
            "salary": data["salary_text"],
            "url": data["url"],
            "source": data["source"],
            "postedDate": data["posted_date"],
            "scrapedAt": data["scraped_at"],
        }


class ListingStore:
    """Upsert-by-URL store for scraped listings.

    Usage::

        store = ListingStore("data/listings.db")
        ids = store.save_many(listings)
        matches = store.search("engineer", ["Remote", "Austin, TX"], 90_000)
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        self.saved_count = 0
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute(_SCHEMA)
        logger.debug("Listing store ready at %s", self.db_path)

    # -- writes --------------------------------------------------------------

    def save(self, listing: ScrapedListing) -> int:
        """Upsert one listing and return its id.

        Raises :class:`~jobcrawler.errors.SinkWriteError` on database errors.
        """
        scraped_at = datetime.now(timezone.utc).isoformat()
        try:
            with self._connect() as conn:
                conn.execute(
                    _UPSERT,
                    (
                        listing.url,
                        listing.title,
                        listing.company,
                        listing.location,
                        listing.description,
                        listing.salary_text,
                        listing.source,
                        listing.posted_date,
                        scraped_at,
                    ),
                )
                row = conn.execute("SELECT id FROM listings WHERE url = ?", (listing.url,)).fetchone()
        except sqlite3.Error as exc:
            raise ActionableError.sink_write(listing.url, str(exc)) from exc
        self.saved_count += 1
        return int(row[0])

    def save_many(self, listings: Iterable[ScrapedListing]) -> list[int]:
        """Upsert each listing independently and return the ids that were saved.

        A failed row is logged and left out; it never rolls back the others.
        """
        ids: list[int] = []
        failed = 0
        for listing in listings:
            try:
                ids.append(self.save(listing))
            except ActionableError as exc:
                logger.warning("%s", exc.error)
                failed += 1
        logger.info(
            "Saved %d listings (%d failed, %d saved by this store in total)",
            len(ids),
            failed,
            self.saved_count,
        )
        return ids

    # -- reads ---------------------------------------------------------------

    def search(
        self,
        title: str,
        locations: Sequence[str],
        min_salary: float = 0,
    ) -> list[PersistedListing]:
        """Return stored listings matching *title*, *locations* and *min_salary*.

        - ``title`` is a case-insensitive substring of the stored title
        - the stored location is a substring of any requested location,
          or contains "Remote" (both case-insensitive)
        - rows whose derived annual salary is below ``min_salary`` are
          dropped; rows without a derivable salary are kept
        """
        pattern = f"%{_escape_like(title.strip().lower())}%"
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM listings WHERE lower(title) LIKE ? ESCAPE '\\' "
                "ORDER BY scraped_at DESC, id DESC",
                (pattern,),
            ).fetchall()

        wanted = [loc.lower() for loc in locations]
        matches: list[PersistedListing] = []
        for row in rows:
            listing = _row_to_listing(row)
            if not _location_matches(listing.location, wanted):
                continue
            salary = listing.annual_salary
            if salary is not None and salary < min_salary:
                continue
            matches.append(listing)
        return matches

    def get_by_url(self, url: str) -> PersistedListing | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM listings WHERE url = ?", (url,)).fetchone()
        return _row_to_listing(row) if row else None

    def count(self) -> int:
        with self._connect() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM listings").fetchone()
        return int(n)

    # -- internals -----------------------------------------------------------

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _location_matches(stored: str, wanted: list[str]) -> bool:
    stored_lower = stored.strip().lower()
    if not stored_lower:
        return False
    if "remote" in stored_lower:
        return True
    return any(stored_lower in loc for loc in wanted)


def _row_to_listing(row: sqlite3.Row) -> PersistedListing:
    return PersistedListing(
        id=row["id"],
        title=row["title"],
        company=row["company"],
        location=row["location"],
        description=row["description"],
        url=row["url"],
        source=row["source"],
        salary_text=row["salary_text"],
        posted_date=row["posted_date"],
        scraped_at=row["scraped_at"],
    )
