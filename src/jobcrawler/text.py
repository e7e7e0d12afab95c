"""Text normalization utilities for scraped listings.

Pure functions with no browser or storage dependencies — safe to import
from any layer (adapters, storage, CLI).

Salary strings are kept raw on the listing; :func:`extract_salary_value`
derives the annual-equivalent number on demand so the same text always
yields the same value no matter how often it is re-parsed.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

# ---------------------------------------------------------------------------
# Salary
# ---------------------------------------------------------------------------

# 80,000  80000  95.50  120k  120K
_NUMBER = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s?([kK](?![a-zA-Z]))?")

_HOURLY = re.compile(r"hour|(?<![a-z])hrs?\b", re.IGNORECASE)

_HOURS_PER_WEEK = 40
_WEEKS_PER_YEAR = 52


def _to_number(digits: str) -> float:
    return float(digits.replace(",", ""))


def extract_salary_value(text: str | None) -> float | None:
    """Derive an annual-equivalent salary from free text.

    Takes the first numeric token, or the mean of the first two when the
    text is a range.  A ``k`` suffix multiplies by 1000; in a range it
    applies to both bounds, so ``"$80-100K"`` reads as 80,000 to 100,000.
    An hourly rate (``hour``/``hr`` anywhere in the text) is annualized
    as ``rate * 40 * 52``.

    >>> extract_salary_value("$80,000 - $100,000")
    90000.0
    >>> extract_salary_value("$80-100K")
    90000.0
    >>> extract_salary_value("$25/hour")
    52000.0
    >>> extract_salary_value("no salary listed") is None
    True
    """
    if not text:
        return None

    matches = list(_NUMBER.finditer(text))[:2]
    if not matches:
        return None

    tokens = [_to_number(m.group(1)) for m in matches]
    if any(m.group(2) for m in matches):
        # A bare bound below 1000 shares its partner's suffix
        tokens = [
            value * 1_000 if m.group(2) or value < 1_000 else value
            for m, value in zip(matches, tokens, strict=True)
        ]

    value = sum(tokens) / len(tokens)
    if _HOURLY.search(text):
        value *= _HOURS_PER_WEEK * _WEEKS_PER_YEAR
    return value


def format_salary(text: str | None) -> str | None:
    """Compact display form of a raw salary string.

    ``"$80,000 - $100,000 a year"`` becomes ``"$80,000-$100,000"``;
    text without digits returns ``None``.
    """
    if not text:
        return None
    numbers = [m.group(0).replace(" ", "").rstrip(",") for m in _NUMBER.finditer(text)][:2]
    if not numbers:
        return None
    return "-".join(f"${n}" for n in numbers)


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

_LOCATION_LABEL = re.compile(r"^\s*location\s*:\s*", re.IGNORECASE)
_REMOTE_IN = re.compile(r"^remote\s+in\s+(.+)$", re.IGNORECASE)
_HYBRID_IN = re.compile(r"^hybrid\s+(?:work\s+)?in\s+(.+)$", re.IGNORECASE)
_BARE_REMOTE = re.compile(
    r"^(?:fully\s+|100%\s+)?remote(?:\s+(?:work|job|position|only|ok))?$",
    re.IGNORECASE,
)


def normalize_location(text: str | None) -> str:
    """Normalize a free-form location string.

    >>> normalize_location("Remote in United States")
    'Remote (United States)'
    >>> normalize_location("Hybrid in Austin, TX")
    'Hybrid (Austin, TX)'
    >>> normalize_location("New York, NY")
    'New York, NY'
    """
    if not text:
        return ""
    location = _LOCATION_LABEL.sub("", text).strip()

    match = _REMOTE_IN.match(location)
    if match:
        return f"Remote ({match.group(1).strip()})"
    if _BARE_REMOTE.match(location):
        return "Remote"
    match = _HYBRID_IN.match(location)
    if match:
        return f"Hybrid ({match.group(1).strip()})"
    return location


# ---------------------------------------------------------------------------
# Description
# ---------------------------------------------------------------------------

_WHITESPACE = re.compile(r"\s+")

# Leading "About us ..." intro up to the first responsibilities/requirements heading
_COMPANY_INTRO = re.compile(
    r"^about\s+(?:us|the\s+company|the\s+team|our\s+company)\b.*?"
    r"(?=\b(?:responsibilities|requirements)\b)",
    re.IGNORECASE,
)

_EEO_SENTENCE = re.compile(
    r"[^.]*\bequal\s+(?:employment\s+)?opportunity\s+employer\b[^.]*\.?",
    re.IGNORECASE,
)


def clean_description(text: str | None) -> str:
    """Collapse whitespace and strip known boilerplate from a job description.

    Removes the company "About us" intro that precedes the
    responsibilities/requirements section and any equal-opportunity
    employer sentence.  Already-clean text is a fixed point.
    """
    if not text:
        return ""
    cleaned = _WHITESPACE.sub(" ", text).strip()
    # Removing one span can expose another (an EEO sentence hiding the intro)
    while True:
        stripped = _COMPANY_INTRO.sub("", cleaned)
        stripped = _EEO_SENTENCE.sub("", stripped)
        stripped = _WHITESPACE.sub(" ", stripped).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


_TAG = re.compile(r"<[^>]*>")


def clean_html(html: str) -> str:
    """Strip tags and collapse whitespace."""
    return _WHITESPACE.sub(" ", _TAG.sub(" ", html)).strip()


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------


def extract_domain(url: str) -> str:
    """Return the registrable domain of *url*, or ``"unknown"``.

    >>> extract_domain("https://www.linkedin.com/jobs/view/123")
    'linkedin.com'
    """
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return "unknown"
    if not hostname:
        return "unknown"
    parts = hostname.split(".")
    if len(parts) > 2:
        return ".".join(parts[-2:])
    return hostname
