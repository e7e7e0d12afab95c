"""Configuration loading and validation.

Loads ``settings.toml`` and validates all fields at startup, before any
browser session is opened.  A bad pacing range discovered after the
first board has already been crawled wastes minutes of browser work;
the same mistake caught here costs nothing.

The validated config is exposed as a :class:`Settings` dataclass with
typed fields for each section: ``crawler``, ``timeouts``, ``pacing``,
``storage`` and ``logging``.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from jobcrawler.errors import ActionableError

# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass
class CrawlerConfig:
    """Board selection and browser behaviour from ``[crawler]``."""

    boards: list[str] = field(default_factory=lambda: ["indeed", "linkedin"])
    max_results: int = 15
    headless: bool = True
    stealth: bool = True
    request_timeout: float = 0.0


@dataclass
class TimeoutConfig:
    """Bounded waits in milliseconds from ``[timeouts]``."""

    navigation_ms: int = 10_000
    detail_ms: int = 5_000


@dataclass
class PacingConfig:
    """(min, max) second ranges for randomized delays from ``[pacing]``."""

    settle: tuple[float, float] = (1.0, 2.0)
    between_cards: tuple[float, float] = (0.5, 1.0)
    between_sources: tuple[float, float] = (1.0, 3.0)
    between_locations: tuple[float, float] = (2.0, 5.0)


@dataclass
class StorageConfig:
    """Listing sink settings from ``[storage]``."""

    db_path: str = "data/listings.db"


@dataclass
class LoggingConfig:
    """Log file settings from ``[logging]``."""

    log_dir: str = "data/logs"
    file_logging: bool = False


@dataclass
class Settings:
    """Top-level validated configuration."""

    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    pacing: PacingConfig = field(default_factory=PacingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Default settings path
# ---------------------------------------------------------------------------

DEFAULT_SETTINGS_PATH = Path("config/settings.toml")

_PACING_FIELDS = ("settle", "between_cards", "between_sources", "between_locations")


# ---------------------------------------------------------------------------
# Loading and validation
# ---------------------------------------------------------------------------


def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    """Load and validate settings from a TOML file.

    Raises :class:`~jobcrawler.errors.ActionableError`:
      - CONFIG if the file is missing or a required field is absent
      - VALIDATION if field values are out of range
      - PARSE if the TOML is malformed

    Returns a fully validated :class:`Settings` instance.
    """
    filepath = Path(path)
    if not filepath.exists():
        raise ActionableError.config(
            field_name="settings_path",
            reason=f"Settings file not found: {filepath}",
            suggestion=f"Create {filepath} or copy from config/settings.toml",
        )

    raw_text = filepath.read_text(encoding="utf-8")
    try:
        data = tomllib.loads(raw_text)
    except tomllib.TOMLDecodeError as exc:
        raise ActionableError.parse(
            source=str(filepath),
            location="TOML syntax",
            raw_error=str(exc),
            suggestion=f"Fix TOML syntax in {filepath}",
        ) from None

    return _validate(data, filepath)


def _validate(data: dict[str, object], filepath: Path) -> Settings:
    """Validate raw TOML data and return a Settings instance."""

    # -- crawler section -----------------------------------------------------
    crawler_section = _require_section(data, "crawler", filepath)
    boards = _require_field(crawler_section, "boards", "crawler", filepath)
    if not isinstance(boards, list) or not boards or not all(isinstance(b, str) and b for b in boards):
        raise ActionableError.config(
            field_name="crawler.boards",
            reason="crawler.boards must be a non-empty list of board names",
            suggestion="List at least one board, e.g. boards = [\"indeed\", \"linkedin\"]",
        )

    crawler = CrawlerConfig(
        boards=list(boards),
        max_results=_as_int(crawler_section.get("max_results", 15), "crawler.max_results"),
        headless=bool(crawler_section.get("headless", True)),
        stealth=bool(crawler_section.get("stealth", True)),
        request_timeout=_as_float(crawler_section.get("request_timeout", 0.0), "crawler.request_timeout"),
    )
    if crawler.max_results < 1:
        raise ActionableError.validation(
            field_name="crawler.max_results",
            reason=f"is {crawler.max_results} — must be >= 1",
        )
    if crawler.request_timeout < 0:
        raise ActionableError.validation(
            field_name="crawler.request_timeout",
            reason=f"is {crawler.request_timeout} — must be >= 0 (0 disables the limit)",
        )

    # -- timeouts section ----------------------------------------------------
    timeouts_data = _optional_section(data, "timeouts")
    timeouts = TimeoutConfig(
        navigation_ms=_as_int(timeouts_data.get("navigation_ms", 10_000), "timeouts.navigation_ms"),
        detail_ms=_as_int(timeouts_data.get("detail_ms", 5_000), "timeouts.detail_ms"),
    )
    for name in ("navigation_ms", "detail_ms"):
        value = getattr(timeouts, name)
        if value <= 0:
            raise ActionableError.validation(
                field_name=f"timeouts.{name}",
                reason=f"is {value} — must be > 0",
                suggestion=f"Set [timeouts].{name} to a positive number of milliseconds",
            )

    # -- pacing section ------------------------------------------------------
    pacing_data = _optional_section(data, "pacing")
    defaults = PacingConfig()
    ranges = {
        name: _parse_range(pacing_data.get(name, getattr(defaults, name)), f"pacing.{name}")
        for name in _PACING_FIELDS
    }
    pacing = PacingConfig(**ranges)

    # -- storage section -----------------------------------------------------
    storage_data = _optional_section(data, "storage")
    storage = StorageConfig(db_path=str(storage_data.get("db_path", "data/listings.db")))

    # -- logging section -----------------------------------------------------
    logging_data = _optional_section(data, "logging")
    logging_cfg = LoggingConfig(
        log_dir=str(logging_data.get("log_dir", "data/logs")),
        file_logging=bool(logging_data.get("file_logging", False)),
    )

    return Settings(
        crawler=crawler,
        timeouts=timeouts,
        pacing=pacing,
        storage=storage,
        logging=logging_cfg,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _require_section(data: dict[str, object], name: str, filepath: Path) -> dict[str, object]:
    """Return a required top-level section, or raise CONFIG error."""
    section = data.get(name)
    if section is None or not isinstance(section, dict):
        raise ActionableError.config(
            field_name=name,
            reason=f"Required section [{name}] is missing from {filepath}",
            suggestion=f"Add a [{name}] section to {filepath}",
        )
    return section


def _optional_section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def _require_field(
    section: dict[str, object], field_name: str, section_name: str, filepath: Path
) -> object:
    """Return a required field within a section, or raise CONFIG error."""
    value = section.get(field_name)
    if value is None:
        raise ActionableError.config(
            field_name=f"{section_name}.{field_name}",
            reason=f"Required field '{field_name}' is missing from [{section_name}] in {filepath}",
            suggestion=f"Add '{field_name}' to the [{section_name}] section in {filepath}",
        )
    return value


def _parse_range(value: object, field_name: str) -> tuple[float, float]:
    """Validate a ``[min, max]`` seconds pair."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ActionableError.validation(
            field_name=field_name,
            reason=f"is {value!r} — must be a [min, max] pair of seconds",
        )
    lo, hi = _as_float(value[0], field_name), _as_float(value[1], field_name)
    if lo < 0 or hi < lo:
        raise ActionableError.validation(
            field_name=field_name,
            reason=f"is [{lo}, {hi}] — need 0 <= min <= max",
            suggestion=f"Set {field_name} to e.g. [1.0, 3.0]",
        )
    return (lo, hi)


def _as_int(value: object, field_name: str) -> int:
    """Coerce a TOML value to int, or raise VALIDATION error."""
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise ActionableError.validation(
            field_name=field_name,
            reason=f"is {value!r} — must be a whole number",
        ) from None


def _as_float(value: object, field_name: str) -> float:
    """Coerce a TOML value to float, or raise VALIDATION error."""
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ActionableError.validation(
            field_name=field_name,
            reason=f"is {value!r} — must be a number",
        ) from None
