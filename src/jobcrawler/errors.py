"""Actionable error hierarchy for the job crawler.

Errors are classified by **recovery path**, not by origin.
Each error type carries structured guidance for three audiences:
  - The calling code (typed ``error_type`` for routing)
  - The human operator (``suggestion`` + ``troubleshooting`` steps)
  - An AI agent (``ai_guidance`` with concrete next actions)

Only :class:`SessionInitError` (and configuration problems caught at
startup) abort a crawl.  Every other kind degrades the result set:
a timed-out page yields zero listings, a malformed card is skipped,
a failed sink write is left out of the saved count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------


class ErrorType(StrEnum):
    """Recovery-path categories — what to *do*, not where it came from."""

    SESSION = "session"
    NAVIGATION = "navigation"
    EXTRACTION = "extraction"
    STORAGE = "storage"
    CONFIG = "config"
    PARSE = "parse"
    VALIDATION = "validation"
    UNEXPECTED = "unexpected"


# Kinds that end the whole crawl request
_FATAL_TYPES = frozenset({ErrorType.SESSION, ErrorType.CONFIG})


# ---------------------------------------------------------------------------
# Guidance dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AIGuidance:
    """Machine-readable guidance for an AI agent consuming this error."""

    action_required: str
    command: str | None = None
    checks: list[str] | None = None
    steps: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"action_required": self.action_required}
        if self.command is not None:
            result["command"] = self.command
        if self.checks is not None:
            result["checks"] = self.checks
        if self.steps is not None:
            result["steps"] = self.steps
        return result


@dataclass(frozen=True)
class Troubleshooting:
    """Sequential, human-readable recovery steps for the operator."""

    steps: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"steps": self.steps}


# ---------------------------------------------------------------------------
# Base actionable error
# ---------------------------------------------------------------------------


@dataclass
class ActionableError(Exception):
    """Structured error with embedded recovery guidance.

    Use the factory classmethods rather than constructing directly —
    they pick the right subclass and encode the recovery advice.
    """

    error: str
    error_type: ErrorType
    service: str

    success: bool = field(default=False, init=False)
    suggestion: str | None = None
    ai_guidance: AIGuidance | None = None
    troubleshooting: Troubleshooting | None = None
    context: dict[str, Any] | None = None
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def __post_init__(self) -> None:
        super().__init__(self.error)

    @property
    def is_recoverable(self) -> bool:
        """True when the crawl may continue with a smaller result set."""
        return self.error_type not in _FATAL_TYPES

    # -- serialisation -------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Compact JSON-ready dict — ``None`` values are excluded."""
        result: dict[str, Any] = {
            "success": self.success,
            "error": self.error,
            "error_type": self.error_type.value,
            "service": self.service,
            "timestamp": self.timestamp,
        }
        if self.suggestion is not None:
            result["suggestion"] = self.suggestion
        if self.ai_guidance is not None:
            result["ai_guidance"] = self.ai_guidance.to_dict()
        if self.troubleshooting is not None:
            result["troubleshooting"] = self.troubleshooting.to_dict()
        if self.context is not None:
            result["context"] = self.context
        return result

    # -- factory methods -----------------------------------------------------

    @classmethod
    def session_init(
        cls,
        raw_error: str,
        *,
        suggestion: str | None = None,
    ) -> SessionInitError:
        """The browser runtime could not start — fatal to the crawl."""
        return SessionInitError(
            error=f"Browser session failed to start: {raw_error}",
            error_type=ErrorType.SESSION,
            service="playwright",
            suggestion=suggestion or "Install the browser binaries with 'playwright install chromium'",
            ai_guidance=AIGuidance(
                action_required="Make the Playwright Chromium runtime available",
                command="playwright install --with-deps chromium",
                checks=[
                    "Is the playwright package installed in this environment?",
                    "Were the browser binaries downloaded for this Playwright version?",
                    "Are system libraries for headless Chromium present?",
                ],
            ),
            troubleshooting=Troubleshooting(
                steps=[
                    "1. Run: playwright install --with-deps chromium",
                    "2. Verify a headless launch works outside the crawler",
                    "3. Re-run the crawl",
                ]
            ),
        )

    @classmethod
    def navigation_timeout(
        cls,
        board: str,
        url: str,
        timeout_ms: int,
    ) -> NavigationTimeoutError:
        """A page did not settle within its bounded timeout."""
        return NavigationTimeoutError(
            error=f"Navigation to {url} on {board} timed out after {timeout_ms}ms",
            error_type=ErrorType.NAVIGATION,
            service=board,
            suggestion=f"Increase [timeouts].navigation_ms or retry {board} later",
            ai_guidance=AIGuidance(
                action_required="Treat the page as empty; do not retry within this request",
                checks=[
                    f"Is {board} reachable from this network?",
                    "Is the board serving a challenge page that never settles?",
                ],
            ),
            context={"url": url, "timeout_ms": timeout_ms},
        )

    @classmethod
    def field_missing(
        cls,
        board: str,
        field_name: str,
        *,
        selector: str | None = None,
    ) -> ExtractionFieldMissingError:
        """A result card lacked a required field — the card is skipped."""
        where = f" (selector '{selector}')" if selector else ""
        return ExtractionFieldMissingError(
            error=f"Missing required field '{field_name}' on {board} card{where}",
            error_type=ErrorType.EXTRACTION,
            service=board,
            suggestion=f"If every {board} card is skipped, the card markup may have changed",
            ai_guidance=AIGuidance(
                action_required=f"Inspect a {board} result card and update the selector contract",
                checks=[
                    f"Open a {board} search page in a real browser",
                    f"Verify the '{field_name}' element still exists on each card",
                ],
            ),
            context={"field": field_name, "selector": selector} if selector else {"field": field_name},
        )

    @classmethod
    def sink_write(
        cls,
        url: str,
        raw_error: str,
    ) -> SinkWriteError:
        """One listing could not be saved — the rest of the batch continues."""
        return SinkWriteError(
            error=f"Failed to save listing {url}: {raw_error}",
            error_type=ErrorType.STORAGE,
            service="sqlite",
            suggestion="Check the database file is writable and not locked by another process",
            ai_guidance=AIGuidance(
                action_required="Verify the listings database is healthy",
                checks=[
                    "Is [storage].db_path on a writable filesystem?",
                    "Is another process holding a long write lock?",
                ],
            ),
            context={"url": url},
        )

    @classmethod
    def config(
        cls,
        field_name: str,
        reason: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Missing or invalid configuration in settings.toml."""
        return cls(
            error=f"Configuration error — {field_name}: {reason}",
            error_type=ErrorType.CONFIG,
            service="settings.toml",
            suggestion=suggestion or f"Fix '{field_name}' in config/settings.toml",
            ai_guidance=AIGuidance(
                action_required=f"Correct the '{field_name}' value in config/settings.toml",
                checks=[
                    "Verify config/settings.toml exists",
                    f"Verify '{field_name}' is present and valid",
                ],
            ),
            troubleshooting=Troubleshooting(
                steps=[
                    "1. Open config/settings.toml",
                    f"2. Locate the '{field_name}' setting",
                    f"3. Fix the issue: {reason}",
                    "4. Save and re-run",
                ]
            ),
        )

    @classmethod
    def parse(
        cls,
        source: str,
        location: str,
        raw_error: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Structured input (TOML, page markup) could not be parsed."""
        return cls(
            error=f"Parse failure in {source} at {location}: {raw_error}",
            error_type=ErrorType.PARSE,
            service=source,
            suggestion=suggestion or f"Fix the malformed input in {source}",
            ai_guidance=AIGuidance(
                action_required=f"Inspect {source} near {location}",
            ),
        )

    @classmethod
    def validation(
        cls,
        field_name: str,
        reason: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Input validation failure (TOML values, crawl request, CLI args)."""
        return cls(
            error=f"Validation error — {field_name}: {reason}",
            error_type=ErrorType.VALIDATION,
            service="validation",
            suggestion=suggestion or f"Fix '{field_name}': {reason}",
            ai_guidance=AIGuidance(
                action_required=f"Correct the value for '{field_name}'",
            ),
            troubleshooting=Troubleshooting(
                steps=[
                    f"1. Check the value of '{field_name}'",
                    f"2. Issue: {reason}",
                    "3. Correct and retry",
                ]
            ),
        )

    @classmethod
    def unexpected(
        cls,
        service: str,
        operation: str,
        raw_error: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Catch-all for truly unexpected failures."""
        return cls(
            error=f"Unexpected error in {service} during {operation}: {raw_error}",
            error_type=ErrorType.UNEXPECTED,
            service=service,
            suggestion=suggestion or "This is an unexpected error — check logs for details",
            ai_guidance=AIGuidance(
                action_required="Analyze the error and escalate if needed",
                checks=[
                    "Check the full traceback in logs",
                    f"Is {service} in a known-good state?",
                ],
            ),
        )

    @classmethod
    def from_exception(
        cls,
        error: Exception,
        service: str,
        operation: str,
        *,
        url: str = "",
        timeout_ms: int = 0,
    ) -> ActionableError:
        """Auto-classify a browser exception by keyword patterns."""
        error_str = str(error).lower()

        if any(kw in error_str for kw in ("timeout", "timed out")):
            return cls.navigation_timeout(service, url or "<unknown>", timeout_ms)

        if any(kw in error_str for kw in ("executable doesn't exist", "failed to launch")):
            return cls.session_init(str(error))

        return cls.unexpected(service, operation, str(error))


# ---------------------------------------------------------------------------
# Named error kinds
# ---------------------------------------------------------------------------


class SessionInitError(ActionableError):
    """Automation runtime failed to start; aborts the crawl request."""


class NavigationTimeoutError(ActionableError):
    """A navigation or wait exceeded its bound; that unit yields nothing."""


class ExtractionFieldMissingError(ActionableError):
    """A card lacked title, company, location or link; the card is skipped."""


class SinkWriteError(ActionableError):
    """A single listing failed to persist; other saves are unaffected."""
