"""Adapter layer — IoC / Strategy pattern for job board integrations.

Importing this package triggers adapter registration via the
``@AdapterRegistry.register`` decorator on each concrete adapter.
"""

# Import concrete adapters to trigger registration
from jobcrawler.adapters import indeed as _indeed  # noqa: F401
from jobcrawler.adapters import linkedin as _linkedin  # noqa: F401
from jobcrawler.adapters.base import JobBoardAdapter, ScrapedListing, Timeouts
from jobcrawler.adapters.registry import AdapterRegistry

__all__ = ["AdapterRegistry", "JobBoardAdapter", "ScrapedListing", "Timeouts"]
