"""Adapter registry — IoC loader and factory for job board adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from jobcrawler.adapters.base import JobBoardAdapter


class AdapterRegistry:
    """Decorator-based registry that maps board name strings to adapter classes.

    Usage::

        @AdapterRegistry.register
        class IndeedAdapter(JobBoardAdapter):
            @property
            def board_name(self) -> str:
                return "indeed"
            ...

    The orchestrator only ever sees board names from settings, so adding a
    board means writing an adapter module, not touching the crawl loop.
    """

    _registry: ClassVar[dict[str, type[JobBoardAdapter]]] = {}

    @classmethod
    def register(cls, adapter_class: type[JobBoardAdapter]) -> type[JobBoardAdapter]:
        """Class decorator — registers an adapter by its ``board_name``."""
        instance = adapter_class.__new__(adapter_class)
        cls._registry[instance.board_name] = adapter_class
        return adapter_class

    @classmethod
    def unregister(cls, board_name: str) -> None:
        """Remove *board_name* if present (used by tests registering fakes)."""
        cls._registry.pop(board_name, None)

    @classmethod
    def get(cls, board_name: str, **kwargs: Any) -> JobBoardAdapter:
        """Return a new adapter for *board_name*, passing *kwargs* to its constructor."""
        if board_name not in cls._registry:
            msg = f"No adapter registered for board: '{board_name}'"
            raise ValueError(msg)
        return cls._registry[board_name](**kwargs)

    @classmethod
    def list_registered(cls) -> list[str]:
        """Return all registered board name strings in registration order."""
        return list(cls._registry.keys())
