"""In-memory event registry.

Simple publish/subscribe for domain events.  Handlers are called
synchronously in registration order on the publishing thread.
Implements the ``EventBus`` port.
"""

from __future__ import annotations

import threading
from typing import Any, Callable

import structlog

from eventcore.core.exceptions import TypeResolutionError
from eventcore.infrastructure.events.catalog import EventTypeCatalog

logger = structlog.get_logger(__name__)


class EventRegistry:
    """Synchronous, exact-type event registry.

    Each type maps to an immutable tuple of handlers.  ``subscribe``
    replaces the tuple under a lock; ``publish`` reads a single tuple,
    so a publish in progress sees a consistent snapshot and never a
    half-appended list.

    Handler exceptions are not caught: they propagate to the caller of
    ``publish`` and the remaining handlers for that event are skipped.
    """

    def __init__(self, catalog: EventTypeCatalog | None = None) -> None:
        self._handlers: dict[type, tuple[Callable[..., Any], ...]] = {}
        self._lock = threading.Lock()
        self._catalog = catalog

    def subscribe(self, event_type: type | str, handler: Callable[..., Any]) -> None:
        """Register *handler* to be called when *event_type* is published.

        *event_type* may be a dotted name registered in the catalog.

        Raises:
            TypeResolutionError: If a name cannot be resolved.  Nothing is
                subscribed in that case.
        """
        if isinstance(event_type, str):
            event_type = self._resolve(event_type)

        with self._lock:
            self._handlers[event_type] = self._handlers.get(event_type, ()) + (handler,)
            count = len(self._handlers[event_type])

        logger.debug(
            "registry.subscribed",
            event_type=event_type.__qualname__,
            handlers=count,
        )

    def publish(self, event: Any) -> None:
        """Dispatch *event* to all registered handlers for its exact type."""
        for handler in self._handlers.get(type(event), ()):
            handler(event)

    def handlers_for(self, event_type: type) -> tuple[Callable[..., Any], ...]:
        return self._handlers.get(event_type, ())

    def has_subscribers(self, event_type: type) -> bool:
        return bool(self._handlers.get(event_type))

    def subscribed_types(self) -> list[type]:
        with self._lock:
            return list(self._handlers)

    def _resolve(self, name: str) -> type:
        if self._catalog is None:
            raise TypeResolutionError(name)
        return self._catalog.resolve(name)
