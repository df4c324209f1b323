"""Explicit name -> event type catalog.

Populated at startup so subscribers can refer to event types by a
dotted name without importing them.  No dynamic imports are performed:
a name resolves only if the type was registered under it.
"""

from __future__ import annotations

import threading

import structlog

from eventcore.core.exceptions import ConfigurationError, TypeResolutionError

logger = structlog.get_logger(__name__)


def qualified_name(event_type: type) -> str:
    """Dotted ``module.QualName`` path of *event_type*."""
    return f"{event_type.__module__}.{event_type.__qualname__}"


class EventTypeCatalog:
    """Thread-safe registry of event type names."""

    def __init__(self) -> None:
        self._types: dict[str, type] = {}
        self._lock = threading.Lock()

    def register(self, event_type: type, *aliases: str) -> type:
        """Register *event_type* under its qualified name and any *aliases*.

        Returns the type unchanged so it can be used as a class decorator.

        Raises:
            ConfigurationError: If a name is already bound to another type.
        """
        names = (qualified_name(event_type), *aliases)
        with self._lock:
            for name in names:
                existing = self._types.get(name)
                if existing is not None and existing is not event_type:
                    raise ConfigurationError(
                        f"Event type name already registered: {name}",
                        {"name": name, "existing": qualified_name(existing)},
                    )
            for name in names:
                self._types[name] = event_type
        logger.debug("catalog.registered", names=list(names))
        return event_type

    def resolve(self, name: str) -> type:
        """Return the type registered under *name*.

        Raises:
            TypeResolutionError: If *name* is unknown.
        """
        try:
            return self._types[name]
        except KeyError:
            raise TypeResolutionError(name) from None

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types
