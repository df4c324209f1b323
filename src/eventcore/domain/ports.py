"""Port definitions (hexagonal architecture).

Producers and consumers depend only on these Protocols, never on the
concrete registry or channel implementations.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

Handler = Callable[[Any], Any]
BatchHandler = Callable[[Iterator[Any]], Any]


@runtime_checkable
class EventBus(Protocol):
    """Synchronous publish/subscribe keyed by exact event type."""

    def publish(self, event: Any) -> None: ...
    def subscribe(self, event_type: type | str, handler: Handler) -> None: ...


@runtime_checkable
class EventChannel(Protocol[T]):
    """Bounded asynchronous hand-off to background consumers."""

    def offer(self, event: T) -> None: ...
    def run_consumer(self, handler: Callable[[T], Any], name: str | None = None) -> Any: ...
    def run_stream_consumer(self, handler: BatchHandler, name: str | None = None) -> Any: ...
    def shutdown(self, timeout: float | None = None) -> bool: ...


@runtime_checkable
class ShutdownHooks(Protocol):
    """Process-exit callback registration."""

    def register(self, callback: Callable[[], Any]) -> None: ...
