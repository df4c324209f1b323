"""Custom exceptions for eventcore."""

from __future__ import annotations

from typing import Any


class EventCoreError(Exception):
    """Base exception for all eventcore errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(EventCoreError):
    """Raised when a component is constructed with invalid settings."""

    pass


class TypeResolutionError(EventCoreError):
    """Raised when an event type name does not resolve to a known type."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown event type: {name}", {"name": name})
        self.name = name


class OfferTimeoutError(EventCoreError):
    """Raised when an event could not be buffered before the offer timeout."""

    pass


class ChannelClosedError(EventCoreError):
    """Raised when offering to a channel that is shutting down."""

    pass


class DomainError(EventCoreError):
    """Base for failures raised by application handlers.

    ``details`` are rendered into the diagnostic message when a consumer
    loop reports the failure.
    """

    pass
