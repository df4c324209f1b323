"""Core error taxonomy for eventcore."""

from eventcore.core.exceptions import (
    ChannelClosedError,
    ConfigurationError,
    DomainError,
    EventCoreError,
    OfferTimeoutError,
    TypeResolutionError,
)
from eventcore.core.formatting import format_failure

__all__ = [
    "EventCoreError",
    "ConfigurationError",
    "TypeResolutionError",
    "OfferTimeoutError",
    "ChannelClosedError",
    "DomainError",
    "format_failure",
]
