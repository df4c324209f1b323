"""In-process event registry and bounded channel."""

from eventcore.infrastructure.events.catalog import EventTypeCatalog, qualified_name
from eventcore.infrastructure.events.channel import BoundedEventChannel, ConsumerWorker
from eventcore.infrastructure.events.registry import EventRegistry

__all__ = [
    "BoundedEventChannel",
    "ConsumerWorker",
    "EventRegistry",
    "EventTypeCatalog",
    "qualified_name",
]
