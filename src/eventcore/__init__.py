"""eventcore: in-process event registry and bounded event channels."""

from eventcore.core.exceptions import (
    ChannelClosedError,
    ConfigurationError,
    DomainError,
    EventCoreError,
    OfferTimeoutError,
    TypeResolutionError,
)
from eventcore.domain.enums import ChannelState
from eventcore.infrastructure.events import (
    BoundedEventChannel,
    ConsumerWorker,
    EventRegistry,
    EventTypeCatalog,
)
from eventcore.infrastructure.lifecycle import (
    AtexitShutdownHooks,
    ManualShutdownHooks,
    install_signal_handlers,
)

__version__ = "0.1.0"

__all__ = [
    # Registry
    "EventRegistry",
    "EventTypeCatalog",
    # Channel
    "BoundedEventChannel",
    "ConsumerWorker",
    "ChannelState",
    # Lifecycle
    "AtexitShutdownHooks",
    "ManualShutdownHooks",
    "install_signal_handlers",
    # Exceptions
    "EventCoreError",
    "ConfigurationError",
    "TypeResolutionError",
    "OfferTimeoutError",
    "ChannelClosedError",
    "DomainError",
]
