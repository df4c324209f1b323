"""Domain layer: enums and ports."""

from eventcore.domain.enums import ChannelState
from eventcore.domain.ports import EventBus, EventChannel, ShutdownHooks

__all__ = ["ChannelState", "EventBus", "EventChannel", "ShutdownHooks"]
