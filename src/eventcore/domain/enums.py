"""Domain enumerations for eventcore."""

from __future__ import annotations

from enum import Enum


class ChannelState(str, Enum):
    """Lifecycle of a ``BoundedEventChannel``.

    IDLE -> RUNNING when the first consumer starts, -> DRAINING once
    shutdown is requested, -> DRAINED when the buffer is observed empty.
    There is no way back to an earlier state.
    """

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DRAINED = "drained"

    @property
    def accepts_offers(self) -> bool:
        return self in (ChannelState.IDLE, ChannelState.RUNNING)
